from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Request

from .catalog import ReviewCatalog
from .query import ReviewQuery, search_reviews
from .schemas import ReviewSearchResponse

router = APIRouter(prefix="/interactive-lesson/v1", tags=["Reviews"])


def get_catalog(request: Request) -> ReviewCatalog:
    return request.app.state.reviews


@router.get("/reviews", response_model=ReviewSearchResponse, summary="Search published reviews")
async def search(
    request: Request,
    q: Optional[str] = Query(None, description="Search query"),
    categories: Optional[str] = Query(None, description="Comma-separated category IDs"),
    tags: Optional[str] = Query(None, description="Comma-separated tag IDs"),
    page_no: Optional[str] = Query(None, description="Page number"),
    posts_per_page: Optional[str] = Query(None, description="Posts per page"),
    rating: Optional[str] = Query(None, description="Rating value or range (e.g., 4.5 or 3.0-5.0)"),
) -> ReviewSearchResponse:
    query = ReviewQuery.from_params(
        {
            "q": q,
            "categories": categories,
            "tags": tags,
            "page_no": page_no,
            "posts_per_page": posts_per_page,
            "rating": rating,
        }
    )
    return search_reviews(get_catalog(request), query)
