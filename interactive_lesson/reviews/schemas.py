from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    id: int = Field(..., ge=1)
    title: str
    url: str = "#"
    status: str = "publish"


class Review(BaseModel):
    id: int = Field(..., ge=1)
    title: str
    content: str = ""
    status: str = "publish"
    published_at: datetime
    permalink: str = ""
    thumbnail: str = ""
    categories: List[int] = Field(default_factory=list)
    tags: List[int] = Field(default_factory=list)
    rating: Optional[float] = None
    reviewer_name: str = ""
    product_id: Optional[int] = None


class ReviewPost(BaseModel):
    id: int
    title: str
    content: str
    date: str
    permalink: str
    thumbnail: str
    rating: Optional[float] = None
    product: Optional[str] = None
    product_url: str = "#"
    reviewer: str = ""


class ReviewSearchResponse(BaseModel):
    posts: List[ReviewPost] = Field(default_factory=list)
    posts_per_page: int
    total_posts: int
    no_of_pages: int
