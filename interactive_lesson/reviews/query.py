"""
Review search: request argument validation/sanitization and filtering.

Arguments are validated on their raw string form first and sanitized
afterwards, in the same order WordPress applies ``validate_callback`` and
``sanitize_callback`` to REST route arguments. Validation failures are
collected per parameter and reported together.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Optional, Tuple

from ..utils.errors import ValidationError
from ..utils.text import sanitize_text_field
from .catalog import ReviewCatalog
from .schemas import Review, ReviewPost, ReviewSearchResponse

DEFAULT_POSTS_PER_PAGE = 9
DEFAULT_PAGE = 1
MAX_SEARCH_LENGTH = 255
MAX_RATING = 5.0

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_numeric(value: str) -> bool:
    return bool(_NUMERIC_RE.match(value))


def validate_string(value: str) -> bool:
    return isinstance(value, str) and len(value) <= MAX_SEARCH_LENGTH


def validate_positive_integer(value: str) -> bool:
    return is_numeric(value) and math.isfinite(float(value)) and float(value) > 0


def validate_comma_separated_ids(value: str) -> bool:
    return all(is_numeric(part) for part in value.split(","))


def sanitize_comma_separated_ids(value: str) -> List[int]:
    ids = [
        abs(int(float(part)))
        for part in value.split(",")
        if is_numeric(part) and math.isfinite(float(part))
    ]
    return [i for i in ids if i]


def _parse_rating_range(value: str) -> Optional[Tuple[float, float]]:
    parts = value.split("-")
    if len(parts) != 2 or not all(is_numeric(p) for p in parts):
        return None
    return float(parts[0]), float(parts[1])


def validate_rating(value: str) -> bool:
    if is_numeric(value):
        return 0 <= float(value) <= MAX_RATING
    if "-" in value:
        bounds = _parse_rating_range(value)
        if bounds is None:
            return False
        low, high = bounds
        return low >= 0 and high <= MAX_RATING and low <= high
    return False


def one_decimal(value: float | str) -> Decimal:
    """Round to one decimal place, halves away from zero (SQL DECIMAL(3,1))."""
    return Decimal(str(value).strip()).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def sanitize_rating(value: str) -> str:
    if is_numeric(value):
        return str(one_decimal(value))
    if _parse_rating_range(value) is None:
        return ""
    low, high = value.split("-")
    return f"{one_decimal(low)}-{one_decimal(high)}"


@dataclass
class ReviewQuery:
    search: Optional[str] = None
    categories: List[int] = field(default_factory=list)
    tags: List[int] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_POSTS_PER_PAGE
    rating: Optional[str] = None

    @classmethod
    def from_params(cls, params: Mapping[str, Optional[str]]) -> "ReviewQuery":
        """Validate then sanitize raw query parameters.

        Raises:
            ValidationError: ``rest_invalid_param`` naming every bad parameter.
        """
        validators = {
            "q": validate_string,
            "categories": validate_comma_separated_ids,
            "tags": validate_comma_separated_ids,
            "page_no": validate_positive_integer,
            "posts_per_page": validate_positive_integer,
            "rating": validate_rating,
        }
        invalid: Dict[str, str] = {}
        for name, check in validators.items():
            value = params.get(name)
            if value is not None and not check(value):
                invalid[name] = f"Invalid parameter: {name}."
        if invalid:
            raise ValidationError(
                f"Invalid parameter(s): {', '.join(invalid)}",
                code="rest_invalid_param",
                data={"params": invalid},
            )

        query = cls()
        if params.get("q"):
            query.search = sanitize_text_field(params["q"]) or None
        if params.get("categories"):
            query.categories = sanitize_comma_separated_ids(params["categories"])
        if params.get("tags"):
            query.tags = sanitize_comma_separated_ids(params["tags"])
        if params.get("page_no") is not None:
            query.page = int(float(params["page_no"])) or DEFAULT_PAGE
        if params.get("posts_per_page") is not None:
            query.per_page = int(float(params["posts_per_page"])) or DEFAULT_POSTS_PER_PAGE
        if params.get("rating"):
            query.rating = sanitize_rating(params["rating"]) or None
        return query

    def matches(self, review: Review) -> bool:
        if review.status != "publish":
            return False

        if self.search:
            haystack = f"{review.title}\n{review.content}".lower()
            if not all(term in haystack for term in self.search.lower().split()):
                return False

        # Category and tag filters combine with AND; each one is an IN match.
        if self.categories and not set(self.categories) & set(review.categories):
            return False
        if self.tags and not set(self.tags) & set(review.tags):
            return False

        if self.rating:
            if review.rating is None:
                return False
            rating = one_decimal(review.rating)
            if "-" in self.rating:
                low, high = (Decimal(x) for x in self.rating.split("-"))
                if not low <= rating <= high:
                    return False
            elif rating != Decimal(self.rating):
                return False

        return True


def calculate_page_count(total_posts: int, posts_per_page: int) -> int:
    return math.ceil(total_posts / posts_per_page) if posts_per_page > 0 else 0


def format_date(review: Review) -> str:
    # WordPress default date_format "F j, Y".
    d = review.published_at
    return f"{d:%B} {d.day}, {d.year}"


def _to_post(review: Review, catalog: ReviewCatalog) -> ReviewPost:
    product_title = None
    product_url = "#"
    product = catalog.get_product(review.product_id)
    if product is not None and product.status == "publish":
        product_title = product.title
        product_url = product.url

    return ReviewPost(
        id=review.id,
        title=review.title,
        content=review.content,
        date=format_date(review),
        permalink=review.permalink,
        thumbnail=review.thumbnail or "",
        rating=float(review.rating) if review.rating is not None else None,
        product=product_title,
        product_url=product_url,
        reviewer=sanitize_text_field(review.reviewer_name) if review.reviewer_name else "",
    )


def search_reviews(catalog: ReviewCatalog, query: ReviewQuery) -> ReviewSearchResponse:
    matched = [r for r in catalog.reviews() if query.matches(r)]
    matched.sort(key=lambda r: (r.published_at, r.id), reverse=True)

    start = (query.page - 1) * query.per_page
    page = matched[start:start + query.per_page]

    return ReviewSearchResponse(
        posts=[_to_post(r, catalog) for r in page],
        posts_per_page=query.per_page,
        total_posts=len(matched),
        no_of_pages=calculate_page_count(len(matched), query.per_page),
    )
