from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as SchemaValidationError

from .schemas import Product, Review

logger = logging.getLogger(__name__)


class ReviewCatalog:
    """In-memory collection of reviews and the products they point at."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reviews: Dict[int, Review] = {}
        self._products: Dict[int, Product] = {}

    def add_review(self, review: Review) -> Review:
        with self._lock:
            self._reviews[review.id] = review
            return review

    def add_product(self, product: Product) -> Product:
        with self._lock:
            self._products[product.id] = product
            return product

    def get_product(self, product_id: Optional[int]) -> Optional[Product]:
        if product_id is None:
            return None
        with self._lock:
            return self._products.get(product_id)

    def reviews(self) -> List[Review]:
        with self._lock:
            return list(self._reviews.values())

    def load_file(self, path: str | Path) -> int:
        """
        Load reviews and products from a JSON document of the form
        ``{"reviews": [...], "products": [...]}``.

        Returns the number of reviews loaded. Entries that fail validation are
        skipped with a warning.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        loaded = 0
        for raw in data.get("products", []):
            try:
                self.add_product(Product.model_validate(raw))
            except SchemaValidationError as e:
                logger.warning(f"Skipping invalid product entry in {path}: {e.error_count()} error(s)")
        for raw in data.get("reviews", []):
            try:
                self.add_review(Review.model_validate(raw))
                loaded += 1
            except SchemaValidationError as e:
                logger.warning(f"Skipping invalid review entry in {path}: {e.error_count()} error(s)")
        logger.info(f"Loaded {loaded} reviews from {path}")
        return loaded
