"""
Runtime configuration for the Interactive Lesson service.

All values come from environment variables (optionally seeded from a ``.env``
file). ``load_config()`` reads them once and returns an immutable
``AppConfig``; nothing else in the package reads the environment for these
settings.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_RATE_LIMIT_REQUESTS = 120
DEFAULT_RATE_LIMIT_WINDOW = 60
MAX_RATE_LIMIT_REQUESTS = 10000
MAX_RATE_LIMIT_WINDOW = 3600


@dataclass(frozen=True)
class AppConfig:
    storage_backend: str = "memory"
    meta_table: str = "interactive_lesson_meta"
    aws_region: str = "us-east-1"
    aws_endpoint_url: Optional[str] = None
    reviews_data_path: Optional[str] = None
    rate_limit_enabled: bool = True
    rate_limit_requests: int = DEFAULT_RATE_LIMIT_REQUESTS
    rate_limit_window: int = DEFAULT_RATE_LIMIT_WINDOW
    log_level: str = "INFO"
    cloudwatch_log_group: Optional[str] = None


def _bounded_int(name: str, default: int, maximum: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid {name} value: {raw}. Error: {e}. Using default: {default}")
        return default
    if value <= 0:
        logger.warning(f"Invalid {name} value: {raw}. Must be positive. Using default: {default}")
        return default
    if value > maximum:
        logger.warning(
            f"{name} value {value} exceeds maximum ({maximum}). Using default: {default}"
        )
        return default
    return value


def load_config() -> AppConfig:
    """Build an ``AppConfig`` from the current environment."""
    load_dotenv()

    backend = os.getenv("STORAGE_BACKEND", "memory").lower()
    if backend not in ("memory", "dynamodb"):
        logger.warning(f"Unknown STORAGE_BACKEND {backend!r}; using in-memory storage")
        backend = "memory"

    return AppConfig(
        storage_backend=backend,
        meta_table=os.getenv("DDB_TABLE_LESSON_META", "interactive_lesson_meta"),
        aws_region=os.getenv("AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1")),
        aws_endpoint_url=os.getenv("AWS_ENDPOINT_URL") or None,
        reviews_data_path=os.getenv("REVIEWS_DATA_PATH") or None,
        rate_limit_enabled=os.getenv("DISABLE_RATE_LIMIT", "").lower() != "true",
        rate_limit_requests=_bounded_int(
            "RATE_LIMIT_REQUESTS", DEFAULT_RATE_LIMIT_REQUESTS, MAX_RATE_LIMIT_REQUESTS
        ),
        rate_limit_window=_bounded_int(
            "RATE_LIMIT_WINDOW_SECONDS", DEFAULT_RATE_LIMIT_WINDOW, MAX_RATE_LIMIT_WINDOW
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cloudwatch_log_group=os.getenv("CLOUDWATCH_LOG_GROUP") or None,
    )
