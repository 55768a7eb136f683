from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .config import AppConfig, load_config
from .index import create_app
from .middleware.jwt_auth import DEFAULT_EXEMPT, JWTAuthMiddleware
from .middleware.rate_limit import RateLimitMiddleware
from .middleware.security_headers import SecurityHeadersMiddleware
from .reviews.catalog import ReviewCatalog
from .services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)


def build_app(
    config: Optional[AppConfig] = None,
    store: Optional[KeyValueStore] = None,
    catalog: Optional[ReviewCatalog] = None,
) -> FastAPI:
    """Application with the full middleware stack, as served in production."""
    config = config or load_config()
    app = create_app(config, store=store, catalog=catalog)

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(JWTAuthMiddleware, exempt_paths=DEFAULT_EXEMPT)

    # Added last, runs first due to LIFO order
    if config.rate_limit_enabled:
        logger.info(
            f"Rate limiting enabled: {config.rate_limit_requests} requests per "
            f"{config.rate_limit_window} seconds"
        )
        app.add_middleware(
            RateLimitMiddleware,
            requests=config.rate_limit_requests,
            window_seconds=config.rate_limit_window,
        )
    else:
        logger.warning("Rate limiting is DISABLED. Only use this in trusted environments.")

    return app


app = build_app()
