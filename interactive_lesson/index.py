from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .config import AppConfig, load_config
from .quiz import router as quiz_router
from .reviews import router as reviews_router
from .reviews.catalog import ReviewCatalog
from .routes.settings import router as settings_router
from .routes.system import router as system_router
from .services.storage_service import KeyValueStore, create_store
from .utils.errors import LessonError
from .utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def lesson_error_handler(request: Request, exc: LessonError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} - {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code} ({exc.status_code})")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    params = {
        ".".join(str(p) for p in err.get("loc", ())[1:]) or "body": err.get("msg", "Invalid parameter.")
        for err in exc.errors()
    }
    return JSONResponse(
        {
            "code": "rest_invalid_param",
            "message": f"Invalid parameter(s): {', '.join(params)}",
            "data": {"status": 400, "params": params},
        },
        status_code=400,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        {
            "code": "internal_error",
            "message": "An unexpected error occurred.",
            "data": {"status": 500},
        },
        status_code=500,
    )


def _load_reviews(catalog: ReviewCatalog, path: Optional[str]) -> None:
    if not path:
        return
    try:
        catalog.load_file(path)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not load reviews from {path}: {e}")


def create_app(
    config: Optional[AppConfig] = None,
    store: Optional[KeyValueStore] = None,
    catalog: Optional[ReviewCatalog] = None,
) -> FastAPI:
    """
    Build the FastAPI application with its routers and error handlers.

    ``store`` and ``catalog`` default to the backends selected by ``config``;
    passing them in lets tests share state with the app they drive.
    """
    config = config or load_config()
    configure_logging(config)

    app = FastAPI(title="Interactive Lesson API", version=__version__)
    app.state.config = config
    app.state.store = store if store is not None else create_store(config)
    if catalog is None:
        catalog = ReviewCatalog()
        _load_reviews(catalog, config.reviews_data_path)
    app.state.reviews = catalog

    app.add_exception_handler(LessonError, lesson_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(system_router)
    app.include_router(quiz_router)
    app.include_router(reviews_router)
    app.include_router(settings_router)
    return app
