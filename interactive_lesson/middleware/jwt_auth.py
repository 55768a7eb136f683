"""
JWT middleware for the FastAPI application.

Responsibilities:
  * Normalize incoming request paths before auth checks.
  * Allow-through for the public endpoints (health checks, docs, OpenAPI
    schema, review search).
  * Accept tokens from either the `Authorization` header (standard Bearer
    scheme) or the `X-Authorization` header.
  * Delegate JWT decoding/validation to `verify_jwt_token`, attaching the claims
    to `request.state.auth` for downstream handlers.
  * Return `401 {"code": "rest_invalid_token", ...}` when credentials are
    present but malformed or expired.

Requests without credentials pass through anonymously; each route decides
whether it needs a logged-in user (see ``middleware/rbac.py``).
"""

from __future__ import annotations

import os
from typing import Iterable
from urllib.parse import unquote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..services.auth_service import verify_jwt_token
from ..utils.auth import get_authorization_header, parse_authorization_token

# Each entry may represent either an exact path or a prefix (when ending with a slash).
DEFAULT_EXEMPT: tuple[str, ...] = (
    "/health",
    "/version",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/interactive-lesson/v1/reviews",
)


def _is_exempt(path: str, exempt: Iterable[str]) -> bool:
    for p in exempt:
        if p.endswith("/") and path.startswith(p):
            return True
        if path == p:
            return True
    return False


def _invalid_token() -> JSONResponse:
    return JSONResponse(
        {
            "code": "rest_invalid_token",
            "message": "The authentication token is invalid or expired.",
            "data": {"status": 401},
        },
        status_code=401,
        headers={"WWW-Authenticate": "Bearer"},
    )


class JWTAuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exempt_paths: Iterable[str] = DEFAULT_EXEMPT) -> None:
        super().__init__(app)
        self.exempt_paths = tuple(exempt_paths)

        self.algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        if self.algorithm != "HS256":
            raise ValueError("This middleware currently supports HS256 only.")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        request.state.auth = None

        # Prefix-safe path normalization (handles /prod/... base paths)
        raw_path = unquote(request.scope.get("path", "") or request.url.path)
        root_prefix = request.scope.get("root_path", "") or request.headers.get(
            "X-Forwarded-Prefix", ""
        )
        path = (
            raw_path[len(root_prefix) :]
            if root_prefix and raw_path.startswith(root_prefix)
            else raw_path
        )

        if _is_exempt(path, self.exempt_paths):
            return await call_next(request)

        header = get_authorization_header(request.headers)
        if header is None:
            return await call_next(request)

        try:
            token = parse_authorization_token(header)
        except ValueError:
            return _invalid_token()

        payload = verify_jwt_token(token)
        if not payload:
            return _invalid_token()

        request.state.auth = payload
        return await call_next(request)
