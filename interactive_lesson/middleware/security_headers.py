from __future__ import annotations

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# The API only serves JSON, so nothing needs to load from it.
API_CONTENT_SECURITY_POLICY = "default-src 'none'; frame-ancestors 'none'"
# Swagger UI / ReDoc pull their assets from a CDN.
DOCS_CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https:; "
    "frame-ancestors 'none'"
)
DOCS_PATHS = ("/docs", "/redoc")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds OWASP recommended security headers to every response:
    HSTS, X-Content-Type-Options, X-Frame-Options, Content-Security-Policy,
    Referrer-Policy and Permissions-Policy.
    """

    def __init__(
        self,
        app,
        *,
        hsts_max_age: int = 31536000,  # 1 year in seconds
        hsts_include_subdomains: bool = True,
        referrer_policy: str = "no-referrer",
        permissions_policy: str = "geolocation=(), microphone=(), camera=(), payment=()",
    ):
        super().__init__(app)
        hsts = f"max-age={hsts_max_age}"
        if hsts_include_subdomains:
            hsts += "; includeSubDomains"
        self._headers: Dict[str, str] = {
            "Strict-Transport-Security": hsts,
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": referrer_policy,
            "Permissions-Policy": permissions_policy,
        }

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self._headers.items():
            response.headers[name] = value
        if request.url.path.startswith(DOCS_PATHS):
            response.headers["Content-Security-Policy"] = DOCS_CONTENT_SECURITY_POLICY
        else:
            response.headers["Content-Security-Policy"] = API_CONTENT_SECURITY_POLICY
        return response
