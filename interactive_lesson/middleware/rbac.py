"""
Authorization dependencies.

``JWTAuthMiddleware`` attaches verified claims to ``request.state.auth``;
these dependencies turn them into the caller's identity and enforce the
per-route requirements (logged-in user for the quiz, administrator for the
settings).
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Request

from ..services.auth_service import is_admin, user_id_from_claims
from ..utils.errors import AuthError

logger = logging.getLogger(__name__)


def get_claims(request: Request) -> Optional[Dict[str, Any]]:
    return getattr(request.state, "auth", None)


def get_current_user_id(request: Request) -> Optional[str]:
    """Caller's user id, or ``None`` for anonymous requests."""
    return user_id_from_claims(get_claims(request))


def require_admin(request: Request) -> Dict[str, Any]:
    """
    Dependency that requires administrator privileges.

    Anonymous callers get 401, logged-in users without an admin role get 403,
    both with the ``rest_forbidden`` code.

    Returns:
        The caller's claims when access is granted
    """
    claims = get_claims(request)
    user_id = user_id_from_claims(claims)
    if user_id is None:
        raise AuthError("You do not have permission to access this resource.", status_code=401)

    if not is_admin(claims):
        logger.warning(f"Admin access denied for user_id: {user_id}")
        raise AuthError("You do not have permission to access this resource.", status_code=403)

    logger.info(f"Admin access granted: user_id {user_id} path {request.url.path}")
    return claims
