"""
JWT issuing and verification.

Tokens are HS256-signed and carry the caller's identity in ``user_id`` (or
the registered ``sub`` claim) plus an optional ``roles`` list used by the
settings endpoint.
"""

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

import jwt

from ..utils.jwt_secret import get_jwt_secret

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
DEFAULT_TOKEN_LIFETIME = timedelta(hours=10)
ADMIN_ROLES = frozenset({"administrator", "admin"})


def _leeway() -> int:
    try:
        return int(os.getenv("JWT_LEEWAY_SEC", "0"))
    except ValueError:
        return 0


def create_jwt_token(
    user_id: str | int,
    roles: Iterable[str] = (),
    expires_in: timedelta = DEFAULT_TOKEN_LIFETIME,
    **extra_claims: Any,
) -> Dict[str, Any]:
    """Issue a signed token for ``user_id``; returns the token with its jti and expiry."""
    now = datetime.now(timezone.utc)
    expires_at = now + expires_in
    jti = str(uuid.uuid4())
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "user_id": str(user_id),
        "roles": list(roles),
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
        "jti": jti,
        **extra_claims,
    }
    issuer = os.getenv("JWT_ISSUER")
    audience = os.getenv("JWT_AUDIENCE")
    if issuer:
        payload.setdefault("iss", issuer)
    if audience:
        payload.setdefault("aud", audience)

    token = jwt.encode(payload, get_jwt_secret(), algorithm=JWT_ALGORITHM)
    return {"token": token, "jti": jti, "expires_at": expires_at}


def verify_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the decoded claims of a valid token, or ``None``."""
    issuer = os.getenv("JWT_ISSUER")
    audience = os.getenv("JWT_AUDIENCE")
    options = {"require": ["exp"], "verify_aud": bool(audience)}
    try:
        return jwt.decode(
            token,
            get_jwt_secret(),
            algorithms=[JWT_ALGORITHM],
            issuer=issuer or None,
            audience=audience or None,
            leeway=_leeway(),
            options=options,
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired JWT")
        return None
    except jwt.InvalidTokenError as e:
        logger.info(f"Rejected invalid JWT: {type(e).__name__}")
        return None


def user_id_from_claims(claims: Optional[Dict[str, Any]]) -> Optional[str]:
    if not claims:
        return None
    user_id = claims.get("user_id") or claims.get("sub")
    if user_id is None or str(user_id).strip() == "":
        return None
    return str(user_id)


def is_admin(claims: Optional[Dict[str, Any]]) -> bool:
    if not claims:
        return False
    if claims.get("is_admin") is True:
        return True
    roles = claims.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]
    return any(str(role).lower() in ADMIN_ROLES for role in roles)
