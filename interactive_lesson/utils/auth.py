from __future__ import annotations

from typing import Mapping


def get_authorization_header(headers: Mapping[str, str]) -> str | None:
    """
    Return the first available authorization header value.

    Favors standard ``Authorization`` header but falls back to
    ``X-Authorization`` if present. Returns ``None`` when neither is supplied.
    """
    if headers is None:
        return None
    return (
        headers.get("authorization")
        or headers.get("Authorization")
        or headers.get("x-authorization")
        or headers.get("X-Authorization")
    )


def parse_authorization_token(header_value: str | None) -> str:
    """
    Normalize and extract the token value from a header string.

    Accepts both ``Bearer <token>`` and raw token formats.

    Raises:
        ValueError: When the header is missing or the token component is empty.
    """
    if not header_value:
        raise ValueError("Authorization header missing")

    raw = header_value.strip()
    if not raw:
        raise ValueError("Authorization header empty")

    if raw.lower().startswith("bearer "):
        token = raw.split(" ", 1)[1].strip()
    else:
        token = raw

    if not token:
        raise ValueError("Authorization token missing")

    return token


def extract_token(headers: Mapping[str, str]) -> str | None:
    """Return the bearer token from ``headers``, or ``None`` when there is none."""
    try:
        return parse_authorization_token(get_authorization_header(headers))
    except ValueError:
        return None
