"""
Retrieval of the JWT signing secret.

Production (``PYTHON_ENV=production``) reads the secret from AWS Secrets
Manager and fails fast when it is unavailable. Development prefers the
``JWT_SECRET`` environment variable, then Secrets Manager, and finally
generates a throwaway secret so the service still starts locally.
"""

from __future__ import annotations

import json
import logging
import os
import secrets
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..aws_clients import secretsmanager_client

logger = logging.getLogger(__name__)

# Cache for the JWT secret to avoid repeated Secrets Manager calls
_JWT_SECRET_CACHE: Optional[str] = None


def _is_production() -> bool:
    return os.getenv("PYTHON_ENV", "development").lower() == "production"


def _secret_name() -> str:
    return os.getenv("JWT_SECRET_NAME", "interactive-lesson-jwt-secret")


def _fetch_from_secrets_manager() -> str:
    client = secretsmanager_client(os.getenv("AWS_REGION"))
    response = client.get_secret_value(SecretId=_secret_name())
    secret_string = response.get("SecretString")
    if not secret_string:
        raise ValueError("SecretString is empty")
    jwt_secret = json.loads(secret_string).get("jwt_secret")
    if not jwt_secret:
        raise ValueError("jwt_secret field not found in secret")
    return jwt_secret


def get_jwt_secret() -> str:
    """
    Return the JWT signing secret, caching it after the first lookup.

    Raises:
        RuntimeError: In production if Secrets Manager is not available
    """
    global _JWT_SECRET_CACHE

    if _JWT_SECRET_CACHE is not None:
        return _JWT_SECRET_CACHE

    production = _is_production()
    if not production:
        env_secret = os.getenv("JWT_SECRET")
        if env_secret:
            logger.info("Using JWT_SECRET from environment variable (development mode)")
            _JWT_SECRET_CACHE = env_secret
            return env_secret

    try:
        jwt_secret = _fetch_from_secrets_manager()
        logger.info(f"Retrieved JWT secret from Secrets Manager: {_secret_name()}")
        _JWT_SECRET_CACHE = jwt_secret
        return jwt_secret
    except (ClientError, BotoCoreError, ValueError, json.JSONDecodeError) as e:
        if production:
            error_msg = (
                f"Error retrieving JWT secret '{_secret_name()}' from Secrets Manager: {e}. "
                "This is required in production."
            )
            logger.error(error_msg)
            raise RuntimeError(error_msg) from e
        logger.warning(
            f"JWT secret not available from Secrets Manager: {e}. "
            "Generating a temporary secret for local development."
        )

    _JWT_SECRET_CACHE = secrets.token_urlsafe(32)
    return _JWT_SECRET_CACHE


def clear_jwt_secret_cache() -> None:
    """Clear the JWT secret cache. Useful for testing or secret rotation."""
    global _JWT_SECRET_CACHE
    _JWT_SECRET_CACHE = None
