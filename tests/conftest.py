"""
Pytest configuration and fixtures
"""
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from interactive_lesson.config import AppConfig  # noqa: E402
from interactive_lesson.entrypoint import build_app  # noqa: E402
from interactive_lesson.reviews.catalog import ReviewCatalog  # noqa: E402
from interactive_lesson.services.auth_service import create_jwt_token  # noqa: E402
from interactive_lesson.services.storage_service import InMemoryKeyValueStore  # noqa: E402
from interactive_lesson.utils.jwt_secret import clear_jwt_secret_cache  # noqa: E402

TEST_SECRET = "test-secret"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    """Ensure a deterministic signing key for token generation."""
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    for name in ("PYTHON_ENV", "JWT_ISSUER", "JWT_AUDIENCE", "JWT_LEEWAY_SEC", "JWT_ALGORITHM"):
        monkeypatch.delenv(name, raising=False)
    clear_jwt_secret_cache()
    yield TEST_SECRET
    clear_jwt_secret_cache()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def catalog():
    return ReviewCatalog()


@pytest.fixture
def app_config():
    return AppConfig(rate_limit_enabled=False)


@pytest.fixture
def app(app_config, kv_store, catalog):
    return build_app(app_config, store=kv_store, catalog=catalog)


@pytest.fixture
def client(app):
    """Create a test client"""
    return TestClient(app)


@pytest.fixture
def make_token():
    """Factory issuing signed tokens: make_token("42", roles=["administrator"])."""

    def _make(user_id="1", roles=(), **kwargs):
        return create_jwt_token(user_id, roles=roles, **kwargs)["token"]

    return _make


@pytest.fixture
def auth_headers(make_token):
    """Factory returning Authorization headers for a user."""

    def _headers(user_id="1", roles=()):
        return {"Authorization": f"Bearer {make_token(user_id, roles=roles)}"}

    return _headers
