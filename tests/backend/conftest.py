"""
Backend-specific test fixtures.

These fixtures extend the global fixtures with ready-built services wired to
the mock database, fake Redis and fake Google provider.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "backend"))


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def user_store(mock_user_db):
    """UserStore over the mock user database."""
    from secretstack.services.user_store import UserStore

    return UserStore(mock_user_db)


@pytest.fixture
def verifier(user_store):
    """CredentialVerifier over the mock user store."""
    from secretstack.services.auth_service import CredentialVerifier

    return CredentialVerifier(user_store)


@pytest.fixture
def session_manager(mock_async_redis, user_store, test_settings):
    """SessionManager over fake Redis and the mock user store."""
    from secretstack.services.session_manager import SessionManager

    return SessionManager(mock_async_redis, user_store, test_settings)


@pytest_asyncio.fixture
async def identity_bridge(fake_google, mock_async_redis, user_store, test_settings):
    """GoogleIdentityBridge talking to the fake Google provider."""
    from secretstack.services.identity_bridge import GoogleIdentityBridge

    http_client = fake_google.client(test_settings)
    yield GoogleIdentityBridge(http_client, mock_async_redis, user_store, test_settings)
    await http_client.aclose()


@pytest.fixture
def failing_collection():
    """
    A users collection whose every call raises a pymongo error.

    Usage:
        store = UserStore(db)
        store.users_collection = failing_collection
    """
    from pymongo.errors import ServerSelectionTimeoutError

    error = ServerSelectionTimeoutError("no servers available")
    collection = MagicMock()
    collection.find_one = AsyncMock(side_effect=error)
    collection.insert_one = AsyncMock(side_effect=error)
    collection.update_one = AsyncMock(side_effect=error)
    collection.find_one_and_update = AsyncMock(side_effect=error)
    collection.find = MagicMock(side_effect=error)
    return collection


# =============================================================================
# Response Assertion Helpers
# =============================================================================

@pytest.fixture
def assert_redirect():
    """Helper to assert a 302 redirect to a given location."""
    def _assert(response, location: str):
        assert response.status_code == 302
        assert response.headers["location"] == location
    return _assert
