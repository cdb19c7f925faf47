"""
Global test fixtures for Secret Stack.

This module provides shared fixtures for all tests including:
- Mock MongoDB (mongomock-motor)
- Mock Redis (fakeredis)
- Test settings and credentials
- A fake Google OAuth2 provider (httpx.MockTransport)
- FastAPI TestClient wired to the mocks
"""

import sys
from pathlib import Path
from typing import Generator
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def test_settings():
    """Settings with a fixed secret key and a configured Google client."""
    from secretstack.config import Settings

    return Settings(
        environment="development",
        secret_key="test-secret-key",
        mongo_db_name="userDB_test",
        session_max_age_seconds=600,
        google_client_id="test-client-id",
        google_client_secret="test-client-secret",
        google_callback_url="http://testserver/auth/google/secrets",
    )


# =============================================================================
# MongoDB Fixtures (mongomock-motor)
# =============================================================================

@pytest.fixture
def mock_async_mongo_client():
    """
    Create an async mock MongoDB client using mongomock-motor.

    This provides an in-memory MongoDB that behaves like the real thing
    for testing purposes.
    """
    try:
        from mongomock_motor import AsyncMongoMockClient
    except ImportError:
        pytest.skip("mongomock-motor not installed")
    client = AsyncMongoMockClient()
    yield client
    client.close()


@pytest_asyncio.fixture
async def mock_user_db(mock_async_mongo_client, test_settings):
    """Provide the mock user database with the real app's indexes."""
    from secretstack.database.registry import create_indexes

    db = mock_async_mongo_client[test_settings.mongo_db_name]
    await create_indexes(db)
    yield db


# =============================================================================
# Redis Fixtures (fakeredis)
# =============================================================================

@pytest.fixture
def mock_async_redis():
    """
    Create an async mock Redis client using fakeredis.

    Each test gets its own FakeServer so sessions never leak between tests.
    """
    try:
        import fakeredis
        import fakeredis.aioredis
    except ImportError:
        pytest.skip("fakeredis with aioredis not installed")
    return fakeredis.aioredis.FakeRedis(
        server=fakeredis.FakeServer(),
        decode_responses=True,
    )


# =============================================================================
# Fake Google provider
# =============================================================================

class FakeGoogle:
    """
    Minimal stand-in for Google's token and userinfo endpoints.

    Set ``profile`` to control what the userinfo endpoint returns, or
    ``token_status`` / ``userinfo_status`` to simulate provider errors.
    """

    def __init__(self):
        self.profile = {"sub": "google-1001", "name": "Test Person"}
        self.token_status = 200
        self.userinfo_status = 200
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_grant"})
            return httpx.Response(
                200,
                json={"access_token": "fake-access-token", "token_type": "Bearer"},
            )
        if request.url.path == "/oauth2/v3/userinfo":
            if request.headers.get("Authorization") != "Bearer fake-access-token":
                return httpx.Response(401, json={"error": "invalid_token"})
            if self.userinfo_status != 200:
                return httpx.Response(self.userinfo_status, json={"error": "unavailable"})
            return httpx.Response(200, json=self.profile)
        return httpx.Response(404)

    def client(self, settings):
        """OAuth2 client for the given settings, routed to this fake."""
        from secretstack.services.identity_bridge import create_oauth_client

        return create_oauth_client(settings, transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_google() -> FakeGoogle:
    return FakeGoogle()


@pytest.fixture
def state_from_location():
    """Helper extracting the OAuth2 state parameter from an authorization redirect."""
    def _state(location: str) -> str:
        return parse_qs(urlparse(location).query)["state"][0]
    return _state


# =============================================================================
# User Fixtures
# =============================================================================

@pytest.fixture
def test_user_data() -> dict:
    """Basic form data for registration and login."""
    return {
        "username": "alice",
        "password": "pw1",
    }


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================

@pytest.fixture
def app(test_settings, mock_async_mongo_client, mock_async_redis, fake_google):
    """
    Create the FastAPI app for testing with every external client mocked.
    """
    from secretstack.main import create_app

    return create_app(
        test_settings,
        mongo_client=mock_async_mongo_client,
        redis=mock_async_redis,
        http_client=fake_google.client(test_settings),
    )


@pytest.fixture
def client(app) -> Generator:
    """
    Create a TestClient for the FastAPI app.

    Redirects are not followed so tests can assert on Location headers.
    """
    with TestClient(app, follow_redirects=False) as c:
        yield c

