"""
Tests for database connections and initialization.

These tests cover:
- Connection factories
- Index creation and the uniqueness it enforces
- AppContext wiring and shutdown
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from pymongo.errors import DuplicateKeyError


class TestConnectionFactories:
    """Tests for the MongoDB and Redis client factories."""

    def test_create_mongo_client_uses_settings_uri(self, test_settings):
        from secretstack.database.connections import create_mongo_client

        with patch("secretstack.database.connections.AsyncIOMotorClient") as mock_client:
            create_mongo_client(test_settings)

        mock_client.assert_called_once_with(test_settings.mongo_uri, serverSelectionTimeoutMS=5000)

    def test_create_redis_client_decodes_responses(self, test_settings):
        from secretstack.database.connections import create_redis_client

        with patch("secretstack.database.connections.Redis") as mock_redis:
            create_redis_client(test_settings)

        mock_redis.from_url.assert_called_once_with(test_settings.redis_url, decode_responses=True)

    def test_get_database_uses_configured_name(self, mock_async_mongo_client, test_settings):
        from secretstack.database.connections import get_database

        db = get_database(mock_async_mongo_client, test_settings)

        assert db.name == "userDB_test"

    @pytest.mark.asyncio
    async def test_close_connections_closes_both(self):
        from secretstack.database.connections import close_connections

        mongo = MagicMock()
        redis = AsyncMock()

        await close_connections(mongo, redis)

        mongo.close.assert_called_once()
        redis.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_connections_tolerates_missing_clients(self):
        from secretstack.database.connections import close_connections

        await close_connections(None, None)


class TestIndexes:
    """Tests for create_indexes."""

    @pytest.mark.asyncio
    async def test_indexes_are_created(self, mock_user_db):
        info = await mock_user_db.users.index_information()

        keys = {tuple(spec["key"])[0][0] for spec in info.values()}
        assert "username" in keys
        assert "google_id" in keys

    @pytest.mark.asyncio
    async def test_create_indexes_is_idempotent(self, mock_user_db):
        from secretstack.database.registry import create_indexes

        await create_indexes(mock_user_db)

        info = await mock_user_db.users.index_information()
        assert len(info) == 3  # _id plus the two unique indexes

    @pytest.mark.asyncio
    async def test_duplicate_username_is_rejected(self, mock_user_db):
        await mock_user_db.users.insert_one({"username": "alice", "secrets": []})

        with pytest.raises(DuplicateKeyError):
            await mock_user_db.users.insert_one({"username": "alice", "secrets": []})

    @pytest.mark.asyncio
    async def test_duplicate_google_id_is_rejected(self, mock_user_db):
        await mock_user_db.users.insert_one({"google_id": "g-1", "secrets": []})

        with pytest.raises(DuplicateKeyError):
            await mock_user_db.users.insert_one({"google_id": "g-1", "secrets": []})

    @pytest.mark.asyncio
    async def test_sparse_indexes_allow_many_google_only_users(self, mock_user_db):
        await mock_user_db.users.insert_one({"google_id": "g-1", "secrets": []})
        await mock_user_db.users.insert_one({"google_id": "g-2", "secrets": []})

        assert await mock_user_db.users.count_documents({}) == 2


class TestAppContext:
    """Tests for AppContext.build and close."""

    def test_build_wires_supplied_clients(self, test_settings, mock_async_mongo_client, mock_async_redis, fake_google):
        from secretstack.context import AppContext

        ctx = AppContext.build(
            test_settings,
            mongo_client=mock_async_mongo_client,
            redis=mock_async_redis,
            http_client=fake_google.client(test_settings),
        )

        assert ctx.db.name == test_settings.mongo_db_name
        assert ctx.sessions.redis is mock_async_redis
        assert ctx.identity.store is ctx.users
        assert ctx.credentials.store is ctx.users

    def test_build_creates_missing_clients_from_settings(self, test_settings, mock_async_mongo_client, mock_async_redis):
        from secretstack.context import AppContext

        with patch("secretstack.context.create_mongo_client", return_value=mock_async_mongo_client) as mongo_factory, \
             patch("secretstack.context.create_redis_client", return_value=mock_async_redis) as redis_factory:
            ctx = AppContext.build(test_settings)

        mongo_factory.assert_called_once_with(test_settings)
        redis_factory.assert_called_once_with(test_settings)
        from authlib.integrations.httpx_client import AsyncOAuth2Client

        assert isinstance(ctx.http_client, AsyncOAuth2Client)
        assert ctx.identity.oauth is ctx.http_client

    @pytest.mark.asyncio
    async def test_close_releases_every_client(self, test_settings):
        from secretstack.context import AppContext

        mongo = MagicMock()
        redis = AsyncMock()
        http_client = AsyncMock()
        ctx = AppContext.build(test_settings, mongo_client=mongo, redis=redis, http_client=http_client)

        await ctx.close()

        http_client.aclose.assert_awaited_once()
        mongo.close.assert_called_once()
        redis.aclose.assert_awaited_once()
