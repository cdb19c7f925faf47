"""
Application context: every long-lived collaborator, built once at startup.
"""
from dataclasses import dataclass
from typing import Optional

from authlib.integrations.httpx_client import AsyncOAuth2Client
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from redis.asyncio import Redis

from secretstack.config import Settings
from secretstack.database.connections import (
    close_connections,
    create_mongo_client,
    create_redis_client,
    get_database,
)
from secretstack.services.auth_service import CredentialVerifier
from secretstack.services.identity_bridge import GoogleIdentityBridge, create_oauth_client
from secretstack.services.session_manager import SessionManager
from secretstack.services.user_store import UserStore
from secretstack.views import ViewRenderer


@dataclass
class AppContext:
    """Owns the clients and services shared by all requests."""
    settings: Settings
    mongo_client: AsyncIOMotorClient
    redis: Redis
    http_client: AsyncOAuth2Client
    db: AsyncIOMotorDatabase
    users: UserStore
    credentials: CredentialVerifier
    sessions: SessionManager
    identity: GoogleIdentityBridge
    views: ViewRenderer

    @classmethod
    def build(
        cls,
        settings: Settings,
        mongo_client: Optional[AsyncIOMotorClient] = None,
        redis: Optional[Redis] = None,
        http_client: Optional[AsyncOAuth2Client] = None,
    ) -> "AppContext":
        """
        Wire the services together.

        Clients not supplied are created from settings; tests pass fakes.
        """
        if mongo_client is None:
            mongo_client = create_mongo_client(settings)
        if redis is None:
            redis = create_redis_client(settings)
        if http_client is None:
            http_client = create_oauth_client(settings)

        db = get_database(mongo_client, settings)
        users = UserStore(db)
        return cls(
            settings=settings,
            mongo_client=mongo_client,
            redis=redis,
            http_client=http_client,
            db=db,
            users=users,
            credentials=CredentialVerifier(users),
            sessions=SessionManager(redis, users, settings),
            identity=GoogleIdentityBridge(http_client, redis, users, settings),
            views=ViewRenderer(),
        )

    async def close(self) -> None:
        """Release every client."""
        await self.http_client.aclose()
        await close_connections(self.mongo_client, self.redis)
