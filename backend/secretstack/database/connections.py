"""
Connection factories for MongoDB and Redis.

Clients are created once per application by the lifespan handler and owned by
the AppContext; nothing here keeps module-level state.
"""
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from redis.asyncio import Redis

from secretstack.config import Settings


def create_mongo_client(settings: Settings) -> AsyncIOMotorClient:
    """Create a MongoDB client from settings."""
    return AsyncIOMotorClient(settings.mongo_uri, serverSelectionTimeoutMS=5000)


def create_redis_client(settings: Settings) -> Redis:
    """Create a Redis client from settings."""
    return Redis.from_url(settings.redis_url, decode_responses=True)


def get_database(client: AsyncIOMotorClient, settings: Settings) -> AsyncIOMotorDatabase:
    """Get the application database from a client."""
    return client[settings.mongo_db_name]


async def close_connections(mongo_client, redis_client) -> None:
    """Close both connections."""
    if mongo_client is not None:
        mongo_client.close()

    if redis_client is not None:
        await redis_client.aclose()
