"""
Database module - MongoDB and Redis connections and database definitions.
"""
from secretstack.database.connections import (
    create_mongo_client,
    create_redis_client,
    close_connections,
    get_database,
)
from secretstack.database.databases import user_db
from secretstack.database.registry import create_indexes

__all__ = [
    "create_mongo_client",
    "create_redis_client",
    "close_connections",
    "get_database",
    "create_indexes",
    "user_db",
]
