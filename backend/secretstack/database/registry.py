"""
Index management.
Ensures the users collection carries its uniqueness constraints on startup.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase

from secretstack.database.databases.user_db import Collections, Fields


async def create_indexes(db: AsyncIOMotorDatabase) -> None:
    """Create necessary indexes for the user database."""
    users = db[Collections.USERS]

    # Sparse: Google-only accounts have no username, local-only ones no google_id
    await users.create_index(Fields.USERNAME, unique=True, sparse=True)
    await users.create_index(Fields.GOOGLE_ID, unique=True, sparse=True)
