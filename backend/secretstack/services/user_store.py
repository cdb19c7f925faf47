"""
User store wrapping the MongoDB users collection.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from secretstack.core.exceptions import DuplicateUsername, StoreUnavailable
from secretstack.database.databases.user_db import Collections, Fields
from secretstack.models.user import User
from secretstack.schemas.user import UserSecrets

logger = logging.getLogger(__name__)


class UserStore:
    """Persistence operations on User documents."""

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialize with the application database."""
        self.db = db
        self.users_collection = db[Collections.USERS]

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """
        Get user by ID.

        Args:
            user_id: User ObjectId as string

        Returns:
            User model or None if not found or the id is malformed
        """
        try:
            oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None

        try:
            user_doc = await self.users_collection.find_one({Fields.ID: oid})
        except PyMongoError as e:
            raise StoreUnavailable(f"Failed to load user {user_id}") from e

        if not user_doc:
            return None
        return User.from_document(user_doc)

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get a local account by username."""
        try:
            user_doc = await self.users_collection.find_one({Fields.USERNAME: username})
        except PyMongoError as e:
            raise StoreUnavailable("Failed to look up username") from e

        if not user_doc:
            return None
        return User.from_document(user_doc)

    async def create_local(self, username: str, hashed_password: str) -> User:
        """
        Insert a new locally authenticable user.

        Raises:
            DuplicateUsername: If the unique index rejects the username
            StoreUnavailable: On any other database failure
        """
        user_doc = {
            Fields.USERNAME: username,
            Fields.HASHED_PASSWORD: hashed_password,
            Fields.SECRETS: [],
            Fields.CREATED_AT: datetime.now(timezone.utc),
        }

        try:
            result = await self.users_collection.insert_one(user_doc)
        except DuplicateKeyError as e:
            raise DuplicateUsername("A user with the given username is already registered") from e
        except PyMongoError as e:
            raise StoreUnavailable("Failed to create user") from e

        user_doc[Fields.ID] = result.inserted_id
        return User.from_document(user_doc)

    async def find_or_create_by_external_id(self, external_id: str) -> tuple[User, bool]:
        """
        Find the user bound to an identity-provider id, creating one if none.

        The lookup and insert are one upsert so concurrent callbacks for the
        same id converge on a single document.

        Returns:
            (user, created) tuple
        """
        try:
            user_doc = await self.users_collection.find_one_and_update(
                {Fields.GOOGLE_ID: external_id},
                {
                    "$setOnInsert": {
                        Fields.SECRETS: [],
                        Fields.CREATED_AT: datetime.now(timezone.utc),
                    }
                },
                upsert=True,
                return_document=ReturnDocument.BEFORE,
            )
            created = user_doc is None
            if created:
                user_doc = await self.users_collection.find_one({Fields.GOOGLE_ID: external_id})
        except DuplicateKeyError:
            # Lost an upsert race; the winner's document is there now
            created = False
            try:
                user_doc = await self.users_collection.find_one({Fields.GOOGLE_ID: external_id})
            except PyMongoError as e:
                raise StoreUnavailable("Failed to resolve external identity") from e
        except PyMongoError as e:
            raise StoreUnavailable("Failed to resolve external identity") from e

        if user_doc is None:
            raise StoreUnavailable("External identity vanished after upsert")
        return User.from_document(user_doc), created

    async def update_credential(self, user_id: str, hashed_password: str) -> None:
        """Replace the stored password hash."""
        try:
            await self.users_collection.update_one(
                {Fields.ID: ObjectId(user_id)},
                {"$set": {Fields.HASHED_PASSWORD: hashed_password}},
            )
        except PyMongoError as e:
            raise StoreUnavailable("Failed to update credential") from e

    async def append_secret(self, user_id: str, secret: str) -> bool:
        """
        Append a secret to the user's list with an atomic $push.

        Returns:
            True if a user document was updated, False if none matched
        """
        try:
            result = await self.users_collection.update_one(
                {Fields.ID: ObjectId(user_id)},
                {"$push": {Fields.SECRETS: secret}},
            )
        except PyMongoError as e:
            raise StoreUnavailable("Failed to save secret") from e

        return result.matched_count > 0

    async def list_secrets(self) -> list[UserSecrets]:
        """
        List the secrets of every user whose secrets field is not null.

        Returns:
            One UserSecrets projection per user, in natural order
        """
        try:
            cursor = self.users_collection.find(
                {Fields.SECRETS: {"$ne": None}},
                {Fields.SECRETS: 1},
            )
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailable("Failed to list secrets") from e

        return [UserSecrets(secrets=doc.get(Fields.SECRETS) or []) for doc in docs]

    async def ping(self) -> None:
        """Round-trip to the server; raises on failure."""
        await self.db.command("ping")
