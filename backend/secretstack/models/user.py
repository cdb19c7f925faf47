"""
User model for the users collection.
"""
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """
    User document model for the MongoDB users collection.

    A user is locally authenticable (credential_hash set), externally
    authenticable (external_id set), or both.
    """
    id: Optional[str] = Field(None, alias="_id", description="MongoDB ObjectId as string")
    username: Optional[str] = Field(None, description="Unique local username")
    credential_hash: Optional[str] = Field(
        None,
        alias="hashed_password",
        description="Bcrypt hashed password",
    )
    external_id: Optional[str] = Field(
        None,
        alias="google_id",
        description="Google profile id",
    )
    secrets: list[str] = Field(
        default_factory=list,
        description="Secrets authored by this user, in insertion order",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Account creation timestamp",
    )

    class Config:
        populate_by_name = True

    @property
    def is_local(self) -> bool:
        return self.credential_hash is not None

    @property
    def is_external(self) -> bool:
        return self.external_id is not None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "User":
        """Build a User from a raw MongoDB document."""
        doc = dict(doc)
        doc["_id"] = str(doc["_id"])
        # Documents written by older clients may carry a null secrets array
        if doc.get("secrets") is None:
            doc["secrets"] = []
        return cls(**doc)
