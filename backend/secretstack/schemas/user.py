"""
User projection schemas.
"""
from pydantic import BaseModel, Field


class UserSecrets(BaseModel):
    """Projection of a user exposing only their secrets (no identity data)."""
    secrets: list[str] = Field(default_factory=list, description="User secrets")
