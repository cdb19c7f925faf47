"""
Pydantic models for database documents.
"""
from secretstack.models.user import User

__all__ = ["User"]
