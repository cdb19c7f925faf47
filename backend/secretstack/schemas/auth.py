"""
Authentication form schemas.
"""
from typing import Annotated

from fastapi import Form
from pydantic import BaseModel, Field


class CredentialsForm(BaseModel):
    """Username/password pair posted by the login and register forms."""
    username: str = Field(default="", description="Username")
    password: str = Field(default="", description="Plain text password")

    @classmethod
    def as_form(
        cls,
        username: Annotated[str, Form()] = "",
        password: Annotated[str, Form()] = "",
    ) -> "CredentialsForm":
        """FastAPI dependency reading the fields from a urlencoded body."""
        return cls(username=username, password=password)


class SecretForm(BaseModel):
    """Body of the submit form."""
    secret: str = Field(default="", description="Secret text")

    @classmethod
    def as_form(cls, secret: Annotated[str, Form()] = "") -> "SecretForm":
        return cls(secret=secret)
