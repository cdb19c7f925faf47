"""
Error taxonomy shared by services and routers.

Services raise these; routers and the application-wide exception handlers
decide whether a failure becomes a redirect or a rendered error page.
"""
from typing import Optional


class SecretStackError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class InvalidInput(SecretStackError, ValueError):
    """Registration fields are missing or malformed."""


class DuplicateUsername(SecretStackError, ValueError):
    """A local account with this username already exists."""


class InvalidCredentials(SecretStackError, ValueError):
    """Unknown username or password mismatch."""


class Unauthenticated(SecretStackError):
    """No valid session is attached to the request."""


class ExternalIdentityFailure(SecretStackError):
    """
    The OAuth2 handshake with the identity provider failed.

    Attributes:
        stage: Handshake stage at which the failure happened
        reason: Internal detail, logged but never shown to the browser
    """

    def __init__(self, stage: str, reason: str, *, cause: Optional[BaseException] = None):
        super().__init__(f"External identity failure at {stage}: {reason}")
        self.stage = stage
        self.reason = reason
        self.cause = cause


class StoreUnavailable(SecretStackError):
    """The database or session store could not serve the request."""
