"""
Credential verification for locally registered accounts.
"""
import logging

from secretstack.core.exceptions import DuplicateUsername, InvalidCredentials, InvalidInput
from secretstack.core.security import hash_password, password_needs_rehash, verify_password
from secretstack.models.user import User
from secretstack.services.user_store import UserStore

logger = logging.getLogger(__name__)

MISSING_USERNAME = "No username was given"
MISSING_PASSWORD = "No password was given"
USER_EXISTS = "A user with the given username is already registered"
INCORRECT_CREDENTIALS = "Password or username is incorrect"


class CredentialVerifier:
    """Service for local registration and username/password authentication."""

    def __init__(self, store: UserStore):
        """Initialize with the user store."""
        self.store = store

    async def register(self, username: str, password: str) -> User:
        """
        Register a new local user.

        Args:
            username: Requested username
            password: Plain text password

        Returns:
            The created User

        Raises:
            InvalidInput: If username or password is blank
            DuplicateUsername: If the username is taken
        """
        username = (username or "").strip()
        if not username:
            raise InvalidInput(MISSING_USERNAME)
        if not password:
            raise InvalidInput(MISSING_PASSWORD)

        # Check if username already exists
        existing = await self.store.get_by_username(username)
        if existing:
            raise DuplicateUsername(USER_EXISTS)

        user = await self.store.create_local(username, hash_password(password))
        logger.info("Registered local user %s", username)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """
        Authenticate a username/password pair.

        Returns:
            The matching User

        Raises:
            InvalidCredentials: If the user is unknown, has no local
                credential, or the password does not match
        """
        username = (username or "").strip()
        if not username or not password:
            raise InvalidCredentials(INCORRECT_CREDENTIALS)

        user = await self.store.get_by_username(username)
        if user is None or not user.is_local:
            logger.info("Login failed for unknown user %s", username)
            raise InvalidCredentials(INCORRECT_CREDENTIALS)

        if not verify_password(password, user.credential_hash):
            logger.info("Login failed for user %s: password mismatch", username)
            raise InvalidCredentials(INCORRECT_CREDENTIALS)

        if password_needs_rehash(user.credential_hash):
            new_hash = hash_password(password)
            await self.store.update_credential(user.id, new_hash)
            user.credential_hash = new_hash

        logger.info("User %s logged in", username)
        return user
