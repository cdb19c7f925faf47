"""
Server-side sessions referenced by a signed cookie.

The cookie carries only a signed random session id; Redis maps
``session:<sid>`` to the authenticated user's id with an idle TTL that is
refreshed on every successful resolve.
"""
import json
import logging
import secrets
from typing import Optional

from fastapi import Request, Response
from itsdangerous import BadData, URLSafeTimedSerializer
from redis.asyncio import Redis
from redis.exceptions import RedisError

from secretstack.config import Settings
from secretstack.core.exceptions import StoreUnavailable
from secretstack.database.databases.user_db import RedisKeys
from secretstack.models.user import User
from secretstack.services.user_store import UserStore

logger = logging.getLogger(__name__)

SESSION_SALT = "secretstack.session.v1"


class SessionManager:
    """Create, resolve and destroy authenticated browser sessions."""

    def __init__(self, redis: Redis, store: UserStore, settings: Settings):
        self.redis = redis
        self.store = store
        self.settings = settings
        self.max_age = settings.session_max_age_seconds
        self.cookie_name = settings.session_cookie_name
        self._serializer = URLSafeTimedSerializer(
            secret_key=settings.secret_key,
            salt=SESSION_SALT,
        )

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{RedisKeys.SESSION}{session_id}"

    def _unsign(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            session_id = self._serializer.loads(token)
        except BadData:
            return None
        return session_id if isinstance(session_id, str) and session_id else None

    async def create(self, user: User) -> str:
        """
        Start a session for a user.

        Args:
            user: Authenticated user (must have an id)

        Returns:
            Signed session token to be set as the cookie value
        """
        session_id = secrets.token_urlsafe(32)
        payload = json.dumps({"user_id": user.id})
        try:
            await self.redis.set(self._key(session_id), payload, ex=self.max_age)
        except RedisError as e:
            raise StoreUnavailable("Failed to create session") from e
        return self._serializer.dumps(session_id)

    async def resolve(self, token: Optional[str]) -> Optional[User]:
        """
        Resolve a session token to its user, refreshing the idle window.

        Returns:
            The User, or None when the token is missing, tampered, expired,
            or refers to a user that no longer exists
        """
        session_id = self._unsign(token)
        if session_id is None:
            return None

        key = self._key(session_id)
        try:
            raw = await self.redis.get(key)
            if raw is None:
                return None
            await self.redis.expire(key, self.max_age)
        except RedisError as e:
            raise StoreUnavailable("Failed to read session") from e

        try:
            user_id = json.loads(raw).get("user_id")
        except (ValueError, AttributeError):
            user_id = None

        user = await self.store.get_by_id(user_id) if user_id else None
        if user is None:
            try:
                await self.redis.delete(key)
            except RedisError as e:
                raise StoreUnavailable("Failed to drop dangling session") from e
            return None
        return user

    async def destroy(self, token: Optional[str]) -> None:
        """Remove the server-side record. Safe to call repeatedly."""
        session_id = self._unsign(token)
        if session_id is None:
            return
        try:
            await self.redis.delete(self._key(session_id))
        except RedisError as e:
            raise StoreUnavailable("Failed to destroy session") from e

    def is_secure_request(self, request: Request) -> bool:
        """
        Whether the browser reached us over HTTPS.

        In production exactly one proxy hop is trusted: the right-most value
        of X-Forwarded-Proto. Elsewhere only the direct connection counts.
        """
        if self.settings.is_production:
            forwarded = request.headers.get("x-forwarded-proto")
            if forwarded:
                return forwarded.split(",")[-1].strip().lower() == "https"
        return request.url.scheme == "https"

    def set_cookie(self, response: Response, request: Request, token: str) -> None:
        # Browser-session cookie: the sliding Redis TTL alone decides expiry
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            httponly=True,
            samesite="lax",
            secure=self.is_secure_request(request),
        )

    def clear_cookie(self, response: Response) -> None:
        response.delete_cookie(key=self.cookie_name)

    def token_from(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.cookie_name)
