"""
Google OAuth2 login: authorization redirect, code exchange, find-or-create.

A login attempt walks through the HandshakeState stages below. Any failure is
raised as ExternalIdentityFailure carrying the stage; callers redirect the
browser to the login page without exposing the detail.
"""
import logging
from enum import Enum
from typing import Any, Optional

import httpx
from authlib.integrations.httpx_client import AsyncOAuth2Client, OAuthError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from secretstack.config import Settings
from secretstack.core.exceptions import ExternalIdentityFailure, StoreUnavailable
from secretstack.database.databases.user_db import RedisKeys
from secretstack.models.user import User
from secretstack.services.user_store import UserStore

logger = logging.getLogger(__name__)

SCOPES = ["profile"]


class HandshakeState(str, Enum):
    """Stages of one external login attempt."""
    INITIATED = "initiated"
    CALLBACK_RECEIVED = "callback_received"
    EXCHANGED = "exchanged"
    RESOLVED = "resolved"
    FAILED = "failed"


def create_oauth_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncOAuth2Client:
    """
    Create the OAuth2 client used for every Google handshake.

    The client is shared across requests, so callers use the token returned
    by fetch_token and never the client's own ``token`` attribute.
    """
    return AsyncOAuth2Client(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        scope=" ".join(SCOPES),
        redirect_uri=settings.google_callback_url,
        token_endpoint_auth_method="client_secret_post",
        timeout=settings.http_timeout_seconds,
        transport=transport,
    )


class GoogleIdentityBridge:
    """
    Async OAuth2 client for Google sign-in.
    """

    def __init__(
        self,
        oauth_client: AsyncOAuth2Client,
        redis: Redis,
        store: UserStore,
        settings: Settings,
    ):
        self.oauth = oauth_client
        self.redis = redis
        self.store = store
        self.settings = settings

    @property
    def enabled(self) -> bool:
        return self.settings.google_enabled

    @staticmethod
    def _state_key(state: str) -> str:
        return f"{RedisKeys.OAUTH_STATE}{state}"

    def _fail(self, stage: HandshakeState, reason: str, cause: Optional[BaseException] = None):
        logger.warning(
            "Google login %s at %s: %s",
            HandshakeState.FAILED.value,
            stage.value,
            reason,
        )
        return ExternalIdentityFailure(stage.value, reason, cause=cause)

    # ==================== Initiated ====================

    async def authorization_url(self) -> str:
        """
        Begin a login attempt.

        Stores a single-use state value and returns the provider URL the
        browser should be redirected to.
        """
        if not self.enabled:
            raise self._fail(HandshakeState.INITIATED, "Google client is not configured")

        url, state = self.oauth.create_authorization_url(self.settings.google_authorize_url)
        try:
            await self.redis.set(
                self._state_key(state),
                "1",
                ex=self.settings.oauth_state_ttl_seconds,
            )
        except RedisError as e:
            raise self._fail(HandshakeState.INITIATED, "state store unavailable", e)

        logger.debug("Google login %s", HandshakeState.INITIATED.value)
        return url

    # ==================== Callback ====================

    async def complete(
        self,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
    ) -> User:
        """
        Finish a login attempt from the provider callback parameters.

        Args:
            code: Authorization code from the provider
            state: State value echoed back by the provider
            error: Error code when the user denied consent

        Returns:
            The resolved (found or newly created) User

        Raises:
            ExternalIdentityFailure: On any handshake failure
        """
        stage = HandshakeState.CALLBACK_RECEIVED
        if not self.enabled:
            raise self._fail(stage, "Google client is not configured")
        if error:
            raise self._fail(stage, f"provider returned error={error}")
        if not code or not state:
            raise self._fail(stage, "missing code or state")

        try:
            # Single use: a replayed callback finds nothing
            known = await self.redis.delete(self._state_key(state))
        except RedisError as e:
            raise self._fail(stage, "state store unavailable", e)
        if not known:
            raise self._fail(stage, "unknown or expired state")

        access_token = await self._exchange_code(code)
        profile = await self._fetch_profile(access_token)
        logger.debug("Google login %s", HandshakeState.EXCHANGED.value)

        external_id = profile.get("sub") or profile.get("id")
        if not external_id:
            raise self._fail(HandshakeState.EXCHANGED, "profile has no id")

        try:
            user, created = await self.store.find_or_create_by_external_id(str(external_id))
        except StoreUnavailable as e:
            raise self._fail(HandshakeState.EXCHANGED, "user store unavailable", e)

        logger.info(
            "Google login %s for user %s (%s)",
            HandshakeState.RESOLVED.value,
            user.id,
            "created" if created else "existing",
        )
        return user

    # ==================== Exchanged ====================

    async def _exchange_code(self, code: str) -> str:
        stage = HandshakeState.CALLBACK_RECEIVED
        url = self.settings.google_token_url
        try:
            token = await self.oauth.fetch_token(
                url,
                code=code,
                grant_type="authorization_code",
            )
        except OAuthError as e:
            detail = e.description or e.error
            raise self._fail(stage, f"{url} rejected the code: {detail}", e)
        except httpx.HTTPStatusError as e:
            raise self._fail(stage, f"{url} returned HTTP {e.response.status_code}", e)
        except httpx.HTTPError as e:
            raise self._fail(stage, f"{url} request failed: {e}", e)
        except ValueError as e:
            raise self._fail(stage, f"{url} returned invalid JSON", e)

        access_token = token.get("access_token")
        if not access_token:
            raise self._fail(stage, "token response has no access_token")
        return access_token

    async def _fetch_profile(self, access_token: str) -> dict[str, Any]:
        stage = HandshakeState.EXCHANGED
        url = self.settings.google_userinfo_url
        try:
            response = await self.oauth.request(
                "GET",
                url,
                withhold_token=True,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise self._fail(stage, f"{url} returned HTTP {e.response.status_code}", e)
        except httpx.HTTPError as e:
            raise self._fail(stage, f"{url} request failed: {e}", e)
        except ValueError as e:
            raise self._fail(stage, f"{url} returned invalid JSON", e)

        if not isinstance(payload, dict):
            raise self._fail(stage, f"{url} returned unexpected payload")
        return payload
