"""Authentication gate for post creation.

Each post-creation request reaches exactly one of these outcomes:

- known user with a cookie: the cookie is verified with the authentication
  service and the returned username must equal the claimed one
- known user without a cookie: accepted unverified, unless the
  ``require_session_for_known_users`` policy is switched on
- new user: a session is opened with the authentication service first, and
  the user is registered locally only once that succeeds, so a failed call
  never leaves a registered user without a session

Rejections and failures raise before any post is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from feed_service.services.auth_client import AuthServiceClient
from feed_service.services.errors import AuthRejected
from feed_service.services.identity import IdentityRegistry

# Configure logger for this module
logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    """Terminal accepting states of the post-creation gate."""

    VERIFIED = "verified"
    UNVERIFIED = "unverified"
    REGISTERED = "registered"


@dataclass(frozen=True)
class AuthOutcome:
    """Result of a successful pass through the gate.

    ``set_cookies`` holds the ``Set-Cookie`` values to relay to the client and
    is only populated for newly registered users.
    """

    state: AuthState
    username: str
    set_cookies: tuple[str, ...] = ()


class AuthDelegate:
    """Decides whether a claimed username may create a post."""

    def __init__(
        self,
        registry: IdentityRegistry,
        client: AuthServiceClient,
        *,
        require_session_for_known_users: bool = False,
    ) -> None:
        self._registry = registry
        self._client = client
        self._require_session = require_session_for_known_users

    async def authorize_post(
        self,
        username: str,
        cookie: str | None,
        *,
        registered_at: str,
    ) -> AuthOutcome:
        """Run the gate for one post-creation request.

        Args:
            username: Username claimed in the post body.
            cookie: Raw ``Cookie`` header, if the client sent one.
            registered_at: Timestamp recorded if the user is registered now.

        Returns:
            The accepting outcome.

        Raises:
            AuthRejected: If the session belongs to someone else or is required
                but missing.
            AuthServiceUnavailable: If the authentication service fails.
        """
        if await self._registry.is_known(username):
            return await self._authorize_known(username, cookie)
        return await self._register_new(username, registered_at)

    async def _authorize_known(self, username: str, cookie: str | None) -> AuthOutcome:
        if not cookie:
            if self._require_session:
                logger.info("Rejected %r: no session cookie", username)
                raise AuthRejected("Session cookie required")
            logger.info("Accepted %r without verification", username)
            return AuthOutcome(state=AuthState.UNVERIFIED, username=username)

        authenticated = await self._client.verify(cookie)
        if authenticated != username:
            logger.info("Rejected %r: session belongs to another user", username)
            raise AuthRejected("Could not verify user")

        logger.info("Verified %r", username)
        return AuthOutcome(state=AuthState.VERIFIED, username=username)

    async def _register_new(self, username: str, registered_at: str) -> AuthOutcome:
        set_cookies = await self._client.open_session(username)
        await self._registry.register(username, registered_at)
        logger.info("Opened session for new user %r", username)
        return AuthOutcome(
            state=AuthState.REGISTERED,
            username=username,
            set_cookies=tuple(set_cookies),
        )

    async def verify_session(self, cookie: str | None) -> str:
        """Return the username behind ``cookie`` or raise ``AuthRejected``.

        Used where any authenticated user will do, rather than a specific one.
        """
        if not cookie:
            raise AuthRejected("Session cookie required")
        authenticated = await self._client.verify(cookie)
        if not authenticated:
            raise AuthRejected("Could not verify user")
        return authenticated
