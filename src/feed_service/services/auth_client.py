"""HTTP client for the external authentication service.

The authentication service owns every credential. This service only ever:

- forwards a session cookie to ``GET /verify`` and reads back the username
  the cookie belongs to (plain-text body)
- asks ``GET /auth/{username}`` to open a session for a brand-new user and
  relays the ``Set-Cookie`` header it answers with

All calls run with a bounded timeout; a hang becomes ``AuthServiceUnavailable``.
Nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import quote

import httpx
from fastapi import status

from feed_service.core.settings import Settings, settings
from feed_service.services.errors import AuthRejected, AuthServiceUnavailable

# Configure logger for this module
logger = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
REJECTED_STATUSES = frozenset({401, 403})


@dataclass(frozen=True)
class AuthClientConfig:
    """Immutable configuration for authentication service calls."""

    base_url: str
    timeout_seconds: float


def load_auth_config(config: Settings) -> AuthClientConfig:
    """Build configuration object from application settings."""

    return AuthClientConfig(
        base_url=config.auth_server_url.rstrip("/"),
        timeout_seconds=float(config.auth_http_timeout_seconds),
    )


class AuthServiceClient:
    """HTTP client wrapper for authentication service interactions."""

    def __init__(
        self,
        config: AuthClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or load_auth_config(settings)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=httpx.Timeout(self.config.timeout_seconds),
                    transport=self._transport,
                )
        return self._client

    async def verify(self, cookie: str) -> str:
        """Return the username the authentication service binds to ``cookie``.

        Args:
            cookie: Raw ``Cookie`` header received from the client.

        Returns:
            The response body, verbatim. It is not trimmed.

        Raises:
            AuthRejected: If the service refuses the session outright.
            AuthServiceUnavailable: If the service cannot be reached or answers
                with an error. Both are reported as 401.
        """
        client = await self._ensure_client()
        try:
            response = await client.get("/verify", headers={"Cookie": cookie})
        except httpx.HTTPError as exc:
            logger.warning("Verification request failed: %s", exc)
            raise AuthServiceUnavailable(
                f"Could not verify user. Error: {exc}",
                status_code=status.HTTP_401_UNAUTHORIZED,
            ) from exc

        if response.status_code in REJECTED_STATUSES:
            raise AuthRejected("Could not verify user")
        if response.status_code >= HTTP_BAD_REQUEST:
            logger.warning("Verification endpoint responded with %s", response.status_code)
            raise AuthServiceUnavailable(
                f"Authentication server responded with {response.status_code}",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        return response.text

    async def open_session(self, username: str) -> list[str]:
        """Open a session for a new user and return its ``Set-Cookie`` values.

        Raises:
            AuthServiceUnavailable: If the call fails, errors, or carries no cookie.
        """
        client = await self._ensure_client()
        try:
            response = await client.get(f"/auth/{quote(username, safe='')}")
        except httpx.HTTPError as exc:
            logger.warning("Session request for %r failed: %s", username, exc)
            raise AuthServiceUnavailable(
                f"Could not register user with authentication server. Error: {exc}"
            ) from exc

        if response.status_code >= HTTP_BAD_REQUEST:
            logger.warning(
                "Session endpoint responded with %s for %r", response.status_code, username
            )
            raise AuthServiceUnavailable(
                f"Authentication server responded with {response.status_code}"
            )

        cookies = response.headers.get_list("set-cookie")
        if not cookies:
            raise AuthServiceUnavailable("Authentication server did not issue a session cookie")
        return cookies

    async def close(self) -> None:
        """Clean up underlying HTTP client resources."""

        async with self._client_lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None


class _AuthClientSingleton:
    """Singleton wrapper for AuthServiceClient."""

    _instance: AuthServiceClient | None = None

    @classmethod
    def get_instance(cls) -> AuthServiceClient:
        """Get or create the singleton AuthServiceClient instance."""
        if cls._instance is None:
            cls._instance = AuthServiceClient()
        return cls._instance


def get_auth_client() -> AuthServiceClient:
    """Return a singleton authentication client instance."""
    return _AuthClientSingleton.get_instance()
