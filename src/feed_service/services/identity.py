"""Registry of usernames that have posted before."""

from __future__ import annotations

import logging

from feed_service.services.kv_store import KeyValueNamespace

logger = logging.getLogger(__name__)


class IdentityRegistry:
    """Tracks known usernames in the ``users`` namespace.

    Usernames are compared byte for byte; no case folding or trimming is
    applied, so ``"Alice"`` and ``"alice "`` are different users.
    """

    def __init__(self, users: KeyValueNamespace) -> None:
        self._users = users

    async def is_known(self, username: str) -> bool:
        """Return True if ``register`` has succeeded for ``username``."""
        return await self._users.get(username) is not None

    async def register(self, username: str, timestamp: str) -> None:
        """Record ``username`` as known.

        Registering twice overwrites the stored timestamp (last write wins).
        """
        await self._users.put(username, timestamp)
        logger.info("Registered user %r at %s", username, timestamp)

    async def list_usernames(self) -> list[str]:
        """Return every registered username in sorted order."""
        return sorted(await self._users.list_keys())
