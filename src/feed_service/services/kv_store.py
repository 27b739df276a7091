"""Key-value store adapter.

The feed keeps all of its state in a flat, namespace-partitioned key-value
store. This module exposes a uniform async interface over it:

- ``get`` / ``put`` / ``delete`` / ``list_keys`` with last-write-wins semantics
- ``compare_and_set`` for the few writes that must not lose updates

Two backends are provided. ``RedisKeyValueStore`` talks to Redis with bounded
socket timeouts; ``MemoryKeyValueStore`` keeps everything in process and is
used for local development and tests. Any backend failure is raised as
``StoreUnavailable`` and must be propagated by callers.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict

import redis.asyncio as redis
from redis.exceptions import RedisError, WatchError

from feed_service.core.settings import Settings, settings
from feed_service.services.errors import StoreUnavailable

# Configure logger for this module
logger = logging.getLogger(__name__)


class KeyValueNamespace(ABC):
    """A single namespace of the key-value store."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key`` or None when it is missing."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""

    @abstractmethod
    async def list_keys(self) -> list[str]:
        """Return every key name in the namespace, in no particular order."""

    @abstractmethod
    async def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        """Write ``value`` only if the current value equals ``expected``.

        Args:
            key: Key to update.
            expected: Value the caller last observed, or None for "absent".
            value: Replacement value.

        Returns:
            True if the write happened, False if the key changed in between.
        """


class KeyValueStore(ABC):
    """Factory for namespaces backed by the same store."""

    @abstractmethod
    def namespace(self, name: str) -> KeyValueNamespace:
        """Return a handle bound to the namespace ``name``."""

    async def close(self) -> None:
        """Release any connections held by the backend."""


class MemoryNamespace(KeyValueNamespace):
    """Namespace view over a ``MemoryKeyValueStore``."""

    def __init__(self, name: str, data: dict[str, str], lock: asyncio.Lock) -> None:
        super().__init__(name)
        self._data = data
        self._lock = lock

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def list_keys(self) -> list[str]:
        return list(self._data)

    async def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        async with self._lock:
            if self._data.get(key) != expected:
                return False
            self._data[key] = value
            return True


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store. State does not survive restarts."""

    def __init__(self) -> None:
        self._namespaces: dict[str, dict[str, str]] = defaultdict(dict)
        self._lock = asyncio.Lock()

    def namespace(self, name: str) -> KeyValueNamespace:
        return MemoryNamespace(name, self._namespaces[name], self._lock)


class RedisNamespace(KeyValueNamespace):
    """Namespace stored as ``<prefix>:<namespace>:<key>`` Redis strings."""

    def __init__(self, name: str, client: redis.Redis, prefix: str) -> None:
        super().__init__(name)
        self._client = client
        self._prefix = f"{prefix}:{name}:" if prefix else f"{name}:"

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _unavailable(self, operation: str, exc: Exception) -> StoreUnavailable:
        logger.warning("Key-value %s failed in namespace %s: %s", operation, self.name, exc)
        return StoreUnavailable(f"Key-value store {operation} failed: {exc}")

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(self._full_key(key))
        except (RedisError, OSError) as exc:
            raise self._unavailable("get", exc) from exc

    async def put(self, key: str, value: str) -> None:
        try:
            await self._client.set(self._full_key(key), value)
        except (RedisError, OSError) as exc:
            raise self._unavailable("put", exc) from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(self._full_key(key))
        except (RedisError, OSError) as exc:
            raise self._unavailable("delete", exc) from exc

    async def list_keys(self) -> list[str]:
        offset = len(self._prefix)
        try:
            return [
                full_key[offset:]
                async for full_key in self._client.scan_iter(match=f"{self._prefix}*")
            ]
        except (RedisError, OSError) as exc:
            raise self._unavailable("list", exc) from exc

    async def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        full_key = self._full_key(key)
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                await pipe.watch(full_key)
                current = await pipe.get(full_key)
                if current != expected:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                pipe.set(full_key, value)
                await pipe.execute()
                return True
        except WatchError:
            return False
        except (RedisError, OSError) as exc:
            raise self._unavailable("compare-and-set", exc) from exc


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed store with bounded socket timeouts."""

    def __init__(self, url: str, *, prefix: str, timeout_seconds: float) -> None:
        self._prefix = prefix
        self._client: redis.Redis = redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )

    def namespace(self, name: str) -> KeyValueNamespace:
        return RedisNamespace(name, self._client, self._prefix)

    async def close(self) -> None:
        await self._client.aclose()


def build_kv_store(config: Settings) -> KeyValueStore:
    """Create the backend selected by ``config.kv_backend``."""
    if config.kv_backend == "redis":
        return RedisKeyValueStore(
            config.redis_url,
            prefix=config.kv_key_prefix,
            timeout_seconds=config.kv_timeout_seconds,
        )
    return MemoryKeyValueStore()


class _KeyValueStoreSingleton:
    """Singleton wrapper for the process-wide store."""

    _instance: KeyValueStore | None = None

    @classmethod
    def get_instance(cls) -> KeyValueStore:
        """Get or create the singleton store instance."""
        if cls._instance is None:
            cls._instance = build_kv_store(settings)
        return cls._instance

    @classmethod
    async def reset(cls) -> None:
        """Close and forget the current instance."""
        if cls._instance is not None:
            await cls._instance.close()
            cls._instance = None


def get_kv_store() -> KeyValueStore:
    """Return the process-wide key-value store."""
    return _KeyValueStoreSingleton.get_instance()


async def close_kv_store() -> None:
    """Close the process-wide key-value store, if one was created."""
    await _KeyValueStoreSingleton.reset()
