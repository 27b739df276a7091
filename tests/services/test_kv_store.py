"""Tests for the key-value store backends."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from feed_service.core.settings import Settings
from feed_service.services.errors import StoreUnavailable
from feed_service.services.kv_store import (
    MemoryKeyValueStore,
    RedisKeyValueStore,
    RedisNamespace,
    build_kv_store,
)


@pytest.fixture
def memory_ns():
    return MemoryKeyValueStore().namespace("posts")


@pytest.mark.asyncio
async def test_memory_get_missing_key_returns_none(memory_ns) -> None:
    assert await memory_ns.get("nope") is None


@pytest.mark.asyncio
async def test_memory_put_get_delete(memory_ns) -> None:
    await memory_ns.put("k", "v1")
    await memory_ns.put("k", "v2")
    assert await memory_ns.get("k") == "v2"

    await memory_ns.delete("k")
    assert await memory_ns.get("k") is None
    # Deleting again is not an error
    await memory_ns.delete("k")


@pytest.mark.asyncio
async def test_memory_namespaces_are_isolated() -> None:
    store = MemoryKeyValueStore()
    await store.namespace("posts").put("alice", "post")
    await store.namespace("users").put("alice", "user")

    assert await store.namespace("posts").get("alice") == "post"
    assert await store.namespace("users").list_keys() == ["alice"]
    # A second handle sees the same data
    assert await store.namespace("posts").list_keys() == ["alice"]


@pytest.mark.asyncio
async def test_memory_compare_and_set(memory_ns) -> None:
    assert await memory_ns.compare_and_set("k", None, "first") is True
    assert await memory_ns.compare_and_set("k", None, "second") is False
    assert await memory_ns.compare_and_set("k", "stale", "second") is False
    assert await memory_ns.get("k") == "first"

    assert await memory_ns.compare_and_set("k", "first", "second") is True
    assert await memory_ns.get("k") == "second"


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.get = AsyncMock()
    client.set = AsyncMock()
    client.delete = AsyncMock()
    return client


@pytest.mark.asyncio
async def test_redis_namespace_prefixes_keys(redis_client) -> None:
    redis_client.get.return_value = "value"
    namespace = RedisNamespace("posts", redis_client, "feed")

    assert await namespace.get("alice|t") == "value"
    redis_client.get.assert_awaited_once_with("feed:posts:alice|t")

    await namespace.put("alice|t", "new")
    redis_client.set.assert_awaited_once_with("feed:posts:alice|t", "new")

    await namespace.delete("alice|t")
    redis_client.delete.assert_awaited_once_with("feed:posts:alice|t")


@pytest.mark.asyncio
async def test_redis_namespace_lists_keys_without_prefix(redis_client) -> None:
    async def scan_iter(match: str):
        assert match == "feed:users:*"
        for key in ("feed:users:alice", "feed:users:bob"):
            yield key

    redis_client.scan_iter = scan_iter
    namespace = RedisNamespace("users", redis_client, "feed")

    assert sorted(await namespace.list_keys()) == ["alice", "bob"]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [RedisConnectionError("down"), RedisTimeoutError("slow")])
async def test_redis_failures_surface_as_store_unavailable(redis_client, error) -> None:
    redis_client.get.side_effect = error
    redis_client.set.side_effect = error
    namespace = RedisNamespace("posts", redis_client, "feed")

    with pytest.raises(StoreUnavailable):
        await namespace.get("k")
    with pytest.raises(StoreUnavailable):
        await namespace.put("k", "v")


def test_build_kv_store_selects_backend() -> None:
    assert isinstance(build_kv_store(Settings(kv_backend="memory")), MemoryKeyValueStore)
    redis_store = build_kv_store(Settings(kv_backend="redis", redis_url="redis://localhost:6399/0"))
    assert isinstance(redis_store, RedisKeyValueStore)
