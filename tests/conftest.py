# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from feed_service.api.v1 import dependencies
from feed_service.core.settings import Settings
from feed_service.main import app as fastapi_app
from feed_service.services.auth_client import AuthServiceClient
from feed_service.services.errors import StoreUnavailable
from feed_service.services.kv_store import (
    KeyValueNamespace,
    KeyValueStore,
    MemoryKeyValueStore,
)

TEST_AUTH_URL = "http://auth.test"


class SpyNamespace(KeyValueNamespace):
    """Namespace wrapper that records every mutating call."""

    def __init__(self, inner: KeyValueNamespace, *, fail_writes: bool = False) -> None:
        super().__init__(inner.name)
        self.inner = inner
        self.writes: list[tuple[str, str]] = []
        self.fail_writes = fail_writes

    def _record(self, operation: str, key: str) -> None:
        if self.fail_writes:
            raise StoreUnavailable(f"Key-value store {operation} failed: injected")
        self.writes.append((operation, key))

    async def get(self, key: str) -> str | None:
        return await self.inner.get(key)

    async def put(self, key: str, value: str) -> None:
        self._record("put", key)
        await self.inner.put(key, value)

    async def delete(self, key: str) -> None:
        self._record("delete", key)
        await self.inner.delete(key)

    async def list_keys(self) -> list[str]:
        return await self.inner.list_keys()

    async def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        self._record("compare_and_set", key)
        return await self.inner.compare_and_set(key, expected, value)


class SpyStore(KeyValueStore):
    """Memory store whose namespaces are ``SpyNamespace`` instances."""

    def __init__(self) -> None:
        self._backend = MemoryKeyValueStore()
        self._namespaces: dict[str, SpyNamespace] = {}

    def namespace(self, name: str) -> SpyNamespace:
        if name not in self._namespaces:
            self._namespaces[name] = SpyNamespace(self._backend.namespace(name))
        return self._namespaces[name]


@pytest.fixture()
def test_settings() -> Settings:
    """Provide settings pointing at a fake authentication service."""
    return Settings(auth_server_url=TEST_AUTH_URL)


@pytest.fixture()
def kv_store() -> SpyStore:
    """Return a fresh spying in-memory store."""
    return SpyStore()


@pytest.fixture()
def posts_ns(kv_store: SpyStore, test_settings: Settings) -> SpyNamespace:
    return kv_store.namespace(test_settings.posts_namespace)


@pytest.fixture()
def users_ns(kv_store: SpyStore, test_settings: Settings) -> SpyNamespace:
    return kv_store.namespace(test_settings.users_namespace)


@pytest.fixture()
def auth_client() -> AsyncMock:
    """Return a mocked authentication service client."""
    client = AsyncMock(spec=AuthServiceClient)
    client.open_session.return_value = ["session=abc123; Path=/; HttpOnly"]
    return client


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    kv_store: SpyStore,
    auth_client: AsyncMock,
    test_settings: Settings,
) -> Iterator[None]:
    overrides = {
        dependencies.get_kv_store_dep: lambda: kv_store,
        dependencies.get_auth_client_dep: lambda: auth_client,
        dependencies.get_settings: lambda: test_settings,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
