"""Tests for the authentication service HTTP client."""

import httpx
import pytest

from feed_service.services.auth_client import AuthClientConfig, AuthServiceClient
from feed_service.services.errors import AuthRejected, AuthServiceUnavailable

CONFIG = AuthClientConfig(base_url="http://auth.test", timeout_seconds=1.0)


def _client(handler) -> AuthServiceClient:
    return AuthServiceClient(CONFIG, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_verify_forwards_cookie_and_returns_body() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["cookie"] = request.headers.get("cookie")
        return httpx.Response(200, text="alice")

    client = _client(handler)
    try:
        assert await client.verify("session=abc") == "alice"
    finally:
        await client.close()

    assert seen == {"path": "/verify", "cookie": "session=abc"}


@pytest.mark.asyncio
async def test_verify_rejected_session() -> None:
    client = _client(lambda request: httpx.Response(401, text="no"))
    with pytest.raises(AuthRejected):
        await client.verify("session=abc")


@pytest.mark.asyncio
async def test_verify_server_error_is_unauthorized() -> None:
    client = _client(lambda request: httpx.Response(500))
    with pytest.raises(AuthServiceUnavailable) as exc_info:
        await client.verify("session=abc")
    assert exc_info.value.status_code == 401
    assert "500" in exc_info.value.detail


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout])
async def test_verify_transport_failure_is_unauthorized(error) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error("boom", request=request)

    client = _client(handler)
    with pytest.raises(AuthServiceUnavailable) as exc_info:
        await client.verify("session=abc")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_open_session_returns_set_cookie() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.raw_path
        return httpx.Response(200, headers={"Set-Cookie": "session=abc; Path=/"})

    client = _client(handler)
    assert await client.open_session("al ice") == ["session=abc; Path=/"]
    assert seen["path"] == b"/auth/al%20ice"


@pytest.mark.asyncio
async def test_open_session_without_cookie_fails() -> None:
    client = _client(lambda request: httpx.Response(200))
    with pytest.raises(AuthServiceUnavailable) as exc_info:
        await client.open_session("alice")
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_open_session_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("boom", request=request)

    client = _client(handler)
    with pytest.raises(AuthServiceUnavailable) as exc_info:
        await client.open_session("alice")
    assert exc_info.value.status_code == 502
