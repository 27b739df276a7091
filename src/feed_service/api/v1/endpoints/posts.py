"""Post-related endpoints for the feed API."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Header, Response

from feed_service.api.v1.dependencies import (
    AuthDelegateDep,
    PostStoreDep,
    SettingsDep,
    cors_headers,
)
from feed_service.schemas.post import PostCreate, PostResponse
from feed_service.services.post_store import require_text
from feed_service.utils.time import utc_timestamp

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("")
async def list_posts(
    response: Response,
    post_store: PostStoreDep,
    config: SettingsDep,
) -> list[dict[str, Any]]:
    """List every post, oldest first.

    Stored posts are returned as decoded, without reshaping them. The CORS
    headers are set whether or not the request carries an ``Origin``.
    """
    response.headers.update(cors_headers(config))
    return await post_store.list_posts()


@router.post("", response_model=PostResponse, response_model_exclude_unset=True)
async def create_post(
    post: PostCreate,
    response: Response,
    post_store: PostStoreDep,
    auth_delegate: AuthDelegateDep,
    cookie: Annotated[str | None, Header()] = None,
) -> dict[str, Any]:
    """Create a post after passing the authentication gate.

    New users get the session cookie issued by the authentication service
    relayed on this response.

    Args:
        post: Post body; must carry ``username``
        response: Outgoing response, used to relay ``Set-Cookie``
        post_store: Post persistence
        auth_delegate: Authentication gate
        cookie: Raw ``Cookie`` header, forwarded for verification

    Returns:
        The stored post including its server-assigned ``time``
    """
    body = post.model_dump(exclude_unset=True)
    username = require_text(body, "username")
    now = utc_timestamp()

    outcome = await auth_delegate.authorize_post(username, cookie, registered_at=now)
    stored = await post_store.create(body, now=now)

    for set_cookie in outcome.set_cookies:
        response.headers.append("Set-Cookie", set_cookie)
    return stored


@router.options("")
async def posts_preflight(config: SettingsDep) -> Response:
    """Answer a preflight request with CORS headers only."""
    return Response(content="success", headers=cors_headers(config))
