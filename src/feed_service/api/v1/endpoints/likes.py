"""Like-count endpoint for the feed API."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Header

from feed_service.api.v1.dependencies import AuthDelegateDep, PostStoreDep, SettingsDep
from feed_service.schemas.post import LikeUpdate, PostResponse

router = APIRouter(tags=["likes"])


@router.post("/updatelikes", response_model=PostResponse, response_model_exclude_unset=True)
async def update_likes(
    post: LikeUpdate,
    post_store: PostStoreDep,
    auth_delegate: AuthDelegateDep,
    config: SettingsDep,
    cookie: Annotated[str | None, Header()] = None,
) -> dict[str, Any]:
    """Replace a post with the copy the client sent back, new like count included.

    Likes are anonymous unless ``LIKES_REQUIRE_SESSION`` is enabled, in which
    case any verified session is accepted.
    """
    if config.likes_require_session:
        await auth_delegate.verify_session(cookie)
    return await post_store.apply_like(post.model_dump(exclude_unset=True))
