"""Post persistence on top of the key-value store.

Posts have no id field: a post is stored under a composite key built from
its own ``username`` and server-assigned ``time``, so any copy of a post is
enough to locate the stored original. ``post_key`` is the only place that
knows how the key is laid out.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from feed_service.services.errors import LikeConflict, ValidationError
from feed_service.services.kv_store import KeyValueNamespace
from feed_service.utils.time import utc_timestamp

# Configure logger for this module
logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"


def post_key(username: str, time: str) -> str:
    """Return the store key for the post ``username`` wrote at ``time``.

    Username first, so that one user's posts share a key prefix.
    """
    return f"{username}{KEY_SEPARATOR}{time}"


def require_text(post: Mapping[str, Any], field: str) -> str:
    """Return ``post[field]`` or raise ``ValidationError`` if it is missing or empty."""
    value = post.get(field)
    if not isinstance(value, str) or not value:
        raise ValidationError(f"No {field} present in post")
    return value


def _read_likes(post: Mapping[str, Any]) -> int | None:
    likes = post.get("likes")
    if likes is None:
        return None
    if isinstance(likes, bool) or not isinstance(likes, int) or likes < 0:
        raise ValidationError("likes must be a non-negative integer")
    return likes


def _stored_likes(raw: str | None) -> int:
    if raw is None:
        return 0
    try:
        stored = json.loads(raw)
    except json.JSONDecodeError:
        return 0
    likes = stored.get("likes") if isinstance(stored, dict) else None
    if isinstance(likes, bool) or not isinstance(likes, int):
        return 0
    return likes


class PostStore:
    """Creates, lists and like-updates posts."""

    def __init__(self, posts: KeyValueNamespace, *, max_like_attempts: int = 5) -> None:
        self._posts = posts
        self._max_like_attempts = max(1, max_like_attempts)

    async def create(self, post: Mapping[str, Any], *, now: str | None = None) -> dict[str, Any]:
        """Stamp ``post`` with the current time and store it.

        Args:
            post: Client-supplied post body. Any ``time`` it carries is replaced.
            now: Timestamp to stamp, defaults to the current UTC time.

        Returns:
            The stored post, including its ``time``.

        Raises:
            ValidationError: If ``username`` is missing.
            StoreUnavailable: If the write fails.
        """
        username = require_text(post, "username")
        stored = dict(post)
        stored["time"] = now or utc_timestamp()
        await self._posts.put(post_key(username, stored["time"]), json.dumps(stored))
        return stored

    async def list_posts(self) -> list[dict[str, Any]]:
        """Return every stored post, oldest first.

        Keys that disappear between listing and fetching are skipped, as are
        values that do not decode to a JSON object.
        """
        posts: list[dict[str, Any]] = []
        for key in await self._posts.list_keys():
            raw = await self._posts.get(key)
            if raw is None:
                logger.debug("Post %s vanished while listing", key)
                continue
            try:
                decoded = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning("Skipping undecodable post stored under %s", key)
                continue
            if not isinstance(decoded, dict):
                logger.warning("Skipping non-object post stored under %s", key)
                continue
            posts.append(decoded)

        posts.sort(key=lambda item: (str(item.get("time", "")), str(item.get("username", ""))))
        return posts

    async def apply_like(self, post: Mapping[str, Any]) -> dict[str, Any]:
        """Replace the stored post with ``post``, which carries the new like count.

        The replacement is a compare-and-set: if another update lands between
        the read and the write, the like delta this request carries is
        re-applied on top of the newer count instead of overwriting it.

        Raises:
            ValidationError: If ``username`` or ``time`` is missing.
            LikeConflict: If every attempt lost its race.
            StoreUnavailable: If the store fails.
        """
        key = post_key(require_text(post, "username"), require_text(post, "time"))
        incoming = dict(post)
        likes = _read_likes(incoming)

        current = await self._posts.get(key)
        delta = None if likes is None else likes - _stored_likes(current)
        candidate = incoming

        for attempt in range(1, self._max_like_attempts + 1):
            if await self._posts.compare_and_set(key, current, json.dumps(candidate)):
                return candidate
            logger.info("Like update on %s lost a race (attempt %d)", key, attempt)
            current = await self._posts.get(key)
            if delta is not None:
                candidate = {**incoming, "likes": max(0, _stored_likes(current) + delta)}

        raise LikeConflict(f"Post {key} is being updated concurrently, try again")
