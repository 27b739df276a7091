"""User registry endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from feed_service.api.v1.dependencies import IdentityRegistryDep
from feed_service.schemas.user import UserCreate
from feed_service.services.post_store import require_text
from feed_service.utils.time import utc_timestamp

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(registry: IdentityRegistryDep) -> list[str]:
    """Return every registered username."""
    return await registry.list_usernames()


@router.post("")
async def register_user(user: UserCreate, registry: IdentityRegistryDep) -> dict[str, Any]:
    """Register a username without contacting the authentication service."""
    body = user.model_dump(exclude_unset=True)
    await registry.register(require_text(body, "username"), utc_timestamp())
    return body
