"""Shared API dependencies wiring settings and services into the endpoints."""

from typing import Annotated

from fastapi import Depends

from feed_service.core.settings import Settings, settings
from feed_service.services.auth_client import AuthServiceClient, get_auth_client
from feed_service.services.auth_delegate import AuthDelegate
from feed_service.services.identity import IdentityRegistry
from feed_service.services.kv_store import KeyValueStore, get_kv_store
from feed_service.services.post_store import PostStore


def get_settings() -> Settings:
    """Return the settings loaded at process start."""
    return settings


def get_kv_store_dep() -> KeyValueStore:
    """Return the shared key-value store."""
    return get_kv_store()


def get_auth_client_dep() -> AuthServiceClient:
    """Return the shared authentication service client."""
    return get_auth_client()


SettingsDep = Annotated[Settings, Depends(get_settings)]
KeyValueStoreDep = Annotated[KeyValueStore, Depends(get_kv_store_dep)]
AuthClientDep = Annotated[AuthServiceClient, Depends(get_auth_client_dep)]


def get_identity_registry(store: KeyValueStoreDep, config: SettingsDep) -> IdentityRegistry:
    """Build the identity registry over the configured users namespace."""
    return IdentityRegistry(store.namespace(config.users_namespace))


def get_post_store(store: KeyValueStoreDep, config: SettingsDep) -> PostStore:
    """Build the post store over the configured posts namespace."""
    return PostStore(
        store.namespace(config.posts_namespace),
        max_like_attempts=config.like_update_max_attempts,
    )


IdentityRegistryDep = Annotated[IdentityRegistry, Depends(get_identity_registry)]
PostStoreDep = Annotated[PostStore, Depends(get_post_store)]


def get_auth_delegate(
    registry: IdentityRegistryDep,
    client: AuthClientDep,
    config: SettingsDep,
) -> AuthDelegate:
    """Build the post-creation gate with the configured policy."""
    return AuthDelegate(
        registry,
        client,
        require_session_for_known_users=config.require_session_for_known_users,
    )


AuthDelegateDep = Annotated[AuthDelegate, Depends(get_auth_delegate)]


def cors_headers(config: Settings) -> dict[str, str]:
    """Return the CORS headers answered to a bare preflight request."""
    return {
        "Access-Control-Allow-Origin": config.frontend_url,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Allow-Methods": "GET,HEAD,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
    }
