"""Business logic services for the feed application."""

from .auth_client import AuthServiceClient
from .auth_delegate import AuthDelegate, AuthOutcome, AuthState
from .identity import IdentityRegistry
from .kv_store import KeyValueNamespace, KeyValueStore, MemoryKeyValueStore, RedisKeyValueStore
from .post_store import PostStore, post_key

__all__ = [
    "AuthServiceClient",
    "AuthDelegate",
    "AuthOutcome",
    "AuthState",
    "IdentityRegistry",
    "KeyValueNamespace",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "RedisKeyValueStore",
    "PostStore",
    "post_key",
]
