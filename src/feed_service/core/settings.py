"""Application settings and configuration.

This module defines all configuration options for the Feed Service.
Settings are loaded once from environment variables with sensible defaults
and are frozen afterwards; components receive the values they need through
their constructors rather than reading the environment per request.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Feed Service", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Frontend origin allowed by CORS (credentials are always allowed)
    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")

    # External authentication service
    auth_server_url: str = Field(default="http://localhost:8080", alias="AUTH_SERVER_URL")
    auth_http_timeout_seconds: float = Field(default=5.0, alias="AUTH_HTTP_TIMEOUT_SECONDS")

    # Key-value store
    kv_backend: Literal["memory", "redis"] = Field(default="memory", alias="KV_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    kv_key_prefix: str = Field(default="feed", alias="KV_KEY_PREFIX")
    kv_timeout_seconds: float = Field(default=2.0, alias="KV_TIMEOUT_SECONDS")
    posts_namespace: str = Field(default="posts", alias="POSTS_NAMESPACE")
    users_namespace: str = Field(default="users", alias="USERS_NAMESPACE")

    # Access policies. Both default to the permissive behaviour clients rely on.
    require_session_for_known_users: bool = Field(
        default=False,
        alias="REQUIRE_SESSION_FOR_KNOWN_USERS",
    )
    likes_require_session: bool = Field(default=False, alias="LIKES_REQUIRE_SESSION")

    # Compare-and-set attempts for a single like update before giving up
    like_update_max_attempts: int = Field(default=5, ge=1, alias="LIKE_UPDATE_MAX_ATTEMPTS")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @property
    def cors_origins(self) -> list[str]:
        """Return the origins allowed by the CORS middleware."""
        return [self.frontend_url]


settings = Settings()
