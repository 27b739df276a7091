"""User-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    """Schema for registering a username directly."""

    username: str | None = Field(None, description="Username to register")

    model_config = ConfigDict(extra="allow")
