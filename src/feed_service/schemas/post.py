"""Post-related Pydantic schemas.

Posts are free-form JSON objects: unknown fields are accepted and stored
verbatim. Required fields are checked by the post store so that a missing
``username`` is reported the same way whichever route receives it.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for creating a new post. ``time`` is always assigned by the server."""

    username: str | None = Field(None, description="Author of the post")
    title: Any = Field(None, description="Short title")
    content: Any = Field(None, description="Post body")

    model_config = ConfigDict(extra="allow")


class LikeUpdate(BaseModel):
    """Full post body sent back with an updated like count."""

    username: str | None = Field(None, description="Author of the post being liked")
    time: str | None = Field(None, description="Server-assigned creation time of the post")
    likes: int | None = Field(None, ge=0, description="New like count")

    model_config = ConfigDict(extra="allow")


class PostResponse(BaseModel):
    """Schema for post information returned by the API.

    Only the key fields are typed; everything else is echoed as stored.
    """

    username: str
    time: str

    model_config = ConfigDict(extra="allow")
