"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .post import LikeUpdate, PostCreate, PostResponse
from .user import UserCreate

__all__ = [
    "LikeUpdate", "PostCreate", "PostResponse",
    "UserCreate",
]
