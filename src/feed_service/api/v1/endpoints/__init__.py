"""API endpoint modules for version 1."""

from .likes import router as likes_router
from .posts import router as posts_router
from .users import router as users_router

__all__ = [
    "likes_router",
    "posts_router",
    "users_router",
]
