"""Version 1 API endpoints."""

from .endpoints import likes_router, posts_router, users_router

__all__ = [
    "likes_router",
    "posts_router",
    "users_router",
]
