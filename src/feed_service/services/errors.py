"""Error taxonomy shared by the feed services.

Every error carries the HTTP status it is reported with, so the API layer
can translate any of them with a single exception handler.
"""

from __future__ import annotations

from fastapi import status


class FeedError(RuntimeError):
    """Base exception for all feed service failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(FeedError):
    """Raised when a request body lacks a required field.

    No write is performed when this is raised.
    """

    status_code = status.HTTP_400_BAD_REQUEST


class AuthRejected(FeedError):
    """Raised when the authentication service vouches for a different user."""

    status_code = status.HTTP_401_UNAUTHORIZED


class AuthServiceUnavailable(FeedError):
    """Raised when the authentication service cannot be reached or misbehaves.

    Any failure of the verification call is reported as 401, which is what
    clients already expect; a failed registration is reported as 502.
    """

    status_code = status.HTTP_502_BAD_GATEWAY


class StoreUnavailable(FeedError):
    """Raised when any key-value operation fails or times out."""

    status_code = status.HTTP_502_BAD_GATEWAY


class LikeConflict(FeedError):
    """Raised when a like update keeps losing compare-and-set races."""

    status_code = status.HTTP_409_CONFLICT
