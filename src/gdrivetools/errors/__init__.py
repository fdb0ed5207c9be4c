"""Public error exports for gdrivetools."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    ConflictError,
    GDriveToolsError,
    HttpErrorInfo,
    InvalidArgumentError,
    NetworkError,
    NotFoundError,
    PermissionError,
    QuotaExceededError,
    RateLimitError,
    RemoteApiError,
    classify_remote_error,
    map_http_error,
)

__all__ = [
    "GDriveToolsError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "QuotaExceededError",
    "NetworkError",
    "ApiError",
    "RemoteApiError",
    "HttpErrorInfo",
    "map_http_error",
    "classify_remote_error",
]
