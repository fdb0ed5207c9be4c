"""gdrivetools public API."""

from __future__ import annotations

from gdrivetools.errors import (
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
from gdrivetools.models import (
    FolderIdentity,
    PathCreationFailure,
    ResolvedPath,
    SearchStrategyResult,
    SegmentResolution,
    ToolResult,
)
from gdrivetools.cache import FolderCache
from gdrivetools.client import DriveClient
from gdrivetools.twilio import TwilioCredentials, TwilioMediaClient
from gdrivetools.config import ToolsConfig, load_config
from gdrivetools.folders import FolderSearch, PathResolver
from gdrivetools.tools import ToolDispatcher

__version__ = "0.1.0"

__all__ = [
    # High-level
    "ToolDispatcher",
    "PathResolver",
    "FolderSearch",
    "FolderCache",
    "DriveClient",
    "TwilioMediaClient",
    # Config
    "ToolsConfig",
    "load_config",
    "TwilioCredentials",
    # Models
    "FolderIdentity",
    "SegmentResolution",
    "ResolvedPath",
    "PathCreationFailure",
    "SearchStrategyResult",
    "ToolResult",
    # Errors
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
