"""Shared state and helpers for tool action handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from gdrivetools.cache import FolderCache
from gdrivetools.client import DriveClient
from gdrivetools.config import ToolsConfig
from gdrivetools.folders import FolderSearch, PathResolver
from gdrivetools.twilio import TwilioMediaClient

# Stable error codes reported in failed tool results.
MISSING_REQUIRED_PARAMS = "MISSING_REQUIRED_PARAMS"
FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
FILE_NOT_FOUND = "FILE_NOT_FOUND"
PATH_NOT_FOUND = "PATH_NOT_FOUND"
PARENT_FOLDER_NOT_FOUND = "PARENT_FOLDER_NOT_FOUND"
FOLDER_CREATION_FAILED = "FOLDER_CREATION_FAILED"
INVALID_PATH = "INVALID_PATH"
UNSUPPORTED_ACTION = "UNSUPPORTED_ACTION"
ALL_URLS_INVALID = "ALL_URLS_INVALID"
TWILIO_CREDENTIALS_MISSING = "TWILIO_CREDENTIALS_MISSING"
NO_URLS = "NO_URLS"
UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"


@dataclass(frozen=True)
class ToolContext:
    """Collaborators handed to every action handler."""

    client: DriveClient
    cache: FolderCache
    search: FolderSearch
    resolver: PathResolver
    media: TwilioMediaClient
    config: ToolsConfig


ActionHandler = Callable[[ToolContext, dict[str, Any], str], dict[str, Any]]


def failure(error: str, message: Optional[str] = None, **extra: Any) -> dict[str, Any]:
    """Build a failed result payload with a stable error code."""
    payload: dict[str, Any] = {"success": False, "error": error}
    if message:
        payload["message"] = message
    payload.update({k: v for k, v in extra.items() if v is not None})
    return payload


def as_bool(value: Any, default: bool = False) -> bool:
    """Coerce agent-supplied flags ("true", 1, None, ...) to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y", "on")
    return bool(value)


def as_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def as_list(value: Any) -> list[Any]:
    """Accept a single value, a list, or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str) and "," in value:
        return [part.strip() for part in value.split(",")]
    return [value]


def first_parent(value: Any) -> Optional[str]:
    """Return a single parent id from a `parents` param (str, list or None)."""
    items = [v for v in as_list(value) if isinstance(v, str) and v.strip()]
    return items[0].strip() if items else None
