"""Agent tool dispatch exports for gdrivetools."""

from __future__ import annotations

from .context import (
    ALL_URLS_INVALID,
    FILE_NOT_FOUND,
    FOLDER_CREATION_FAILED,
    FOLDER_NOT_FOUND,
    INVALID_PATH,
    MISSING_REQUIRED_PARAMS,
    NO_URLS,
    PARENT_FOLDER_NOT_FOUND,
    PATH_NOT_FOUND,
    TWILIO_CREDENTIALS_MISSING,
    UNSUPPORTED_ACTION,
    UNSUPPORTED_FILE_TYPE,
    ActionHandler,
    ToolContext,
)
from .dispatcher import DEFAULT_ACTIONS, ToolDispatcher, error_payload

__all__ = [
    "ToolDispatcher",
    "ToolContext",
    "ActionHandler",
    "DEFAULT_ACTIONS",
    "error_payload",
    # Error codes
    "MISSING_REQUIRED_PARAMS",
    "FOLDER_NOT_FOUND",
    "FILE_NOT_FOUND",
    "PATH_NOT_FOUND",
    "PARENT_FOLDER_NOT_FOUND",
    "FOLDER_CREATION_FAILED",
    "INVALID_PATH",
    "UNSUPPORTED_ACTION",
    "ALL_URLS_INVALID",
    "TWILIO_CREDENTIALS_MISSING",
    "NO_URLS",
    "UNSUPPORTED_FILE_TYPE",
]
