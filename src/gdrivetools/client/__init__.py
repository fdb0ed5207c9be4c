"""Drive REST client exports for gdrivetools."""

from __future__ import annotations

from .drive_client import DRIVE_BASE_URL, DRIVE_UPLOAD_URL, DriveClient, build_multipart_body
from .query import (
    FOLDER_CLAUSE,
    NOT_FOLDER_CLAUSE,
    add_trashed_filter,
    build_files_endpoint,
    build_get_endpoint,
    escape_query_value,
    parent_clause,
)

__all__ = [
    "DriveClient",
    "DRIVE_BASE_URL",
    "DRIVE_UPLOAD_URL",
    "build_multipart_body",
    "FOLDER_CLAUSE",
    "NOT_FOLDER_CLAUSE",
    "escape_query_value",
    "parent_clause",
    "add_trashed_filter",
    "build_files_endpoint",
    "build_get_endpoint",
]
