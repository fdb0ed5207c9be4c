"""Helpers for building Drive `files.list` filter expressions and endpoints."""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote, urlencode

from gdrivetools.util.mime import FOLDER_MIME

FOLDER_CLAUSE: str = f"mimeType='{FOLDER_MIME}'"
NOT_FOLDER_CLAUSE: str = f"mimeType != '{FOLDER_MIME}'"


def escape_query_value(value: str) -> str:
    """
    Escape a literal for a single-quoted Drive query string.

    Drive string literals use backslash escaping, so backslashes are doubled
    and single quotes become \\'. Unescaped names both corrupt the query and
    let a crafted folder/file name inject extra clauses.
    """
    return value.replace("\\", "\\\\").replace("'", "\\'")


def parent_clause(parent_id: str) -> str:
    return f"'{escape_query_value(parent_id)}' in parents"


def add_trashed_filter(query: str, include_trashed: bool = False) -> str:
    """
    Append `trashed=false` unless trashed items are wanted.

    Queries that already reference `trashed` are left as-is.
    """
    if include_trashed:
        return query
    if "trashed" in query:
        return query
    connector = " and " if query.strip() else ""
    return f"{query}{connector}trashed=false"


def build_files_endpoint(
    q: str,
    *,
    page_size: int,
    fields: str,
    order_by: Optional[str] = None,
    page_token: Optional[str] = None,
) -> str:
    """Return a `files?...` endpoint with a URL-encoded query string."""
    params: list[tuple[str, str]] = [
        ("q", q),
        ("pageSize", str(page_size)),
        ("fields", fields),
    ]
    if order_by:
        params.append(("orderBy", order_by))
    if page_token:
        params.append(("pageToken", page_token))
    return f"files?{urlencode(params)}"


def build_get_endpoint(file_id: str, *, fields: str) -> str:
    return f"files/{quote(file_id, safe='')}?{urlencode({'fields': fields})}"
