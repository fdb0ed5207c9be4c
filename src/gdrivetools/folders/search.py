"""Folder and file search with an exact -> contains -> full-text fallback ladder."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from gdrivetools.cache import FolderCache, default_folder_cache
from gdrivetools.client import (
    FOLDER_CLAUSE,
    NOT_FOLDER_CLAUSE,
    DriveClient,
    add_trashed_filter,
    build_files_endpoint,
    build_get_endpoint,
    escape_query_value,
    parent_clause,
)
from gdrivetools.client.fields import (
    FILE_FIELDS,
    FILE_LIST_FIELDS,
    FOLDER_SEARCH_FIELDS,
    FOLDER_TREE_FIELDS,
)
from gdrivetools.errors import RemoteApiError
from gdrivetools.models import FolderIdentity, SearchStrategy, SearchStrategyResult

logger = logging.getLogger(__name__)

DEFAULT_ROOT_NAME = "My Drive"


class FolderSearch:
    """Locate folders and files by human-entered names."""

    def __init__(self, client: DriveClient, cache: Optional[FolderCache] = None) -> None:
        self._client = client
        self._cache = cache if cache is not None else default_folder_cache()

    @property
    def cache(self) -> FolderCache:
        return self._cache

    def search_folders(
        self,
        token: str,
        name: str,
        *,
        exact_match: bool = False,
        parent_id: Optional[str] = None,
        include_trashed: bool = False,
        use_fulltext: bool = True,
        max_results: int = 10,
    ) -> SearchStrategyResult:
        """
        Search folders by name.

        The primary search uses `name = '...'` (exact) or `name contains '...'`.
        When a non-exact primary search finds nothing and `use_fulltext` is set,
        exactly one `fullText contains '...'` search follows with the same
        parent/trashed constraints. Results keep the remote API order.

        Returns:
            SearchStrategyResult tagged with the strategy that produced the
            matches, or with the last strategy tried when nothing matched.
        """
        escaped = escape_query_value(name)
        if exact_match:
            strategy: SearchStrategy = "exact_match"
            name_clause = f"name = '{escaped}'"
        else:
            strategy = "contains_match"
            name_clause = f"name contains '{escaped}'"

        matches = self._search(token, name_clause, parent_id, include_trashed, max_results)
        if not matches and not exact_match and use_fulltext:
            logger.info("[search_folders] no primary match, trying full-text; name:%s", name)
            strategy = "fulltext_fuzzy"
            matches = self._search(
                token,
                f"fullText contains '{escaped}'",
                parent_id,
                include_trashed,
                max_results,
            )

        for match in matches:
            if match.get("id") and not include_trashed:
                self._cache.set(token, match["id"], FolderIdentity.from_drive_file(match))

        logger.info(
            "[search_folders] done; name:%s;strategy:%s;count:%d",
            name,
            strategy,
            len(matches),
        )
        return SearchStrategyResult(matches=matches, strategy_used=strategy)

    def find_files(
        self,
        token: str,
        name: str,
        *,
        exact_match: bool = False,
        folder_id: Optional[str] = None,
        max_results: int = 10,
        include_trashed: bool = False,
    ) -> list[dict[str, Any]]:
        """Search non-folder files by name, newest first."""
        escaped = escape_query_value(name)
        q = f"name = '{escaped}'" if exact_match else f"name contains '{escaped}'"
        if folder_id:
            q = f"{q} and {parent_clause(folder_id)}"
        q = add_trashed_filter(f"{q} and {NOT_FOLDER_CLAUSE}", include_trashed)

        endpoint = build_files_endpoint(
            q,
            page_size=max_results,
            fields=FILE_LIST_FIELDS,
            order_by="modifiedTime desc",
        )
        data = self._client.request_json(token, endpoint)
        return list(data.get("files") or [])

    def get_file(self, token: str, file_id: str) -> Optional[dict[str, Any]]:
        """Return a file/folder by id, or None when Drive answers 404."""
        try:
            return self._client.request_json(token, build_get_endpoint(file_id, fields=FILE_FIELDS))
        except RemoteApiError as exc:
            if exc.status_code == 404:
                return None
            raise

    def list_all_folders(self, token: str, *, page_size: int = 1000) -> list[dict[str, Any]]:
        """Return every folder visible to the caller as (id, name, parents) dicts."""
        folders: list[dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            endpoint = build_files_endpoint(
                add_trashed_filter(FOLDER_CLAUSE),
                page_size=page_size,
                fields=FOLDER_TREE_FIELDS,
                page_token=page_token,
            )
            data = self._client.request_json(token, endpoint)
            folders.extend(data.get("files") or [])
            page_token = data.get("nextPageToken")
            if not page_token:
                break
        return folders

    def _search(
        self,
        token: str,
        name_clause: str,
        parent_id: Optional[str],
        include_trashed: bool,
        max_results: int,
    ) -> list[dict[str, Any]]:
        q = f"{FOLDER_CLAUSE} and {name_clause}"
        if parent_id:
            q = f"{q} and {parent_clause(parent_id)}"
        q = add_trashed_filter(q, include_trashed)

        endpoint = build_files_endpoint(q, page_size=max_results, fields=FOLDER_SEARCH_FIELDS)
        text = self._client.request(token, endpoint)
        data = json.loads(text) if text.strip() else {}
        return list(data.get("files") or [])


def build_folder_path(
    folder_id: str,
    folders: list[dict[str, Any]],
    *,
    root_name: str = DEFAULT_ROOT_NAME,
) -> str:
    """
    Build the slash-joined path of `folder_id` from the top-level folder down,
    the folder's own name included.

    Walks `parents[0]` upward, prepending each visited folder's name. Stops when
    a folder has no parent, is named `root_name`, or is missing from `folders`.
    At most `len(folders)` steps are taken, so cyclic parent links terminate.
    """
    folder_map = {f.get("id"): f for f in folders if f.get("id")}
    path: list[str] = []
    current_id: Optional[str] = folder_id

    for _ in range(len(folder_map)):
        if not current_id or current_id not in folder_map:
            break
        folder = folder_map[current_id]
        parents = folder.get("parents") or []
        if folder.get("name") == root_name or not parents:
            break
        path.insert(0, folder.get("name", ""))
        current_id = parents[0]

    return "/".join(path)
