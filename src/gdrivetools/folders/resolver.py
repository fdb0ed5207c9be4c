"""Resolve and create slash-delimited Drive folder paths."""

from __future__ import annotations

import logging
from typing import Any, Optional, Union
from urllib.parse import urlencode

from gdrivetools.cache import FolderCache, default_folder_cache
from gdrivetools.client import (
    FOLDER_CLAUSE,
    DriveClient,
    add_trashed_filter,
    build_files_endpoint,
    escape_query_value,
    parent_clause,
)
from gdrivetools.client.fields import CREATED_FOLDER_FIELDS, FOLDER_LOOKUP_FIELDS
from gdrivetools.errors import GDriveToolsError
from gdrivetools.models import (
    FolderIdentity,
    PathCreationFailure,
    ResolvedPath,
    SegmentResolution,
    SegmentSource,
)
from gdrivetools.util.mime import FOLDER_MIME

logger = logging.getLogger(__name__)

ROOT_ID = "root"
ROOT_ALIASES: frozenset[str] = frozenset({"root", "my drive"})


def split_path(path: Optional[str]) -> list[str]:
    """Split on '/' and drop blank components ("A//B/" -> ["A", "B"])."""
    if not path:
        return []
    return [part for part in path.split("/") if part.strip()]


def is_root_alias(segment: str) -> bool:
    return segment.strip().lower() in ROOT_ALIASES


def is_root_path(path: Optional[str]) -> bool:
    """True for empty, blank, "/" and paths made only of root aliases."""
    return all(is_root_alias(part) for part in split_path(path))


class PathResolver:
    """
    Walk a folder path one segment at a time from the Drive root.

    Each segment is looked up by exact name under the current folder, never
    fuzzily, so similarly named siblings cannot be confused. Lookups consult
    the FolderCache before the remote API.

    Notes:
        - Two callers creating the same missing path at once may both create
          the folder; there is no cross-call locking.
    """

    def __init__(self, client: DriveClient, cache: Optional[FolderCache] = None) -> None:
        self._client = client
        self._cache = cache if cache is not None else default_folder_cache()

    @property
    def cache(self) -> FolderCache:
        return self._cache

    # ----------------------------
    # Public API
    # ----------------------------
    def resolve_folder_path(
        self,
        token: str,
        path: Optional[str],
        *,
        include_trashed: bool = False,
    ) -> Optional[ResolvedPath]:
        """
        Resolve `path` to its terminal folder without creating anything.

        Returns:
            ResolvedPath, or None when a segment does not exist or a remote
            call fails (the failure is logged).
        """
        segments = split_path(path)
        current_id = ROOT_ID
        resolutions: list[SegmentResolution] = []

        for index, name in enumerate(segments):
            if is_root_alias(name):
                current_id = ROOT_ID
                continue

            prefix = "/".join(segments[: index + 1])
            try:
                found = self._lookup(token, name, current_id, prefix, include_trashed)
            except (GDriveToolsError, ValueError):
                logger.warning(
                    "[resolve_folder_path] lookup failed; segment:%s;parent_id:%s",
                    name,
                    current_id,
                    exc_info=True,
                )
                return None

            if found is None:
                logger.info("[resolve_folder_path] segment not found; path:%s", prefix)
                return None

            identity, source, link = found
            resolutions.append(SegmentResolution(name, identity.id, source, prefix, link))
            current_id = identity.id

        return ResolvedPath(segments=segments, folder_id=current_id, resolutions=resolutions)

    def create_folder_path(
        self,
        token: str,
        path: Optional[str],
        *,
        description: Optional[str] = None,
    ) -> Union[ResolvedPath, PathCreationFailure]:
        """
        Resolve `path`, creating every missing segment.

        The description, if any, is applied only to the last segment.

        Returns:
            ResolvedPath listing which segments pre-existed and which were
            created, or PathCreationFailure naming the segment that failed and
            the progress made before it.
        """
        segments = split_path(path)
        current_id = ROOT_ID
        resolutions: list[SegmentResolution] = []

        for index, name in enumerate(segments):
            if is_root_alias(name):
                current_id = ROOT_ID
                continue

            prefix = "/".join(segments[: index + 1])
            is_last = index == len(segments) - 1
            try:
                found = self._lookup(token, name, current_id, prefix, include_trashed=False)
                if found is None:
                    created = self.create_folder(
                        token,
                        name,
                        current_id,
                        description=description if is_last else None,
                        path=prefix,
                    )
                    found = (created[0], "created", created[1])
            except (GDriveToolsError, ValueError) as exc:
                logger.warning(
                    "[create_folder_path] failed; segment:%s;path:%s",
                    name,
                    prefix,
                    exc_info=True,
                )
                return self._failure(name, prefix, resolutions, exc)

            identity, source, link = found
            resolutions.append(SegmentResolution(name, identity.id, source, prefix, link))
            current_id = identity.id

        resolved = ResolvedPath(segments=segments, folder_id=current_id, resolutions=resolutions)
        logger.info(
            "[create_folder_path] done; path:%s;created:%d;existing:%d",
            "/".join(segments),
            len(resolved.created),
            len(resolved.existing),
        )
        return resolved

    def find_child_folder(
        self,
        token: str,
        name: str,
        parent_id: str,
        *,
        include_trashed: bool = False,
    ) -> Optional[dict[str, Any]]:
        """Return the first folder named exactly `name` directly under `parent_id`."""
        q = f"{FOLDER_CLAUSE} and name = '{escape_query_value(name)}' and {parent_clause(parent_id)}"
        q = add_trashed_filter(q, include_trashed)
        endpoint = build_files_endpoint(q, page_size=1, fields=FOLDER_LOOKUP_FIELDS)
        data = self._client.request_json(token, endpoint)
        files = data.get("files") or []
        return files[0] if files else None

    def create_folder(
        self,
        token: str,
        name: str,
        parent_id: str,
        *,
        description: Optional[str] = None,
        path: Optional[str] = None,
    ) -> tuple[FolderIdentity, Optional[str]]:
        """
        Create a folder under `parent_id` and cache it.

        Returns:
            (identity, webViewLink)

        Raises:
            GDriveToolsError: if the remote call fails or returns no id.
        """
        body: dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME, "parents": [parent_id]}
        if description:
            body["description"] = description

        endpoint = f"files?{urlencode({'fields': CREATED_FOLDER_FIELDS})}"
        data = self._client.request_json(token, endpoint, method="POST", body=body)
        if not data.get("id"):
            raise GDriveToolsError(
                "Folder creation returned no id",
                details={"name": name, "parent_id": parent_id},
            )

        identity = FolderIdentity.from_drive_file(data, path=path or name, parent_id=parent_id)
        self._cache.set(token, identity.id, identity)
        logger.info("[create_folder] created; name:%s;parent_id:%s", name, parent_id)
        return identity, data.get("webViewLink")

    # ----------------------------
    # Internals
    # ----------------------------
    def _lookup(
        self,
        token: str,
        name: str,
        parent_id: str,
        path: str,
        include_trashed: bool,
    ) -> Optional[tuple[FolderIdentity, SegmentSource, Optional[str]]]:
        cached = self._cache.find_child(token, parent_id, name)
        if cached is not None:
            return cached, "cache", None

        match = self.find_child_folder(token, name, parent_id, include_trashed=include_trashed)
        if match is None or not match.get("id"):
            return None

        identity = FolderIdentity.from_drive_file(match, path=path, parent_id=parent_id)
        # The cache holds only folders known to be outside the trash.
        if not include_trashed:
            self._cache.set(token, identity.id, identity)
        return identity, "search", match.get("webViewLink")

    @staticmethod
    def _failure(
        name: str,
        path: str,
        resolutions: list[SegmentResolution],
        exc: Exception,
    ) -> PathCreationFailure:
        return PathCreationFailure(
            failed_at=name,
            path=path,
            created=[r for r in resolutions if r.source == "created"],
            existing=[r for r in resolutions if r.source != "created"],
            error=str(exc),
            error_type=type(exc).__name__,
        )
