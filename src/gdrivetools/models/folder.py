"""Data models for resolved Drive folders and their cache entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from gdrivetools.util.time import now_utc, to_rfc3339


@dataclass(slots=True, frozen=True)
class FolderIdentity:
    """
    A single remote folder as last seen by a search or create call.

    Notes:
        - `path` is a materialized convenience value valid as of `last_updated`.
          The remote tree can change out-of-band, so treat it as advisory.
        - Instances are never mutated; a refresh replaces the whole record.
    """

    id: str
    name: str
    parent_id: Optional[str]
    path: str
    last_updated: datetime

    @classmethod
    def from_drive_file(
        cls,
        data: dict[str, Any],
        *,
        path: Optional[str] = None,
        parent_id: Optional[str] = None,
        last_updated: Optional[datetime] = None,
    ) -> "FolderIdentity":
        """Build an identity from a Drive `files` entry (id, name, parents)."""
        parents = data.get("parents") or []
        if parent_id is None and isinstance(parents, list) and parents:
            parent_id = parents[0]
        name = data.get("name", "")
        return cls(
            id=str(data["id"]),
            name=name if isinstance(name, str) else "",
            parent_id=parent_id,
            path=path if path is not None else (name if isinstance(name, str) else ""),
            last_updated=last_updated or now_utc(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parentId": self.parent_id,
            "path": self.path,
            "lastUpdated": to_rfc3339(self.last_updated),
        }


@dataclass(slots=True, frozen=True)
class CacheEntry:
    """A FolderIdentity plus the ownership and expiry data used by FolderCache."""

    data: FolderIdentity
    owner_fingerprint: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at
