"""Result models for folder resolution, searches and tool calls."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

SegmentSource = Literal["cache", "search", "created"]
SearchStrategy = Literal["exact_match", "contains_match", "fulltext_fuzzy"]

# Separator between the JSON result and the JSON echo of the call parameters.
# Imposed by the host agent framework; must stay byte-for-byte identical.
TOOL_ARGS_SEPARATOR = "\n\n----FLOWISE_TOOL_ARGS----\n\n"


@dataclass(slots=True, frozen=True)
class SegmentResolution:
    """How one path segment was resolved."""

    name: str
    folder_id: str
    source: SegmentSource
    path: str
    web_view_link: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "id": self.folder_id, "path": self.path}
        if self.web_view_link:
            out["webViewLink"] = self.web_view_link
        return out


@dataclass(slots=True)
class ResolvedPath:
    """Outcome of walking a slash-delimited folder path."""

    segments: list[str]
    folder_id: str
    resolutions: list[SegmentResolution] = field(default_factory=list)

    @property
    def created(self) -> list[SegmentResolution]:
        return [r for r in self.resolutions if r.source == "created"]

    @property
    def existing(self) -> list[SegmentResolution]:
        return [r for r in self.resolutions if r.source != "created"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "finalFolderId": self.folder_id,
            "segments": list(self.segments),
            "createdFolders": [r.to_dict() for r in self.created],
            "existingFolders": [r.to_dict() for r in self.existing],
            "totalCreated": len(self.created),
            "totalExisting": len(self.existing),
        }


@dataclass(slots=True)
class PathCreationFailure:
    """
    Create-mode failure: which segment failed and what was done before it.

    Lets a caller tell "failed at segment N after creating K folders" apart
    from "the path never existed".
    """

    failed_at: str
    path: str
    created: list[SegmentResolution] = field(default_factory=list)
    existing: list[SegmentResolution] = field(default_factory=list)
    error: Optional[str] = None
    error_type: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": False,
            "error": "FOLDER_CREATION_FAILED",
            "failedAt": self.failed_at,
            "path": self.path,
            "createdFolders": [r.to_dict() for r in self.created],
            "existingFolders": [r.to_dict() for r in self.existing],
        }
        if self.error:
            out["message"] = self.error
        if self.error_type:
            out["errorType"] = self.error_type
        return out


@dataclass(slots=True)
class SearchStrategyResult:
    """Matches from one folder search, in the order the remote API returned them."""

    matches: list[dict[str, Any]]
    strategy_used: SearchStrategy

    @property
    def found(self) -> bool:
        return bool(self.matches)


@dataclass(slots=True)
class ToolResult:
    """A tool call result plus the echo of its input parameters."""

    payload: dict[str, Any]
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.payload.get("success"))

    def encode(self) -> str:
        return (
            json.dumps(self.payload, ensure_ascii=False, default=str)
            + TOOL_ARGS_SEPARATOR
            + json.dumps(self.params, ensure_ascii=False, default=str)
        )

    @classmethod
    def decode(cls, text: str) -> "ToolResult":
        head, sep, tail = text.partition(TOOL_ARGS_SEPARATOR)
        payload = json.loads(head)
        params = json.loads(tail) if sep and tail else {}
        return cls(payload=payload, params=params)
