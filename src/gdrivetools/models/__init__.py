"""Public model exports for gdrivetools."""

from __future__ import annotations

from .folder import CacheEntry, FolderIdentity
from .results import (
    TOOL_ARGS_SEPARATOR,
    PathCreationFailure,
    ResolvedPath,
    SearchStrategy,
    SearchStrategyResult,
    SegmentResolution,
    SegmentSource,
    ToolResult,
)

__all__ = [
    "FolderIdentity",
    "CacheEntry",
    "SegmentSource",
    "SegmentResolution",
    "ResolvedPath",
    "PathCreationFailure",
    "SearchStrategy",
    "SearchStrategyResult",
    "ToolResult",
    "TOOL_ARGS_SEPARATOR",
]
