"""Folder search and path resolution exports for gdrivetools."""

from __future__ import annotations

from .resolver import ROOT_ALIASES, ROOT_ID, PathResolver, is_root_alias, is_root_path, split_path
from .search import DEFAULT_ROOT_NAME, FolderSearch, build_folder_path

__all__ = [
    "PathResolver",
    "FolderSearch",
    "build_folder_path",
    "split_path",
    "is_root_alias",
    "is_root_path",
    "ROOT_ID",
    "ROOT_ALIASES",
    "DEFAULT_ROOT_NAME",
]
