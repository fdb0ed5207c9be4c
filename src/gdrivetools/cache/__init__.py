"""Folder cache exports for gdrivetools."""

from __future__ import annotations

from .folder_cache import DEFAULT_TTL_SEC, FolderCache, default_folder_cache, fingerprint

__all__ = ["FolderCache", "DEFAULT_TTL_SEC", "default_folder_cache", "fingerprint"]
