from __future__ import annotations

import re

_INVALID_CHARS = re.compile(r'[\x00-\x1f\x7f/\\?<>:*|"]')
_RESERVED_NAMES = {".", ".."}
_MAX_LENGTH = 255


def sanitize_filename(name: str, fallback: str = "file") -> str:
    """Strip path separators and control characters from a file name."""
    cleaned = _INVALID_CHARS.sub("", name or "").strip().rstrip(". ")
    if not cleaned or cleaned in _RESERVED_NAMES:
        return fallback
    return cleaned[:_MAX_LENGTH]


def split_extension(name: str) -> tuple[str, str]:
    dot = name.rfind(".")
    if dot > 0:
        return name[:dot], name[dot:]
    return name, ""


def ensure_unique_file_name(name: str, used: set[str]) -> str:
    """
    Return a sanitized name not present in `used`.

    Collisions get a numeric suffix before the extension: a.png, a_1.png, a_2.png.
    """
    candidate = sanitize_filename(name)
    if candidate not in used:
        return candidate

    base, ext = split_extension(candidate)
    i = 1
    while f"{base}_{i}{ext}" in used:
        i += 1
    return f"{base}_{i}{ext}"
