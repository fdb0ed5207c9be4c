from __future__ import annotations

import mimetypes
from typing import Optional

FOLDER_MIME: str = "application/vnd.google-apps.folder"
DEFAULT_MIME: str = "application/octet-stream"

# Extensions appended to downloaded media that arrive without one.
_EXTENSION_BY_MIME: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/svg+xml": "svg",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
    "video/mp4": "mp4",
    "application/pdf": "pdf",
    "text/plain": "txt",
    "application/json": "json",
}


def is_folder(mime_type: Optional[str]) -> bool:
    return mime_type == FOLDER_MIME


def detect_mime_type(file_name: str, content_type: Optional[str] = None) -> str:
    """
    Return the MIME type for a file.

    A Content-Type header wins (parameters such as charset are dropped);
    otherwise the type is guessed from the file name.
    """
    if content_type:
        return content_type.split(";", 1)[0].strip() or DEFAULT_MIME
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or DEFAULT_MIME


def mime_to_extension(mime_type: str) -> Optional[str]:
    return _EXTENSION_BY_MIME.get(mime_type.split(";", 1)[0].strip().lower())
