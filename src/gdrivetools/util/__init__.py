from .filenames import ensure_unique_file_name, sanitize_filename, split_extension
from .mime import (
    DEFAULT_MIME,
    FOLDER_MIME,
    detect_mime_type,
    is_folder,
    mime_to_extension,
)
from .time import now_utc, to_rfc3339

__all__ = [
    "FOLDER_MIME",
    "DEFAULT_MIME",
    "is_folder",
    "detect_mime_type",
    "mime_to_extension",
    "sanitize_filename",
    "split_extension",
    "ensure_unique_file_name",
    "now_utc",
    "to_rfc3339",
]
