"""Field selections for Google Drive API requests."""

from __future__ import annotations

FOLDER_LOOKUP_FIELDS: str = "files(id,name,parents,webViewLink)"

FOLDER_SEARCH_FIELDS: str = "files(id,name,parents,createdTime,modifiedTime,webViewLink)"

FOLDER_TREE_FIELDS: str = "nextPageToken,files(id,name,parents)"

FILE_FIELDS: str = (
    "id,"
    "name,"
    "mimeType,"
    "size,"
    "createdTime,"
    "modifiedTime,"
    "webViewLink,"
    "webContentLink,"
    "parents"
)

FILE_LIST_FIELDS: str = f"nextPageToken,files({FILE_FIELDS})"

CREATED_FOLDER_FIELDS: str = "id,name,parents,webViewLink"

PERMISSION_FIELDS: str = "permissions(id,type,role,emailAddress,domain)"
