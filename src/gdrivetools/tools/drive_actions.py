"""Plain file, folder, search and sharing actions."""

from __future__ import annotations

import base64
import logging
from typing import Any
from urllib.parse import quote, urlencode

from gdrivetools.client import add_trashed_filter, parent_clause
from gdrivetools.client.fields import FILE_FIELDS, FILE_LIST_FIELDS, PERMISSION_FIELDS
from gdrivetools.folders import ROOT_ID
from gdrivetools.util.mime import is_folder

from .context import (
    FILE_NOT_FOUND,
    MISSING_REQUIRED_PARAMS,
    UNSUPPORTED_FILE_TYPE,
    ToolContext,
    as_bool,
    as_int,
    as_list,
    failure,
    first_parent,
)

logger = logging.getLogger(__name__)

GOOGLE_APPS_PREFIX = "application/vnd.google-apps."

# Google editor formats have no binary content; they are exported instead.
EXPORT_MIME_TYPES: dict[str, str] = {
    "application/vnd.google-apps.document": "text/plain",
    "application/vnd.google-apps.spreadsheet": "text/csv",
    "application/vnd.google-apps.presentation": "text/plain",
    "application/vnd.google-apps.drawing": "image/png",
    "application/vnd.google-apps.script": "application/vnd.google-apps.script+json",
}

TEXT_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/json",
        "application/xml",
        "application/javascript",
        "application/x-yaml",
        "application/vnd.google-apps.script+json",
    }
)


def _file_path(file_id: str, suffix: str = "") -> str:
    return f"files/{quote(file_id, safe='')}{suffix}"


def _with_query(endpoint: str, params: dict[str, Any]) -> str:
    clean = {k: v for k, v in params.items() if v is not None}
    return f"{endpoint}?{urlencode(clean)}" if clean else endpoint


def _drive_flags(params: dict[str, Any]) -> dict[str, Any]:
    flags: dict[str, Any] = {}
    if params.get("supportsAllDrives") is not None:
        flags["supportsAllDrives"] = str(as_bool(params["supportsAllDrives"])).lower()
    return flags


def _list(
    ctx: ToolContext,
    params: dict[str, Any],
    token: str,
    q: str,
) -> dict[str, Any]:
    query: dict[str, Any] = {
        "q": add_trashed_filter(q, as_bool(params.get("includeTrashed"))),
        "pageSize": as_int(params.get("pageSize") or params.get("maxResults"), ctx.config.default_page_size),
        "fields": params.get("fields") or FILE_LIST_FIELDS,
        "orderBy": params.get("orderBy") or None,
        "pageToken": params.get("pageToken") or None,
        **_drive_flags(params),
    }
    if params.get("includeItemsFromAllDrives") is not None:
        query["includeItemsFromAllDrives"] = str(as_bool(params["includeItemsFromAllDrives"])).lower()
    return ctx.client.request_json(token, _with_query("files", query))


# ----------------------------
# file
# ----------------------------
def list_files(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    q = params.get("query") or ""
    folder_id = params.get("folderId") or first_parent(params.get("parents"))
    if folder_id:
        q = f"{q} and {parent_clause(folder_id)}" if q else parent_clause(folder_id)
    data = _list(ctx, params, token, q)
    files = data.get("files") or []
    return {
        "success": True,
        "files": files,
        "count": len(files),
        "nextPageToken": data.get("nextPageToken"),
    }


def get_file(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    if not file_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId is required")
    data = ctx.search.get_file(token, file_id)
    if data is None:
        return failure(FILE_NOT_FOUND, f'File with ID "{file_id}" not found', fileId=file_id)
    return {"success": True, "file": data}


def create_file(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    name = params.get("name") or params.get("fileName")
    if not name:
        return failure(MISSING_REQUIRED_PARAMS, "name is required")

    metadata: dict[str, Any] = {"name": name}
    parent = first_parent(params.get("parents")) or params.get("parentFolderId")
    if parent:
        metadata["parents"] = [parent]
    if params.get("description"):
        metadata["description"] = params["description"]
    mime_type = params.get("mimeType") or "text/plain"

    content = params.get("content")
    if content is None:
        metadata["mimeType"] = mime_type
        endpoint = _with_query("files", {"fields": FILE_FIELDS, **_drive_flags(params)})
        data = ctx.client.request_json(token, endpoint, method="POST", body=metadata)
    else:
        raw = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        data = ctx.client.upload(token, metadata, raw, mime_type, fields=FILE_FIELDS)

    return {"success": True, "file": data, "message": f'File "{name}" created'}


def delete_file(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    if not file_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId is required")
    ctx.client.request(token, _with_query(_file_path(file_id), _drive_flags(params)), method="DELETE")
    logger.info("[delete_file] deleted; file_id:%s", file_id)
    return {"success": True, "fileId": file_id, "message": "File deleted"}


def copy_file(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    if not file_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId is required")
    body: dict[str, Any] = {}
    if params.get("name"):
        body["name"] = params["name"]
    parent = first_parent(params.get("parents"))
    if parent:
        body["parents"] = [parent]
    endpoint = _with_query(_file_path(file_id, "/copy"), {"fields": FILE_FIELDS, **_drive_flags(params)})
    data = ctx.client.request_json(token, endpoint, method="POST", body=body)
    return {"success": True, "file": data, "sourceFileId": file_id}


def update_file(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    if not file_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId is required")

    metadata: dict[str, Any] = {}
    for key in ("name", "description", "mimeType"):
        if params.get(key):
            metadata[key] = params[key]

    content = params.get("content")
    if content is not None:
        raw = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        mime_type = params.get("mimeType") or "text/plain"
        data = ctx.client.upload(token, metadata, raw, mime_type, fields=FILE_FIELDS, file_id=file_id)
    else:
        moves: dict[str, Any] = {}
        add_parent = first_parent(params.get("parents"))
        if add_parent:
            moves["addParents"] = add_parent
        if params.get("removeParents"):
            moves["removeParents"] = ",".join(str(p) for p in as_list(params["removeParents"]))
        if not metadata and not moves:
            return failure(MISSING_REQUIRED_PARAMS, "Nothing to update for file", fileId=file_id)
        endpoint = _with_query(
            _file_path(file_id),
            {"fields": FILE_FIELDS, **moves, **_drive_flags(params)},
        )
        data = ctx.client.request_json(token, endpoint, method="PATCH", body=metadata)

    logger.info("[update_file] updated; file_id:%s;content:%s", file_id, content is not None)
    return {"success": True, "file": data, "message": "File updated"}


def download_file(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    if not file_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId is required")
    meta = ctx.search.get_file(token, file_id)
    if meta is None:
        return failure(FILE_NOT_FOUND, f'File with ID "{file_id}" not found', fileId=file_id)
    mime_type = meta.get("mimeType") or "application/octet-stream"
    if is_folder(mime_type):
        return failure(UNSUPPORTED_FILE_TYPE, "Folders cannot be downloaded", fileId=file_id)

    if mime_type.startswith(GOOGLE_APPS_PREFIX):
        export_type = params.get("exportMimeType") or EXPORT_MIME_TYPES.get(mime_type)
        if not export_type:
            return failure(
                UNSUPPORTED_FILE_TYPE,
                f"No export format for {mime_type}",
                fileId=file_id,
                mimeType=mime_type,
            )
        endpoint = _with_query(_file_path(file_id, "/export"), {"mimeType": export_type})
    else:
        query: dict[str, Any] = {"alt": "media", **_drive_flags(params)}
        if params.get("acknowledgeAbuse") is not None:
            query["acknowledgeAbuse"] = str(as_bool(params["acknowledgeAbuse"])).lower()
        endpoint = _with_query(_file_path(file_id), query)
        export_type = None

    content, header_type = ctx.client.download(token, endpoint)
    content_type = (export_type or header_type or mime_type).split(";")[0].strip()
    result: dict[str, Any] = {
        "success": True,
        "fileId": file_id,
        "name": meta.get("name"),
        "mimeType": content_type,
        "size": len(content),
    }
    if _is_text(content_type):
        result["content"] = content.decode("utf-8", errors="replace")
    else:
        encoded = base64.b64encode(content).decode("ascii")
        result["dataUrl"] = f"data:{content_type};base64,{encoded}"
    return result


def _is_text(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES


# ----------------------------
# folder
# ----------------------------
def create_folder(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    name = params.get("name") or params.get("folderName")
    if not name:
        return failure(MISSING_REQUIRED_PARAMS, "name is required")
    parent_id = first_parent(params.get("parents")) or params.get("parentFolderId") or ROOT_ID
    identity, link = ctx.resolver.create_folder(
        token,
        name,
        parent_id,
        description=params.get("description"),
    )
    return {
        "success": True,
        "folderId": identity.id,
        "folderName": identity.name,
        "parentId": parent_id,
        "webViewLink": link,
    }


def list_folder_contents(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    folder_id = params.get("folderId")
    if not folder_id:
        return failure(MISSING_REQUIRED_PARAMS, "folderId is required")
    data = _list(ctx, params, token, parent_clause(folder_id))
    contents = data.get("files") or []
    folders = [f for f in contents if is_folder(f.get("mimeType"))]
    return {
        "success": True,
        "folderId": folder_id,
        "contents": contents,
        "folderCount": len(folders),
        "fileCount": len(contents) - len(folders),
        "totalCount": len(contents),
    }


def delete_folder(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    folder_id = params.get("folderId")
    if not folder_id:
        return failure(MISSING_REQUIRED_PARAMS, "folderId is required")
    ctx.client.request(token, _with_query(_file_path(folder_id), _drive_flags(params)), method="DELETE")
    ctx.cache.invalidate(token, folder_id)
    logger.info("[delete_folder] deleted; folder_id:%s", folder_id)
    return {"success": True, "folderId": folder_id, "message": "Folder deleted"}


# ----------------------------
# search
# ----------------------------
def search_files(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    query = params.get("query") or params.get("searchQuery")
    if not query:
        return failure(MISSING_REQUIRED_PARAMS, "query is required")
    data = _list(ctx, params, token, query)
    files = data.get("files") or []
    return {"success": True, "query": query, "files": files, "count": len(files)}


# ----------------------------
# share
# ----------------------------
def share_file(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    if not file_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId is required")

    share_type = params.get("type") or "user"
    permission: dict[str, Any] = {"role": params.get("role") or "reader", "type": share_type}
    if share_type in ("user", "group"):
        if not params.get("emailAddress"):
            return failure(MISSING_REQUIRED_PARAMS, "emailAddress is required for user/group shares")
        permission["emailAddress"] = params["emailAddress"]
    elif share_type == "domain":
        if not params.get("domain"):
            return failure(MISSING_REQUIRED_PARAMS, "domain is required for domain shares")
        permission["domain"] = params["domain"]

    query: dict[str, Any] = {**_drive_flags(params)}
    if params.get("sendNotificationEmail") is not None:
        query["sendNotificationEmail"] = str(as_bool(params["sendNotificationEmail"])).lower()
    if params.get("emailMessage"):
        query["emailMessage"] = params["emailMessage"]
    if permission["role"] == "owner":
        query["transferOwnership"] = "true"

    endpoint = _with_query(_file_path(file_id, "/permissions"), query)
    data = ctx.client.request_json(token, endpoint, method="POST", body=permission)
    logger.info("[share_file] shared; file_id:%s;type:%s;role:%s", file_id, share_type, permission["role"])
    return {"success": True, "fileId": file_id, "permission": data}


def get_permissions(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    if not file_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId is required")
    endpoint = _with_query(
        _file_path(file_id, "/permissions"),
        {"fields": PERMISSION_FIELDS, **_drive_flags(params)},
    )
    data = ctx.client.request_json(token, endpoint)
    permissions = data.get("permissions") or []
    return {"success": True, "fileId": file_id, "permissions": permissions, "count": len(permissions)}


def remove_permission(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    permission_id = params.get("permissionId")
    if not file_id or not permission_id:
        return failure(MISSING_REQUIRED_PARAMS, "fileId and permissionId are required")
    endpoint = _with_query(
        _file_path(file_id, f"/permissions/{quote(permission_id, safe='')}"),
        _drive_flags(params),
    )
    ctx.client.request(token, endpoint, method="DELETE")
    return {"success": True, "fileId": file_id, "permissionId": permission_id}
