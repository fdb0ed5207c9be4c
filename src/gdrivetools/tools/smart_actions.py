"""
Name- and path-aware folder tools.

These actions accept human-entered folder names and slash-delimited paths
instead of raw Drive ids, and return enriched results an agent can act on.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

from gdrivetools.client import FOLDER_CLAUSE, add_trashed_filter, build_files_endpoint, parent_clause
from gdrivetools.errors import GDriveToolsError
from gdrivetools.folders import ROOT_ID, build_folder_path, is_root_path
from gdrivetools.models import FolderIdentity, PathCreationFailure
from gdrivetools.util.mime import is_folder

from .context import (
    FILE_NOT_FOUND,
    FOLDER_CREATION_FAILED,
    FOLDER_NOT_FOUND,
    INVALID_PATH,
    MISSING_REQUIRED_PARAMS,
    PARENT_FOLDER_NOT_FOUND,
    UNSUPPORTED_ACTION,
    ToolContext,
    as_bool,
    as_int,
    failure,
)

logger = logging.getLogger(__name__)

NAVIGATOR_PAGE_SIZE = 50
NAVIGATOR_ORDER_BY = "name"

_NAV_FOLDER_FIELDS = "files(id,name,createdTime,modifiedTime,webViewLink)"
_NAV_CONTENT_FIELDS = "files(id,name,mimeType,size,createdTime,modifiedTime,webViewLink)"


# ----------------------------
# URL builders
# ----------------------------
def folder_view_url(folder_id: str) -> str:
    return f"https://drive.google.com/drive/folders/{folder_id}"


def file_view_url(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view"


def download_url(file_id: str) -> str:
    return f"https://drive.google.com/uc?id={file_id}&export=download"


def share_url(file_id: str, *, folder: bool) -> str:
    base = folder_view_url(file_id) if folder else file_view_url(file_id)
    return f"{base}?usp=sharing"


# ----------------------------
# smartFolderFinder
# ----------------------------
def smart_folder_finder(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    folder_name = params.get("folderName")
    if not folder_name:
        return failure(MISSING_REQUIRED_PARAMS, "folderName is required")

    exact = as_bool(params.get("exactMatch"))
    include_trashed = as_bool(params.get("includeTrashed"))
    parent_id = params.get("parentFolderId") or None
    if not parent_id and params.get("parentFolderName"):
        parent_id = _find_folder_id(ctx, token, params["parentFolderName"])

    outcome = ctx.search.search_folders(
        token,
        folder_name,
        exact_match=exact,
        parent_id=parent_id,
        include_trashed=include_trashed,
        use_fulltext=as_bool(params.get("useFullTextSearch"), default=True),
        max_results=as_int(params.get("maxResults"), ctx.config.default_page_size),
    )

    result: dict[str, Any] = {
        "success": outcome.found,
        "folders": [],
        "count": 0,
        "searchQuery": folder_name,
        "searchMethod": outcome.strategy_used,
        "exactMatch": exact,
    }
    if not outcome.found:
        return result

    tree = ctx.search.list_all_folders(token)
    root_name = ctx.config.root_name
    enhanced: list[dict[str, Any]] = []
    for folder in outcome.matches:
        path = build_folder_path(folder["id"], tree, root_name=root_name) or folder.get("name", "")
        enriched = {
            **folder,
            "path": path,
            "fullPath": f"{root_name}/{path}" if path else root_name,
            "searchMethod": outcome.strategy_used,
        }
        if not include_trashed:
            ctx.cache.set(token, folder["id"], FolderIdentity.from_drive_file(folder, path=path))
        enhanced.append(enriched)

    result["folders"] = enhanced
    result["count"] = len(enhanced)
    return result


# ----------------------------
# hierarchicalFolderNavigator
# ----------------------------
def hierarchical_folder_navigator(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    operation = params.get("operation")
    handler = _NAVIGATOR_OPERATIONS.get(operation or "")
    if handler is None:
        return failure(
            UNSUPPORTED_ACTION,
            f"Unsupported operation: {operation}",
            supportedOperations=sorted(_NAVIGATOR_OPERATIONS),
        )
    return handler(ctx, params, token)


def _list_children(
    ctx: ToolContext,
    params: dict[str, Any],
    token: str,
    q: str,
    fields: str,
) -> list[dict[str, Any]]:
    endpoint = build_files_endpoint(
        add_trashed_filter(q, as_bool(params.get("includeTrashed"))),
        page_size=as_int(params.get("maxResults"), NAVIGATOR_PAGE_SIZE),
        fields=fields,
        order_by=params.get("sortBy") or NAVIGATOR_ORDER_BY,
    )
    return list(ctx.client.request_json(token, endpoint).get("files") or [])


def _list_root(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    folders = _list_children(
        ctx,
        params,
        token,
        f"{FOLDER_CLAUSE} and {parent_clause(ROOT_ID)}",
        _NAV_FOLDER_FIELDS,
    )
    return {
        "success": True,
        "operation": "listRoot",
        "folders": folders,
        "count": len(folders),
        "message": f"Found {len(folders)} folders in root",
    }


def _navigator_parent(
    ctx: ToolContext,
    params: dict[str, Any],
    token: str,
) -> tuple[Optional[str], Optional[dict[str, Any]]]:
    parent_id = params.get("parentFolderId")
    if parent_id:
        return parent_id, None
    parent_name = params.get("parentFolderName")
    if not parent_name:
        return None, failure(MISSING_REQUIRED_PARAMS, "parentFolderId or parentFolderName is required")
    parent_id = _find_folder_id(ctx, token, parent_name)
    if parent_id is None:
        return None, failure(
            PARENT_FOLDER_NOT_FOUND,
            f'Parent folder not found: "{parent_name}"',
            parentFolderName=parent_name,
        )
    return parent_id, None


def _list_subfolders(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    parent_id, error = _navigator_parent(ctx, params, token)
    if error is not None:
        return error
    folders = _list_children(
        ctx,
        params,
        token,
        f"{FOLDER_CLAUSE} and {parent_clause(parent_id)}",
        _NAV_FOLDER_FIELDS,
    )
    return {
        "success": True,
        "operation": "listSubfolders",
        "parentFolderId": parent_id,
        "parentFolderName": params.get("parentFolderName"),
        "folders": folders,
        "count": len(folders),
        "message": f"Found {len(folders)} subfolders",
    }


def _list_contents(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    folder_id, error = _navigator_parent(ctx, params, token)
    if error is not None:
        return error
    contents = _list_children(ctx, params, token, parent_clause(folder_id), _NAV_CONTENT_FIELDS)
    folders = [item for item in contents if is_folder(item.get("mimeType"))]
    files = [item for item in contents if not is_folder(item.get("mimeType"))]
    return {
        "success": True,
        "operation": "listContents",
        "folderId": folder_id,
        "folderName": params.get("parentFolderName"),
        "contents": contents if as_bool(params.get("includeFiles")) else folders,
        "folders": folders,
        "files": files,
        "folderCount": len(folders),
        "fileCount": len(files),
        "totalCount": len(contents),
        "message": f"Folder contains {len(folders)} folders and {len(files)} files",
    }


def _folder_structure(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    root = _list_root(ctx, params, token)
    return {
        "success": True,
        "operation": "getFolderStructure",
        "structure": root["folders"],
        "message": "Folder structure obtained (root level)",
    }


_NAVIGATOR_OPERATIONS = {
    "listRoot": _list_root,
    "listSubfolders": _list_subfolders,
    "listContents": _list_contents,
    "getFolderStructure": _folder_structure,
}


# ----------------------------
# smartFolderCreator
# ----------------------------
def smart_folder_creator(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    folder_path = params.get("folderPath")
    if folder_path is not None:
        return _create_path(ctx, folder_path, params.get("description"), token)

    folder_name = params.get("folderName")
    if not folder_name:
        return failure(MISSING_REQUIRED_PARAMS, "folderName or folderPath is required")

    parent_id = ROOT_ID
    if params.get("parentFolderId"):
        parent_id = params["parentFolderId"]
    elif params.get("parentFolderName"):
        parent_name = params["parentFolderName"]
        create_parents = as_bool(params.get("createParentsIfNotExist"), default=True)
        found = _find_folder_id(ctx, token, parent_name)
        if found is not None:
            parent_id = found
        elif create_parents:
            parent, _ = ctx.resolver.create_folder(token, parent_name, ROOT_ID)
            parent_id = parent.id
        else:
            return failure(
                PARENT_FOLDER_NOT_FOUND,
                f'Parent folder "{parent_name}" not found and createParentsIfNotExist is false',
                folderName=parent_name,
            )

    existing = ctx.resolver.find_child_folder(token, folder_name, parent_id)
    if existing is not None:
        return {
            "success": True,
            "folderId": existing["id"],
            "folderName": folder_name,
            "parentId": parent_id,
            "message": "Folder already exists",
            "alreadyExisted": True,
            "webViewLink": existing.get("webViewLink"),
        }

    try:
        created, link = ctx.resolver.create_folder(
            token,
            folder_name,
            parent_id,
            description=params.get("description"),
        )
    except GDriveToolsError as exc:
        logger.warning("[smart_folder_creator] create failed; name:%s;parent_id:%s", folder_name, parent_id)
        return failure(
            FOLDER_CREATION_FAILED,
            str(exc),
            folderName=folder_name,
            parentId=parent_id,
            errorType=type(exc).__name__,
        )

    return {
        "success": True,
        "folderId": created.id,
        "folderName": folder_name,
        "parentId": parent_id,
        "message": "Folder created successfully",
        "alreadyExisted": False,
        "webViewLink": link,
    }


def _create_path(
    ctx: ToolContext,
    folder_path: str,
    description: Optional[str],
    token: str,
) -> dict[str, Any]:
    if is_root_path(folder_path):
        return failure(INVALID_PATH, "Invalid folder path provided", folderPath=folder_path)

    outcome = ctx.resolver.create_folder_path(token, folder_path, description=description)
    if isinstance(outcome, PathCreationFailure):
        return {**outcome.to_dict(), "folderPath": folder_path}

    return {
        "success": True,
        "folderPath": folder_path,
        **outcome.to_dict(),
        "message": (
            f"Folder path created successfully. Created {len(outcome.created)} new folders, "
            f"found {len(outcome.existing)} existing folders."
        ),
    }


# ----------------------------
# smartFileUrl
# ----------------------------
def smart_file_url(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    file_id = params.get("fileId")
    file_name = params.get("fileName")
    folder_id = params.get("folderId")
    folder_name = params.get("folderName")
    if not (file_id or file_name or folder_id or folder_name):
        return failure(
            MISSING_REQUIRED_PARAMS,
            "Either fileId, fileName, folderId, or folderName is required",
        )

    url_type = params.get("urlType") or "view"
    exact = as_bool(params.get("exactMatch"))
    max_results = as_int(params.get("maxResults"), ctx.config.default_page_size)

    if file_id:
        item = ctx.search.get_file(token, file_id)
        if item is None:
            return failure(FILE_NOT_FOUND, f'File with ID "{file_id}" not found', fileId=file_id)
        items = [item]
        criteria: dict[str, Any] = {"fileId": file_id}
    elif file_name:
        criteria = {
            "fileName": file_name,
            "folderName": folder_name,
            "folderId": folder_id,
            "folderPath": params.get("folderPath"),
            "exactMatch": exact,
        }
        scope_id, scope_error = _file_scope(ctx, params, token)
        if scope_error is not None:
            return scope_error
        items = ctx.search.find_files(
            token,
            file_name,
            exact_match=exact,
            folder_id=scope_id,
            max_results=max_results,
        )
        if not items:
            return failure(
                FILE_NOT_FOUND,
                f'No files found matching "{file_name}"',
                fileName=file_name,
                searchCriteria=criteria,
            )
    elif folder_id:
        item = ctx.search.get_file(token, folder_id)
        if item is None:
            return failure(FOLDER_NOT_FOUND, f'Folder with ID "{folder_id}" not found', folderId=folder_id)
        items = [item]
        criteria = {"folderId": folder_id}
    else:
        criteria = {"folderName": folder_name, "folderPath": params.get("folderPath"), "exactMatch": exact}
        items = _folders_by_name(ctx, params, token, exact, max_results)
        if not items:
            return failure(
                FOLDER_NOT_FOUND,
                f'No folders found matching "{folder_name}"',
                folderName=folder_name,
                searchCriteria=criteria,
            )

    with_urls = [{**item, "urls": _urls_for(ctx, token, item, url_type)} for item in items]
    return {
        "success": True,
        "files": with_urls,
        "count": len(with_urls),
        "urlType": url_type,
        "searchCriteria": criteria,
        "message": f"Found {len(with_urls)} file(s) with {url_type} URLs",
    }


def _file_scope(
    ctx: ToolContext,
    params: dict[str, Any],
    token: str,
) -> tuple[Optional[str], Optional[dict[str, Any]]]:
    if params.get("folderId"):
        return params["folderId"], None
    if params.get("folderPath"):
        resolved = ctx.resolver.resolve_folder_path(token, params["folderPath"])
        if resolved is None:
            return None, failure(
                FOLDER_NOT_FOUND,
                f'Folder path not found: "{params["folderPath"]}"',
                folderPath=params["folderPath"],
            )
        return resolved.folder_id, None
    if params.get("folderName"):
        found = _find_folder_id(ctx, token, params["folderName"])
        if found is None:
            return None, failure(
                FOLDER_NOT_FOUND,
                f'Folder not found: "{params["folderName"]}"',
                folderName=params["folderName"],
            )
        return found, None
    return None, None


def _folders_by_name(
    ctx: ToolContext,
    params: dict[str, Any],
    token: str,
    exact: bool,
    max_results: int,
) -> list[dict[str, Any]]:
    matches = ctx.search.search_folders(
        token,
        params["folderName"],
        exact_match=exact,
        max_results=max_results,
    ).matches
    if matches and params.get("folderPath"):
        parent = ctx.resolver.resolve_folder_path(token, params["folderPath"])
        if parent is not None:
            return [m for m in matches if parent.folder_id in (m.get("parents") or [])]
    return matches


def _urls_for(ctx: ToolContext, token: str, item: dict[str, Any], url_type: str) -> dict[str, Any]:
    item_id = item["id"]
    folder = is_folder(item.get("mimeType"))
    view = item.get("webViewLink") or (folder_view_url(item_id) if folder else file_view_url(item_id))
    download = None if folder else (item.get("webContentLink") or download_url(item_id))

    if url_type == "view":
        return {"view": view}
    if url_type == "download":
        if folder:
            return {
                "download": None,
                "message": "Folders cannot be downloaded directly. Use view or share URL instead.",
            }
        return {"download": download}

    share = _ensure_public_link(ctx, token, item_id, folder=folder, fallback=view)
    if url_type == "share":
        return {"share": share}
    return {"view": view, "download": download, "share": share}


def _ensure_public_link(
    ctx: ToolContext,
    token: str,
    item_id: str,
    *,
    folder: bool,
    fallback: str,
) -> str:
    """Grant an `anyone` reader permission unless one exists, and return the sharing URL."""
    endpoint = f"files/{quote(item_id, safe='')}/permissions"
    try:
        data = ctx.client.request_json(token, endpoint)
        permissions = data.get("permissions") or []
        if not any(p.get("type") == "anyone" for p in permissions):
            ctx.client.request_json(
                token,
                endpoint,
                method="POST",
                body={"role": "reader", "type": "anyone"},
            )
            logger.info("[smart_file_url] public link granted; id:%s", item_id)
    except GDriveToolsError:
        logger.warning("[smart_file_url] could not share; id:%s", item_id, exc_info=True)
        return fallback
    return share_url(item_id, folder=folder)


def _find_folder_id(ctx: ToolContext, token: str, name: str) -> Optional[str]:
    """First folder named exactly `name` anywhere in the drive."""
    outcome = ctx.search.search_folders(
        token,
        name,
        exact_match=True,
        use_fulltext=False,
        max_results=1,
    )
    return outcome.matches[0]["id"] if outcome.found else None
