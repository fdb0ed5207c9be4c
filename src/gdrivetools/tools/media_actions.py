"""Actions that move media from arbitrary URLs into Drive or back to the caller."""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

from gdrivetools.errors import GDriveToolsError, RemoteApiError
from gdrivetools.folders import ROOT_ID, is_root_path
from gdrivetools.models import PathCreationFailure
from gdrivetools.twilio import extract_file_name_from_url, is_twilio_url, is_valid_url
from gdrivetools.util import (
    detect_mime_type,
    ensure_unique_file_name,
    mime_to_extension,
    now_utc,
    sanitize_filename,
)

from .context import (
    ALL_URLS_INVALID,
    FOLDER_CREATION_FAILED,
    MISSING_REQUIRED_PARAMS,
    NO_URLS,
    TWILIO_CREDENTIALS_MISSING,
    ToolContext,
    as_bool,
    failure,
)
from .smart_actions import download_url, folder_view_url

logger = logging.getLogger(__name__)

# Names an agent uses for "the top of My Drive" when picking an upload target.
UPLOAD_ROOT_NAMES: frozenset[str] = frozenset(
    {"root", "my drive", "mydrive", "/", "", "drive", "google drive", "googledrive"}
)

UPLOAD_FIELDS = "id,name,mimeType,size,webViewLink"


def is_upload_root(value: Optional[str]) -> bool:
    if not isinstance(value, str):
        return False
    return value.strip().lower() in UPLOAD_ROOT_NAMES


def _as_values(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _padded_names(value: Any, count: int) -> list[str]:
    names = [n if isinstance(n, str) else "" for n in _as_values(value)]
    return names + [""] * (count - len(names))


def _stamp() -> int:
    return int(now_utc().timestamp() * 1000)


def validate_urls(raw: list[Any]) -> tuple[list[str], list[Any], list[str]]:
    """
    Split raw input into (valid, invalid, duplicate) URLs.

    Valid URLs keep their first-seen order; repeats are reported once each
    time they recur.
    """
    valid: list[str] = []
    invalid: list[Any] = []
    duplicates: list[str] = []
    seen: set[str] = set()
    for item in raw:
        if not is_valid_url(item):
            invalid.append(item)
            continue
        url = item.strip()
        if url in seen:
            duplicates.append(url)
            continue
        seen.add(url)
        valid.append(url)
    return valid, invalid, duplicates


# ----------------------------
# urlFileUploader
# ----------------------------
def url_file_uploader(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    raw_urls = _as_values(params.get("fileUrl"))
    urls, invalid, duplicates = validate_urls(raw_urls)
    if not urls:
        return failure(
            ALL_URLS_INVALID,
            "No valid URLs found to process",
            invalidUrls=invalid,
        )

    twilio_urls = [u for u in urls if is_twilio_url(u)]
    if twilio_urls and not ctx.media.has_credentials:
        return failure(
            TWILIO_CREDENTIALS_MISSING,
            "Twilio credentials are required for Twilio URLs",
            twilioUrls=twilio_urls,
        )

    target, error = _upload_target(ctx, params, token)
    if error is not None:
        return error

    names = _padded_names(params.get("fileName"), len(urls))
    overwrite = as_bool(params.get("overwriteExisting"))
    uploads: list[dict[str, Any]] = []
    failures: list[dict[str, Any]] = []
    used: set[str] = set()

    for index, url in enumerate(urls):
        if names[index].strip():
            name = sanitize_filename(names[index].strip(), fallback=f"custom_file_{_stamp()}_{index}")
        else:
            name = extract_file_name_from_url(url) or f"downloaded_file_{_stamp()}_{index}"
        name = ensure_unique_file_name(name, used)
        used.add(name)

        try:
            media = ctx.media.download(url)
        except GDriveToolsError as exc:
            logger.warning("[url_file_uploader] download failed; url:%s", url)
            failures.append(
                {
                    "url": url,
                    "fileName": name,
                    "error": "DOWNLOAD_FAILED",
                    "details": str(exc),
                    "stage": "download",
                }
            )
            continue

        mime_type = detect_mime_type(name, media.content_type)
        try:
            if not overwrite:
                existing = ctx.search.find_files(
                    token,
                    name,
                    exact_match=True,
                    folder_id=target["id"],
                    max_results=1,
                )
                if existing:
                    failures.append(
                        {
                            "url": url,
                            "fileName": name,
                            "error": "FILE_EXISTS",
                            "details": f"File already exists with ID: {existing[0]['id']}",
                            "existingFileId": existing[0]["id"],
                            "stage": "upload",
                        }
                    )
                    continue

            uploaded = ctx.client.upload(
                token,
                {"name": name, "parents": [target["id"]]},
                media.content,
                mime_type,
                fields=UPLOAD_FIELDS,
            )
        except GDriveToolsError as exc:
            logger.warning("[url_file_uploader] upload failed; url:%s;name:%s", url, name)
            failures.append(
                {
                    "url": url,
                    "fileName": name,
                    "error": str(exc),
                    "errorType": type(exc).__name__,
                    "stage": "upload",
                }
            )
            continue

        uploads.append(
            {
                "url": url,
                "fileId": uploaded.get("id"),
                "fileName": name,
                "fileSize": media.size,
                "mimeType": mime_type,
                "webViewLink": uploaded.get("webViewLink"),
                "downloadUrl": download_url(uploaded.get("id", "")),
            }
        )

    total_size = sum(u["fileSize"] for u in uploads)
    result: dict[str, Any] = {
        "success": bool(uploads),
        "totalFiles": len(urls),
        "successfulUploads": len(uploads),
        "failedUploads": len(failures),
        "targetFolder": target,
        "targetFolderId": target["id"],
        "uploads": uploads,
        "failures": failures,
        "summary": (
            f"Successfully uploaded {len(uploads)} of {len(urls)} files to Google Drive "
            f'folder "{target["name"]}" (ID: {target["id"]})'
        ),
        "processingInfo": {
            "totalProcessed": len(urls),
            "successRate": round(len(uploads) * 100 / len(urls)),
            "totalSizeUploaded": total_size,
            "averageFileSize": round(total_size / len(uploads)) if uploads else 0,
        },
    }
    if invalid or duplicates:
        result["urlValidation"] = {
            "invalidUrls": invalid,
            "duplicateUrls": duplicates,
            "originalUrlCount": len(raw_urls),
            "validUrlCount": len(urls),
        }
    logger.info(
        "[url_file_uploader] done; folder_id:%s;uploaded:%d;failed:%d",
        target["id"],
        len(uploads),
        len(failures),
    )
    return result


def _upload_target(
    ctx: ToolContext,
    params: dict[str, Any],
    token: str,
) -> tuple[dict[str, Any], Optional[dict[str, Any]]]:
    """
    Work out the destination folder, creating it when it does not exist.

    Returns:
        (folder info, None) on success or ({}, failure payload).
    """
    folder_id = params.get("targetFolderId")
    folder_path = params.get("folderPath")
    folder_name = params.get("targetFolderName")

    if folder_id:
        return _target_info(folder_id, folder_name or folder_id, folder_path, "folder", False), None
    if folder_path is None and folder_name is None:
        return {}, failure(
            MISSING_REQUIRED_PARAMS,
            "targetFolderId, targetFolderName or folderPath is required",
        )

    if folder_path is not None:
        if is_upload_root(folder_path) or is_root_path(folder_path):
            return _target_info(ROOT_ID, ctx.config.root_name, ctx.config.root_name, "root", False), None
        resolved = ctx.resolver.resolve_folder_path(token, folder_path)
        if resolved is not None:
            return _target_info(resolved.folder_id, resolved.segments[-1], folder_path, "path", False), None
        outcome = ctx.resolver.create_folder_path(token, folder_path)
        if isinstance(outcome, PathCreationFailure):
            return {}, failure(
                FOLDER_CREATION_FAILED,
                f"Could not create folder: {folder_path}",
                targetFolder=folder_path,
                failedAt=outcome.failed_at,
            )
        return _target_info(outcome.folder_id, outcome.segments[-1], folder_path, "path", True), None

    if is_upload_root(folder_name):
        return _target_info(ROOT_ID, ctx.config.root_name, ctx.config.root_name, "root", False), None
    found = ctx.search.search_folders(
        token,
        folder_name,
        exact_match=True,
        use_fulltext=False,
        max_results=1,
    )
    if found.found:
        return _target_info(found.matches[0]["id"], folder_name, None, "folder", False), None
    try:
        created, _ = ctx.resolver.create_folder(token, folder_name, ROOT_ID)
    except GDriveToolsError as exc:
        return {}, failure(
            FOLDER_CREATION_FAILED,
            f"Could not create folder: {folder_name}",
            targetFolder=folder_name,
            errorType=type(exc).__name__,
        )
    return _target_info(created.id, folder_name, None, "folder", True), None


def _target_info(
    folder_id: str,
    name: str,
    path: Optional[str],
    kind: str,
    created: bool,
) -> dict[str, Any]:
    return {
        "id": folder_id,
        "name": name,
        "path": path or name,
        "webViewLink": folder_view_url(folder_id),
        "wasCreated": created,
        "type": kind,
    }


# ----------------------------
# twilio/downloadByUrl
# ----------------------------
def download_by_url(ctx: ToolContext, params: dict[str, Any], token: str) -> dict[str, Any]:
    urls = [u.strip() for u in _as_values(params.get("mediaUrl")) if isinstance(u, str) and u.strip()]
    if not urls:
        return failure(NO_URLS, "No mediaUrl provided")
    if any(is_twilio_url(u) for u in urls) and not ctx.media.has_credentials:
        return failure(
            TWILIO_CREDENTIALS_MISSING,
            "Twilio credentials are required to download protected media URLs.",
        )

    names = _padded_names(params.get("fileName"), len(urls))
    with_data_url = as_bool(params.get("returnDataUrl"), default=True)
    used: set[str] = set()
    files: list[dict[str, Any]] = []
    failures: list[dict[str, Any]] = []

    for index, url in enumerate(urls):
        try:
            media = ctx.media.download(url)
        except RemoteApiError as exc:
            failures.append(
                {"url": url, "status": exc.status_code, "statusText": exc.reason, "body": exc.body}
            )
            continue
        except GDriveToolsError as exc:
            failures.append({"url": url, "error": str(exc)})
            continue

        name = names[index].strip()
        if not name:
            name = extract_file_name_from_url(url) or f"twilio_media_{index}"
            extension = mime_to_extension(media.content_type) if media.content_type else None
            if "." not in name and extension:
                name = f"{name}.{extension}"
        name = ensure_unique_file_name(name, used)
        used.add(name)

        mime_type = detect_mime_type(name, media.content_type)
        entry: dict[str, Any] = {"url": url, "name": name, "mime": mime_type, "size": media.size}
        if with_data_url:
            encoded = base64.b64encode(media.content).decode("ascii")
            entry["dataUrl"] = f"data:{mime_type};base64,{encoded}"
        files.append(entry)

    logger.info("[download_by_url] done; downloaded:%d;failed:%d", len(files), len(failures))
    return {
        "success": bool(files),
        "totalRequested": len(urls),
        "downloaded": len(files),
        "failed": len(failures),
        "files": files,
        "failures": failures,
    }
