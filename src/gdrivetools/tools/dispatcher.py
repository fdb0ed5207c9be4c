"""Route (drive_type, action) tool calls to their handlers."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from gdrivetools.cache import FolderCache, default_folder_cache
from gdrivetools.client import DriveClient
from gdrivetools.config import ToolsConfig
from gdrivetools.errors import GDriveToolsError, RemoteApiError, classify_remote_error
from gdrivetools.folders import FolderSearch, PathResolver
from gdrivetools.models import ToolResult
from gdrivetools.twilio import TwilioMediaClient
from gdrivetools.util import now_utc, to_rfc3339

from . import drive_actions, media_actions, smart_actions
from .context import (
    MISSING_REQUIRED_PARAMS,
    UNSUPPORTED_ACTION,
    ActionHandler,
    ToolContext,
    failure,
)

logger = logging.getLogger(__name__)

DEFAULT_ACTIONS: dict[tuple[str, str], ActionHandler] = {
    ("file", "listFiles"): drive_actions.list_files,
    ("file", "getFile"): drive_actions.get_file,
    ("file", "createFile"): drive_actions.create_file,
    ("file", "updateFile"): drive_actions.update_file,
    ("file", "deleteFile"): drive_actions.delete_file,
    ("file", "copyFile"): drive_actions.copy_file,
    ("file", "downloadFile"): drive_actions.download_file,
    ("folder", "createFolder"): drive_actions.create_folder,
    ("folder", "listFolderContents"): drive_actions.list_folder_contents,
    ("folder", "deleteFolder"): drive_actions.delete_folder,
    ("search", "searchFiles"): drive_actions.search_files,
    ("share", "shareFile"): drive_actions.share_file,
    ("share", "getPermissions"): drive_actions.get_permissions,
    ("share", "removePermission"): drive_actions.remove_permission,
    ("smart", "smartFolderFinder"): smart_actions.smart_folder_finder,
    ("smart", "hierarchicalFolderNavigator"): smart_actions.hierarchical_folder_navigator,
    ("smart", "smartFolderCreator"): smart_actions.smart_folder_creator,
    ("smart", "smartFileUrl"): smart_actions.smart_file_url,
    ("smart", "urlFileUploader"): media_actions.url_file_uploader,
    ("twilio", "downloadByUrl"): media_actions.download_by_url,
}


class ToolDispatcher:
    """
    Entry point the host agent framework calls for every tool invocation.

    `dispatch` never raises: unknown actions, missing parameters and every
    exception raised by a handler come back as a failed ToolResult. Expired
    folder cache entries are swept at the start of each call.

    Notes:
        - `default_params` are the operator-configured inputs and override
          whatever the agent passes for the same key.
        - Without an explicit `cache` the process-wide cache is shared, and
          its TTL applies even when `config.cache_ttl_sec` differs. Use
          `from_config` for a cache honouring the configured TTL.
        - The access token is supplied per call and is never logged.
    """

    def __init__(
        self,
        client: Optional[DriveClient] = None,
        cache: Optional[FolderCache] = None,
        twilio: Optional[TwilioMediaClient] = None,
        config: Optional[ToolsConfig] = None,
        *,
        default_params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._config = config or ToolsConfig()
        client = client or DriveClient(timeout=self._config.request_timeout_sec)
        if cache is None:
            cache = default_folder_cache()
            if cache.ttl.total_seconds() != self._config.cache_ttl_sec:
                logger.warning(
                    "[dispatcher] shared cache TTL differs from config; shared:%s;configured:%s",
                    cache.ttl.total_seconds(),
                    self._config.cache_ttl_sec,
                )
        twilio = twilio or TwilioMediaClient(
            self._config.twilio_credentials(),
            timeout=self._config.request_timeout_sec,
        )
        self._ctx = ToolContext(
            client=client,
            cache=cache,
            search=FolderSearch(client, cache),
            resolver=PathResolver(client, cache),
            media=twilio,
            config=self._config,
        )
        self._default_params = dict(default_params or {})
        self._actions: dict[tuple[str, str], ActionHandler] = dict(DEFAULT_ACTIONS)

    @classmethod
    def from_config(cls, config: ToolsConfig, **kwargs: Any) -> "ToolDispatcher":
        """Build a dispatcher whose cache honours `config.cache_ttl_sec`."""
        return cls(config=config, cache=FolderCache(config.cache_ttl_sec), **kwargs)

    @property
    def context(self) -> ToolContext:
        return self._ctx

    def actions(self) -> list[tuple[str, str]]:
        return sorted(self._actions)

    def register(self, drive_type: str, action: str, handler: ActionHandler) -> None:
        self._actions[(drive_type, action)] = handler

    # ----------------------------
    # Public API
    # ----------------------------
    def dispatch(
        self,
        drive_type: str,
        action: str,
        params: Optional[Mapping[str, Any]],
        token: str,
    ) -> ToolResult:
        self._ctx.cache.sweep_expired()
        if params is not None and not isinstance(params, Mapping):
            logger.warning(
                "[dispatch] params not an object; drive_type:%s;action:%s;type:%s",
                drive_type,
                action,
                type(params).__name__,
            )
            payload = failure(
                MISSING_REQUIRED_PARAMS,
                "Tool parameters must be a JSON object",
                receivedType=type(params).__name__,
            )
            return ToolResult(payload=payload, params=dict(self._default_params))
        merged = {**dict(params or {}), **self._default_params}

        handler = self._actions.get((drive_type, action))
        if handler is None:
            logger.warning("[dispatch] unsupported; drive_type:%s;action:%s", drive_type, action)
            payload = failure(
                UNSUPPORTED_ACTION,
                f"Unsupported action: {drive_type}/{action}",
                driveType=drive_type,
                action=action,
            )
            return ToolResult(payload=payload, params=merged)

        try:
            payload = handler(self._ctx, merged, token)
        except Exception as exc:
            logger.warning(
                "[dispatch] failed; drive_type:%s;action:%s;error_type:%s",
                drive_type,
                action,
                type(exc).__name__,
                exc_info=True,
            )
            payload = error_payload(exc)

        logger.info(
            "[dispatch] done; drive_type:%s;action:%s;success:%s",
            drive_type,
            action,
            bool(payload.get("success")),
        )
        return ToolResult(payload=payload, params=merged)

    def call(
        self,
        drive_type: str,
        action: str,
        params: Optional[Mapping[str, Any]],
        token: str,
    ) -> str:
        """Dispatch and return the encoded `<json result><separator><json params>` string."""
        return self.dispatch(drive_type, action, params, token).encode()


def error_payload(exc: BaseException) -> dict[str, Any]:
    """Convert an exception into a failed result payload."""
    payload: dict[str, Any] = {
        "success": False,
        "error": str(exc),
        "errorType": type(exc).__name__,
        "timestamp": to_rfc3339(now_utc()),
    }
    if isinstance(exc, RemoteApiError):
        classified = classify_remote_error(exc)
        payload["errorType"] = type(classified).__name__
        payload["error"] = str(classified)
        payload["statusCode"] = exc.status_code
    elif isinstance(exc, GDriveToolsError) and exc.details:
        payload["details"] = exc.details
    return payload
