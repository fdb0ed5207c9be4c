"""Google Drive v3 REST client authenticated with a caller-supplied access token."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional
from urllib.parse import quote, urlencode

import requests
from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import AuthorizedSession
from google.oauth2.credentials import Credentials

from gdrivetools.cache.folder_cache import fingerprint
from gdrivetools.errors import AuthError, InvalidArgumentError, NetworkError, RemoteApiError

logger = logging.getLogger(__name__)

DRIVE_BASE_URL = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
DEFAULT_TIMEOUT_SEC = 30.0


class DriveClient:
    """
    Single point of authenticated communication with the Drive REST API.

    Notes:
        - The access token is supplied per call; token refresh belongs to the host.
        - Non-2xx responses raise RemoteApiError with status, status text and
          raw body untouched. Classification is left to `classify_remote_error`.
        - No retries are performed here.
    """

    def __init__(
        self,
        *,
        base_url: str = DRIVE_BASE_URL,
        upload_url: str = DRIVE_UPLOAD_URL,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._upload_url = upload_url
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    # ----------------------------
    # Public API
    # ----------------------------
    def request(
        self,
        token: str,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
    ) -> str:
        """
        Perform an authenticated request and return the raw response text.

        Args:
            token: OAuth access token of the calling user.
            endpoint: Path relative to the Drive v3 base URL, including an
                already-encoded query string (e.g. "files?q=...").
            method: HTTP method.
            body: Optional JSON-serialisable body (or a pre-serialised string)
                for non-GET requests.

        Raises:
            InvalidArgumentError: if token or endpoint is empty.
            RemoteApiError: on a non-2xx response.
            NetworkError: on connection failures and timeouts.
        """
        if not token or not isinstance(token, str):
            raise InvalidArgumentError("token must be a non-empty string")
        if not endpoint or not isinstance(endpoint, str):
            raise InvalidArgumentError("endpoint must be a non-empty string")

        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        headers = {"Accept": "application/json"}
        data: Optional[str] = None
        if method.upper() != "GET" and body is not None:
            headers["Content-Type"] = "application/json"
            data = body if isinstance(body, str) else json.dumps(body)

        return self._send(token, method.upper(), url, headers=headers, data=data).text

    def request_json(
        self,
        token: str,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
    ) -> dict[str, Any]:
        """Like `request`, but parse the body as JSON (empty body -> {})."""
        text = self.request(token, endpoint, method=method, body=body)
        if not text.strip():
            return {}
        return json.loads(text)

    def upload(
        self,
        token: str,
        metadata: dict[str, Any],
        content: bytes,
        mime_type: str,
        *,
        fields: Optional[str] = None,
        file_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Send metadata and content as one multipart/related upload.

        Creates a new file, or replaces the content of `file_id` when given.
        """
        if not token or not isinstance(token, str):
            raise InvalidArgumentError("token must be a non-empty string")

        body, content_type = build_multipart_body(metadata, content, mime_type)
        method = "POST"
        url = self._upload_url
        if file_id:
            method = "PATCH"
            url = f"{url}/{quote(file_id, safe='')}"
        url = f"{url}?uploadType=multipart"
        if fields:
            url = f"{url}&{urlencode({'fields': fields})}"
        headers = {"Accept": "application/json", "Content-Type": content_type}
        text = self._send(token, method, url, headers=headers, data=body).text
        return json.loads(text) if text.strip() else {}

    def download(self, token: str, endpoint: str) -> tuple[bytes, Optional[str]]:
        """
        GET a media endpoint (`files/{id}?alt=media`, `files/{id}/export?...`).

        Returns:
            (raw content bytes, Content-Type header or None)
        """
        if not token or not isinstance(token, str):
            raise InvalidArgumentError("token must be a non-empty string")
        if not endpoint or not isinstance(endpoint, str):
            raise InvalidArgumentError("endpoint must be a non-empty string")

        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        resp = self._send(token, "GET", url, headers={}, data=None)
        return resp.content, resp.headers.get("Content-Type")

    # ----------------------------
    # Internals
    # ----------------------------
    def _session(self, token: str) -> AuthorizedSession:
        # Refreshing is the host's job; a 401 must surface as-is.
        return AuthorizedSession(Credentials(token=token), refresh_status_codes=())

    def _send(
        self,
        token: str,
        method: str,
        url: str,
        *,
        headers: dict[str, str],
        data: Any,
    ) -> requests.Response:
        logger.debug(
            "[drive_request] sending; method:%s;url:%s;token:%s",
            method,
            url,
            fingerprint(token),
        )
        try:
            with self._session(token) as session:
                resp = session.request(
                    method,
                    url,
                    data=data,
                    headers=headers,
                    timeout=self._timeout,
                )
        except RefreshError as exc:
            raise AuthError("Access token is invalid or expired", cause=exc) from exc
        except (requests.RequestException, TransportError) as exc:
            logger.warning("[drive_request] transport failure; method:%s;url:%s", method, url)
            raise NetworkError("Network error", details={"url": url}, cause=exc) from exc

        if not 200 <= resp.status_code < 300:
            logger.info(
                "[drive_request] non-2xx response; method:%s;status:%d",
                method,
                resp.status_code,
            )
            raise RemoteApiError(resp.status_code, resp.reason, resp.text, url=url)
        return resp


def build_multipart_body(
    metadata: dict[str, Any],
    content: bytes,
    mime_type: str,
) -> tuple[bytes, str]:
    """
    Build a multipart/related payload for Drive `uploadType=multipart`.

    Returns:
        (body bytes, Content-Type header value)
    """
    boundary = f"==============={uuid.uuid4().hex}=="
    marker = boundary.encode("utf-8")
    meta_json = json.dumps(metadata, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    body = b"".join(
        [
            b"--" + marker + b"\r\n",
            b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
            meta_json + b"\r\n",
            b"--" + marker + b"\r\n",
            f"Content-Type: {mime_type}\r\n\r\n".encode("utf-8"),
            content + b"\r\n",
            b"--" + marker + b"--\r\n",
        ]
    )
    return body, f"multipart/related; boundary={boundary}"
