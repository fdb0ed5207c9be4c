"""Downloading media from (possibly Twilio-protected) URLs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

import requests
from requests.auth import HTTPBasicAuth

from gdrivetools.errors import InvalidArgumentError, NetworkError, RemoteApiError

logger = logging.getLogger(__name__)

USER_AGENT = "gdrivetools-media/1.0"
DEFAULT_TIMEOUT_SEC = 30.0
_ERROR_BODY_LIMIT = 500
_TWILIO_HOSTS: tuple[str, ...] = ("twilio.com", "twiml.com")


@dataclass(slots=True, frozen=True)
class TwilioCredentials:
    """Twilio account SID and auth token used for HTTP Basic auth."""

    account_sid: str
    auth_token: str

    def __post_init__(self) -> None:
        for key in ("account_sid", "auth_token"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"TwilioCredentials.{key} must be a non-empty string")


@dataclass(slots=True, frozen=True)
class DownloadedMedia:
    url: str
    content: bytes
    content_type: Optional[str]

    @property
    def size(self) -> int:
        return len(self.content)


def is_valid_url(url: object) -> bool:
    if not isinstance(url, str) or not url.strip():
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_twilio_url(url: str) -> bool:
    """True for Twilio-hosted media (twilio.com, twiml.com and their subdomains)."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    host = (parsed.hostname or "").lower()
    return host in _TWILIO_HOSTS or host.endswith(tuple(f".{h}" for h in _TWILIO_HOSTS))


def extract_file_name_from_url(url: str) -> Optional[str]:
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    name = unquote(path.rsplit("/", 1)[-1]) if path else ""
    return name or None


class TwilioMediaClient:
    """
    Fetches media over HTTP, authenticating only against Twilio hosts.

    Credentials are never sent to non-Twilio hosts.
    """

    def __init__(
        self,
        credentials: Optional[TwilioCredentials] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        self._credentials = credentials
        self._timeout = timeout

    @property
    def has_credentials(self) -> bool:
        return self._credentials is not None

    def download(self, url: str) -> DownloadedMedia:
        """
        Download `url` and return its bytes and Content-Type.

        Raises:
            InvalidArgumentError: for a Twilio URL when no credentials are set.
            RemoteApiError: on a non-2xx response (body truncated).
            NetworkError: on connection failures and timeouts.
        """
        auth = None
        if is_twilio_url(url):
            if self._credentials is None:
                raise InvalidArgumentError(
                    "Twilio credentials are required for Twilio media URLs",
                    details={"url": url},
                )
            auth = HTTPBasicAuth(self._credentials.account_sid, self._credentials.auth_token)

        try:
            resp = requests.get(
                url,
                auth=auth,
                headers={"User-Agent": USER_AGENT},
                timeout=self._timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            logger.warning("[media_download] transport failure; url:%s", url)
            raise NetworkError("Network error", details={"url": url}, cause=exc) from exc

        if not 200 <= resp.status_code < 300:
            raise RemoteApiError(
                resp.status_code,
                resp.reason,
                resp.text[:_ERROR_BODY_LIMIT],
                url=url,
            )

        logger.info("[media_download] downloaded; url:%s;size:%d", url, len(resp.content))
        return DownloadedMedia(
            url=url,
            content=resp.content,
            content_type=resp.headers.get("Content-Type"),
        )
