"""Tool configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from gdrivetools.twilio.media import TwilioCredentials


@dataclass(slots=True, frozen=True)
class ToolsConfig:
    """
    Runtime settings shared by the Drive client, folder cache and dispatcher.

    All fields have defaults; Twilio credentials are optional and only needed
    for Twilio-hosted media URLs.
    """

    cache_ttl_sec: float = 3600.0
    request_timeout_sec: float = 30.0
    default_page_size: int = 10
    root_name: str = "My Drive"
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None

    def __post_init__(self) -> None:
        if self.cache_ttl_sec <= 0:
            raise ValueError("ToolsConfig.cache_ttl_sec must be positive")
        if self.request_timeout_sec <= 0:
            raise ValueError("ToolsConfig.request_timeout_sec must be positive")
        if self.default_page_size < 1:
            raise ValueError("ToolsConfig.default_page_size must be >= 1")
        if not isinstance(self.root_name, str) or not self.root_name.strip():
            raise ValueError("ToolsConfig.root_name must be a non-empty string")

    def twilio_credentials(self) -> Optional[TwilioCredentials]:
        """Return Twilio credentials when both SID and token are configured."""
        if self.twilio_account_sid and self.twilio_auth_token:
            return TwilioCredentials(
                account_sid=self.twilio_account_sid,
                auth_token=self.twilio_auth_token,
            )
        return None


def load_config() -> ToolsConfig:
    """Construct a ToolsConfig from environment variables.

    Optional environment variables (with defaults):
        GDRIVETOOLS_CACHE_TTL_SEC: Folder cache entry lifetime (default: 3600).
        GDRIVETOOLS_REQUEST_TIMEOUT_SEC: Per-request HTTP timeout (default: 30).
        GDRIVETOOLS_DEFAULT_PAGE_SIZE: Default search page size (default: 10).
        GDRIVETOOLS_ROOT_NAME: Display name of the Drive root (default: My Drive).
        GDRIVETOOLS_TWILIO_ACCOUNT_SID: Twilio account SID for protected media.
        GDRIVETOOLS_TWILIO_AUTH_TOKEN: Twilio auth token for protected media.

    Returns:
        Configured ToolsConfig instance.

    Raises:
        ValueError: If a numeric variable cannot be parsed or is out of range.
    """
    return ToolsConfig(
        cache_ttl_sec=float(os.environ.get("GDRIVETOOLS_CACHE_TTL_SEC", "3600")),
        request_timeout_sec=float(os.environ.get("GDRIVETOOLS_REQUEST_TIMEOUT_SEC", "30")),
        default_page_size=int(os.environ.get("GDRIVETOOLS_DEFAULT_PAGE_SIZE", "10")),
        root_name=os.environ.get("GDRIVETOOLS_ROOT_NAME", "My Drive"),
        twilio_account_sid=os.environ.get("GDRIVETOOLS_TWILIO_ACCOUNT_SID") or None,
        twilio_auth_token=os.environ.get("GDRIVETOOLS_TWILIO_AUTH_TOKEN") or None,
    )
