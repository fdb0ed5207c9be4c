"""Twilio media download exports for gdrivetools."""

from __future__ import annotations

from .media import (
    DownloadedMedia,
    TwilioCredentials,
    TwilioMediaClient,
    extract_file_name_from_url,
    is_twilio_url,
    is_valid_url,
)

__all__ = [
    "TwilioCredentials",
    "TwilioMediaClient",
    "DownloadedMedia",
    "is_twilio_url",
    "is_valid_url",
    "extract_file_name_from_url",
]
