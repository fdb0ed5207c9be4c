"""Exception hierarchy and HTTP error mapping for gdrivetools."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional


class GDriveToolsError(Exception):
    """
    Base exception for gdrivetools.

    Attributes:
        details: Optional structured information (e.g., HTTP status, reason).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class AuthError(GDriveToolsError):
    """Raised when the access token is rejected (HTTP 401)."""


class PermissionError(GDriveToolsError):
    """Raised when access is denied (HTTP 403 non-quota)."""


class InvalidArgumentError(GDriveToolsError):
    """Raised when request arguments are invalid (HTTP 400, empty token, etc.)."""


class NotFoundError(GDriveToolsError):
    """Raised when a Drive resource is not found (HTTP 404)."""


class ConflictError(GDriveToolsError):
    """Raised when a conflict occurs (HTTP 409/412)."""


class RateLimitError(GDriveToolsError):
    """Raised when rate-limited (HTTP 429)."""


class QuotaExceededError(GDriveToolsError):
    """Raised when quota is exceeded (HTTP 403 with quota-related reason)."""


class NetworkError(GDriveToolsError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(GDriveToolsError):
    """Raised for unclassified API errors (5xx, unknown 4xx, etc.)."""


class RemoteApiError(GDriveToolsError):
    """
    Raised by the HTTP clients for any non-2xx response.

    The status, status text and raw body are kept untouched so callers can
    classify the failure with `classify_remote_error`.
    """

    def __init__(
        self,
        status_code: int,
        reason: Optional[str],
        body: str,
        *,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"Remote API error {status_code}: {reason or ''} - {body}",
            details={"status_code": status_code, "reason": reason, "url": url},
        )
        self.status_code = status_code
        self.reason = reason
        self.body = body
        self.url = url


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to gdrivetools exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_QUOTA_REASON_KEYWORDS: tuple[str, ...] = (
    "quota",
    "rateLimitExceeded",
    "userRateLimitExceeded",
    "dailyLimitExceeded",
    "usageLimits",
    "storageQuotaExceeded",
)


def _is_quota_reason(reason: str | None) -> bool:
    if not reason:
        return False
    return any(key.lower() in reason.lower() for key in _QUOTA_REASON_KEYWORDS)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> GDriveToolsError:
    """
    Map an HTTP error to a gdrivetools exception.

    Policy:
        - 401 -> AuthError
        - 403 -> PermissionError (default), but QuotaExceededError if quota-related
        - 404 -> NotFoundError
        - 409/412 -> ConflictError
        - 429 -> RateLimitError
        - 400 -> InvalidArgumentError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 400:
        return InvalidArgumentError(message, details=details, cause=cause)
    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        if _is_quota_reason(info.reason):
            return QuotaExceededError(message, details=details, cause=cause)
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)


def remote_error_to_info(exc: RemoteApiError) -> HttpErrorInfo:
    """Parse the Google JSON error envelope out of a raw error body, if present."""
    reason = exc.reason
    message = None
    details: dict[str, Any] = {}

    try:
        payload = json.loads(exc.body) if exc.body else {}
    except ValueError:
        payload = {}

    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        message = err.get("message") or None
        errors = err.get("errors") or []
        if errors and isinstance(errors, list) and isinstance(errors[0], dict):
            details["domain"] = errors[0].get("domain")
            details["reason_detail"] = errors[0].get("reason")
            if isinstance(errors[0].get("reason"), str):
                reason = errors[0]["reason"]

    return HttpErrorInfo(
        status_code=exc.status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )


def classify_remote_error(exc: RemoteApiError) -> GDriveToolsError:
    """Classify a raw remote failure (permission, not found, rate limit, ...)."""
    return map_http_error(remote_error_to_info(exc), cause=exc)
