"""Error taxonomy — domain exceptions, classification, and the tool error model.

Two layers:

1. Domain exceptions raised by the aggregator. ``ScoutError`` carries a fixed,
   user-readable message; internal detail is logged, never surfaced.
2. ``make_tool_error`` turns any exception into a serialisable ``ToolError``
   dict so FastMCP tools return errors instead of raising.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

# Backend message signalling that the active key's project has no Veo access.
CREDENTIAL_RESELECT_MARKER = "Requested entity was not found"


class ErrorCategory(str, Enum):
    """Categories of errors for diagnostics."""

    API_PERMISSION_DENIED = "API_PERMISSION_DENIED"
    API_QUOTA_EXCEEDED = "API_QUOTA_EXCEEDED"
    API_INVALID_ARGUMENT = "API_INVALID_ARGUMENT"
    API_NOT_FOUND = "API_NOT_FOUND"
    CREDENTIAL_RESELECT = "CREDENTIAL_RESELECT"
    NETWORK_ERROR = "NETWORK_ERROR"
    SCHEMA_VALIDATION_FAILED = "SCHEMA_VALIDATION_FAILED"
    VIDEO_FAILED = "VIDEO_FAILED"
    VIDEO_TIMEOUT = "VIDEO_TIMEOUT"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_UNSUPPORTED = "FILE_UNSUPPORTED"
    SEARCH_FAILED = "SEARCH_FAILED"
    GENERATION_FAILED = "GENERATION_FAILED"
    UNKNOWN = "UNKNOWN"


class ScoutError(Exception):
    """User-facing failure of a top-level operation."""

    category = ErrorCategory.GENERATION_FAILED

    def __init__(self, message: str, *, category: ErrorCategory | None = None) -> None:
        super().__init__(message)
        if category is not None:
            self.category = category


class CredentialReselectRequired(ScoutError):
    """The video backend rejected the credential; a new key must be selected."""

    category = ErrorCategory.CREDENTIAL_RESELECT


class VideoGenerationError(RuntimeError):
    """The video job finished in a failed state or returned no media."""


class VideoTimeoutError(VideoGenerationError, TimeoutError):
    """The video job did not complete within the configured poll budget."""


class VideoCancelledError(VideoGenerationError):
    """Polling was stopped through the cancellation token."""


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False
    retry_after_seconds: int | None = None


def needs_credential_reselect(error: BaseException) -> bool:
    """Return True when *error* is the backend's missing-entitlement signal."""
    return CREDENTIAL_RESELECT_MARKER.lower() in str(error).lower()


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, CredentialReselectRequired):
        return (
            ErrorCategory.CREDENTIAL_RESELECT,
            "Select an API key from a billing-enabled project (set VEO_API_KEY) and retry",
        )
    if isinstance(error, VideoTimeoutError):
        return (
            ErrorCategory.VIDEO_TIMEOUT,
            "Video job exceeded the poll budget — raise BROLL_VIDEO_POLL_MAX_ATTEMPTS or retry",
        )
    if isinstance(error, ScoutError):
        return (error.category, str(error))
    if isinstance(error, VideoGenerationError):
        return (ErrorCategory.VIDEO_FAILED, "Video generation failed on the backend")
    if isinstance(error, FileNotFoundError):
        return (ErrorCategory.FILE_NOT_FOUND, "File not found — check the reference image path")

    s = str(error).lower()

    if needs_credential_reselect(error):
        return (
            ErrorCategory.CREDENTIAL_RESELECT,
            "Select an API key from a billing-enabled project (set VEO_API_KEY) and retry",
        )
    if "403" in s or "permission" in s:
        return (
            ErrorCategory.API_PERMISSION_DENIED,
            "API key lacks permission for this model — check the key's project",
        )
    if "429" in s or "quota" in s or "resource_exhausted" in s:
        return (
            ErrorCategory.API_QUOTA_EXCEEDED,
            "Rate limit hit — wait and retry, or switch presets with infra_configure(preset='fast')",
        )
    if "unsupported image" in s:
        return (
            ErrorCategory.FILE_UNSUPPORTED,
            "Reference image type not supported — use jpeg, png, or webp",
        )
    if "validation error" in s or ("json" in s and "invalid" in s):
        return (
            ErrorCategory.SCHEMA_VALIDATION_FAILED,
            "Model output did not match the declared schema — retry the request",
        )
    if "400" in s:
        return (ErrorCategory.API_INVALID_ARGUMENT, "Bad request — check input format")
    if "404" in s or "not found" in s:
        return (ErrorCategory.API_NOT_FOUND, "Model or resource not found — check model IDs")
    if isinstance(error, TimeoutError) or "timeout" in s or "timed out" in s:
        return (
            ErrorCategory.NETWORK_ERROR,
            "Request timed out — try again or check connectivity",
        )
    if "connect" in s or "network" in s:
        return (ErrorCategory.NETWORK_ERROR, "Network failure — check connectivity")

    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception.

    ``ScoutError`` messages are already user-facing and are passed through;
    anything else keeps its raw message for diagnostics.
    """
    cat, hint = categorize_error(error)
    retryable = cat in {
        ErrorCategory.API_QUOTA_EXCEEDED,
        ErrorCategory.NETWORK_ERROR,
        ErrorCategory.VIDEO_TIMEOUT,
    }
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=retryable,
        retry_after_seconds=60 if cat == ErrorCategory.API_QUOTA_EXCEEDED else None,
    ).model_dump(mode="json")
