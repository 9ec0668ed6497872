"""Error kinds reported by generation sessions and backends."""

from __future__ import annotations

from enum import Enum

import requests


class ErrorKind(str, Enum):
    """Why a submission did not produce a new result."""

    INSUFFICIENT_CREDITS = "insufficient_credits"
    ALREADY_IN_PROGRESS = "already_in_progress"
    REMOTE_REJECTED = "remote_rejected"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    INVALID_RESULT = "invalid_result"


class GenerationError(RuntimeError):
    """Raised by backends when a remote generation fails."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.REMOTE_UNAVAILABLE) -> None:
        super().__init__(message)
        self.kind = kind


# Substrings the providers and the proxy use for safety-policy refusals.
SAFETY_MARKERS = (
    "IMAGE_SAFETY",
    "SENSITIVE_CONTENT_DETECTED",
    "E005",
    "flagged as sensitive",
    "sensitive content",
    "safety",
    "veiligheidsfilters",
)


def classify_message(message: str) -> ErrorKind:
    """Map a remote error message onto an error kind."""
    lowered = (message or "").lower()
    if any(marker.lower() in lowered for marker in SAFETY_MARKERS):
        return ErrorKind.REMOTE_REJECTED
    return ErrorKind.REMOTE_UNAVAILABLE


def classify_exception(exc: BaseException) -> ErrorKind:
    """Map an exception raised by a remote call onto an error kind."""
    if isinstance(exc, GenerationError):
        return exc.kind
    if isinstance(exc, (requests.Timeout, requests.ConnectionError, TimeoutError, OSError)):
        return ErrorKind.REMOTE_UNAVAILABLE
    return classify_message(str(exc))
