"""
Maps any failure raised while reading a prescription to one ClassifiedError.

The classifier is total: unknown exceptions fall back to an inference
failure, so callers never see a raw exception object.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from rxreader.domain.enums.error_kind import ErrorKind
from rxreader.domain.errors import (
    MSG_CAPABILITY_UNAVAILABLE,
    MSG_INFERENCE,
    MSG_MISSING_CREDENTIAL,
    MSG_RATE_LIMITED,
    MSG_STORAGE,
    PrescriptionError,
    RemoteServiceError,
)

_RATE_LIMIT_MARKERS = ("quota", "rate limit", "rate_limit", "ratelimit", "too many requests")
_CREDENTIAL_MARKERS = ("api key", "api_key", "unauthorized")


@dataclass(frozen=True)
class ClassifiedError:
    """Terminal failure outcome of one request."""

    kind: ErrorKind
    message: str
    diagnostic: Optional[str] = None

    @property
    def http_status(self) -> int:
        return self.kind.http_status


def _describe(exc: BaseException) -> str:
    text = str(exc)
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


def _diagnostic_for(exc: BaseException) -> str:
    if isinstance(exc, PrescriptionError):
        if "parser_error" in exc.details:
            return str(exc.details["parser_error"])
        if exc.__cause__ is not None:
            return _describe(exc.__cause__)
        if "reason" in exc.details:
            return str(exc.details["reason"])
        return exc.message
    return _describe(exc)


def classify_remote_failure(status_code: Optional[int], text: str) -> ErrorKind:
    """Kind for a failure reported by the inference provider."""
    lowered = (text or "").lower()
    if status_code == 429 or any(marker in lowered for marker in _RATE_LIMIT_MARKERS):
        return ErrorKind.RATE_LIMITED
    if status_code in (401, 403) or any(marker in lowered for marker in _CREDENTIAL_MARKERS):
        return ErrorKind.CONFIGURATION_FAILURE
    if status_code == 404:
        return ErrorKind.CONFIGURATION_FAILURE
    return ErrorKind.INFERENCE_FAILURE


def classify_error(exc: BaseException, include_diagnostic: bool = False) -> ClassifiedError:
    """Classify ``exc``; attach its detail only when ``include_diagnostic``."""
    diagnostic = _diagnostic_for(exc) if include_diagnostic else None

    if isinstance(exc, PrescriptionError):
        return ClassifiedError(exc.kind, exc.message, diagnostic)

    status_code = getattr(exc, "status_code", None)
    if isinstance(exc, RemoteServiceError) or isinstance(status_code, int):
        text = exc.message if isinstance(exc, RemoteServiceError) else str(exc)
        kind = classify_remote_failure(status_code, text)
        if kind is ErrorKind.RATE_LIMITED:
            message = MSG_RATE_LIMITED
        elif kind is ErrorKind.CONFIGURATION_FAILURE:
            message = MSG_CAPABILITY_UNAVAILABLE if status_code == 404 else MSG_MISSING_CREDENTIAL
        else:
            message = MSG_INFERENCE
        return ClassifiedError(kind, message, diagnostic)

    # TimeoutError subclasses OSError, so it must be checked first
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ClassifiedError(ErrorKind.INFERENCE_FAILURE, MSG_INFERENCE, diagnostic)

    if isinstance(exc, OSError):
        return ClassifiedError(ErrorKind.STORAGE_FAILURE, MSG_STORAGE, diagnostic)

    return ClassifiedError(ErrorKind.INFERENCE_FAILURE, MSG_INFERENCE, diagnostic)
