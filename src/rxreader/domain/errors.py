"""
Domain-specific error types for the prescription reading pipeline.

Every pipeline stage signals failure by raising one of these; the error
classifier turns them into the user-facing outcome.
"""

from typing import Any, Dict, Optional

from .enums.error_kind import ErrorKind

# Stable user-facing messages
MSG_NO_FILE = "No file provided. Please upload a prescription image."
MSG_INVALID_TYPE = "Invalid file type. Only JPEG, PNG, GIF, and WebP are allowed."
MSG_FILE_TOO_LARGE = "File too large. Maximum size is {max_mb}MB."
MSG_EMPTY_FILE = "Uploaded file is empty. Please upload a prescription image."
MSG_MISSING_CREDENTIAL = (
    "Invalid or missing Mistral API key. Please check MISTRAL_API_KEY in environment variables."
)
MSG_CAPABILITY_UNAVAILABLE = (
    "Vision model not found. The API key might not have access to vision models."
)
MSG_STORAGE = "Failed to store the uploaded prescription image"
MSG_INFERENCE = "Failed to analyze prescription"
MSG_RATE_LIMITED = "API quota exceeded. Please try again later."
MSG_PARSE = "Failed to parse prescription analysis results"
MSG_SCHEMA = "Invalid prescription analysis format"


class PrescriptionError(Exception):
    """Base error for the prescription pipeline."""

    kind: ErrorKind = ErrorKind.INFERENCE_FAILURE

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.kind.value
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputError(PrescriptionError):
    """Upload missing, of a disallowed media type, or too large."""

    kind = ErrorKind.INVALID_INPUT


class ConfigurationError(PrescriptionError):
    """Credential missing/invalid, or the model is unavailable to it."""

    kind = ErrorKind.CONFIGURATION_FAILURE

    def __init__(self, message: str = MSG_MISSING_CREDENTIAL, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class StorageError(PrescriptionError):
    """Staged image could not be written or read back."""

    kind = ErrorKind.STORAGE_FAILURE

    def __init__(self, message: str = MSG_STORAGE, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class InferenceError(PrescriptionError):
    """Vision call failed for a reason not otherwise classified."""

    kind = ErrorKind.INFERENCE_FAILURE

    def __init__(self, message: str = MSG_INFERENCE, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class RateLimitedError(PrescriptionError):
    """Remote quota or rate limit hit; the caller may retry later."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str = MSG_RATE_LIMITED, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class ParseError(PrescriptionError):
    """No JSON object in the model output, or it failed to parse."""

    kind = ErrorKind.PARSE_FAILURE

    def __init__(self, message: str = MSG_PARSE, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class SchemaViolationError(PrescriptionError):
    """Parsed JSON lacks a list-typed ``medicines`` field."""

    kind = ErrorKind.SCHEMA_VIOLATION

    def __init__(self, message: str = MSG_SCHEMA, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)


class RemoteServiceError(Exception):
    """Unclassified failure reported by the inference provider.

    Carries the provider's HTTP status so the classifier can decide the kind.
    """

    def __init__(self, service: str, message: str, status_code: Optional[int] = None) -> None:
        self.service = service
        self.message = message
        self.status_code = status_code
        super().__init__(f"{service} service error: {message}")
