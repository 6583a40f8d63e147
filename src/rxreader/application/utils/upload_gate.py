"""
Upload gate: checks an incoming prescription image before anything stores it.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from rxreader.core.config import UploadSettings
from rxreader.domain.errors import (
    MSG_FILE_TOO_LARGE,
    MSG_INVALID_TYPE,
    MSG_NO_FILE,
    InvalidInputError,
)

logger = logging.getLogger("rxreader.upload")


@dataclass
class UploadCandidate:
    """An uploaded file as declared by the client.

    ``source`` is any object with an async ``read(size=-1)`` method
    (FastAPI's ``UploadFile`` in the HTTP path).
    """

    filename: Optional[str]
    media_type: Optional[str]
    size: Optional[int]
    source: Any


def normalize_media_type(media_type: Optional[str]) -> str:
    """Lower-case a media type and drop parameters (``image/png; q=1`` -> ``image/png``)."""
    if not media_type:
        return ""
    return media_type.split(";", 1)[0].strip().lower()


def validate_upload(candidate: Optional[UploadCandidate], settings: UploadSettings) -> UploadCandidate:
    """Accept the candidate or raise InvalidInputError.

    Only declared metadata is inspected; no bytes are read or written here.
    """
    if candidate is None or candidate.source is None:
        logger.warning("Rejected upload: no file provided")
        raise InvalidInputError(MSG_NO_FILE, details={"reason": "missing_file"})

    media_type = normalize_media_type(candidate.media_type)
    if media_type not in settings.allowed_media_types:
        logger.warning(f"Rejected upload {candidate.filename!r}: media type {media_type or 'unknown'}")
        raise InvalidInputError(
            MSG_INVALID_TYPE,
            details={
                "media_type": media_type,
                "allowed_media_types": list(settings.allowed_media_types),
            },
        )

    if candidate.size is not None and candidate.size > settings.max_size_bytes:
        logger.warning(
            f"Rejected upload {candidate.filename!r}: {candidate.size} bytes exceeds {settings.max_size_bytes}"
        )
        raise InvalidInputError(
            MSG_FILE_TOO_LARGE.format(max_mb=settings.max_size_mb),
            details={"size_bytes": candidate.size, "max_size_mb": settings.max_size_mb},
        )

    candidate.media_type = media_type
    return candidate
