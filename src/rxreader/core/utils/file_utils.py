"""
File utility functions for Rx-Reader application.
"""

import mimetypes
import os
import time
import uuid
from pathlib import Path
from typing import Optional

# mimetypes has no entry for the non-standard "image/jpg" alias
_MEDIA_TYPE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def get_file_extension(filename: Optional[str]) -> str:
    """Get file extension from filename."""
    if not filename:
        return ""
    return Path(filename).suffix.lower()


def extension_for_media_type(media_type: str) -> str:
    """Best-effort file extension for a media type, empty string if unknown."""
    media_type = (media_type or "").lower()
    if media_type in _MEDIA_TYPE_EXTENSIONS:
        return _MEDIA_TYPE_EXTENSIONS[media_type]
    return mimetypes.guess_extension(media_type) or ""


def unique_filename(prefix: str, extension: str) -> str:
    """Build a collision-resistant file name: <prefix>-<epoch ms>-<random hex><ext>."""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}{extension}"


def create_directory(directory_path: str) -> None:
    """Create directory if it doesn't exist. Raises OSError on failure."""
    Path(directory_path).mkdir(parents=True, exist_ok=True)


def is_directory_writable(directory_path: str) -> bool:
    """Check that a directory exists (or can be created) and is writable."""
    try:
        create_directory(directory_path)
    except OSError:
        return False
    return os.access(directory_path, os.W_OK)
