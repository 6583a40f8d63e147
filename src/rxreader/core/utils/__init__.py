"""
Utility functions for Rx-Reader application.
"""

from .file_utils import (
    create_directory,
    extension_for_media_type,
    get_file_extension,
    is_directory_writable,
    unique_filename,
)
from .timing import StageTimer

__all__ = [
    # File utilities
    "create_directory",
    "extension_for_media_type",
    "get_file_extension",
    "is_directory_writable",
    "unique_filename",
    # Timing
    "StageTimer",
]
