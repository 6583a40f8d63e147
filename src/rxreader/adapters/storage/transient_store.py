"""
Transient on-disk staging for uploaded prescription images.

A staged image lives exactly as long as the ``stage()`` context: it is
deleted when the block exits, whether by return, exception or task
cancellation.
"""

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from rxreader.application.utils.upload_gate import UploadCandidate
from rxreader.core.config import UploadSettings, get_settings
from rxreader.core.utils.file_utils import (
    create_directory,
    extension_for_media_type,
    get_file_extension,
    unique_filename,
)
from rxreader.domain.errors import (
    MSG_EMPTY_FILE,
    MSG_FILE_TOO_LARGE,
    InvalidInputError,
    StorageError,
)

FILENAME_PREFIX = "prescription"


@dataclass(frozen=True)
class StagedImage:
    """Handle to an image written to the staging directory."""

    path: str
    media_type: str
    size: int
    original_filename: Optional[str] = None

    @property
    def name(self) -> str:
        return os.path.basename(self.path)


class TransientStore:
    """Writes accepted uploads to a staging directory for one request."""

    def __init__(self, settings: Optional[UploadSettings] = None):
        self._settings = settings or get_settings().upload
        self._logger = logging.getLogger("rxreader.storage")

    @property
    def staging_dir(self) -> str:
        return self._settings.staging_dir

    @asynccontextmanager
    async def stage(self, candidate: UploadCandidate) -> AsyncIterator[StagedImage]:
        """Stage ``candidate`` on disk for the duration of the block."""
        content = await self._read_bounded(candidate)

        try:
            create_directory(self.staging_dir)
        except OSError as e:
            self._logger.error(f"Cannot create staging directory {self.staging_dir}: {e}")
            raise StorageError(details={"reason": str(e)}) from e

        extension = get_file_extension(candidate.filename) or extension_for_media_type(
            candidate.media_type
        )
        path = os.path.join(self.staging_dir, unique_filename(FILENAME_PREFIX, extension))

        try:
            try:
                with open(path, "xb") as staged_file:
                    staged_file.write(content)
            except OSError as e:
                self._logger.error(f"Failed to stage upload at {path}: {e}")
                raise StorageError(details={"reason": str(e)}) from e

            self._logger.info(f"Staged prescription image {os.path.basename(path)} ({len(content)} bytes)")
            yield StagedImage(
                path=path,
                media_type=candidate.media_type,
                size=len(content),
                original_filename=candidate.filename,
            )
        finally:
            self._release(path)

    async def _read_bounded(self, candidate: UploadCandidate) -> bytes:
        """Read the upload body, refusing more than the size ceiling.

        Declared sizes can be wrong, so the ceiling is enforced on the bytes
        themselves, before anything is written.
        """
        limit = self._settings.max_size_bytes
        try:
            content = await candidate.source.read(limit + 1)
        except OSError as e:
            raise StorageError(details={"reason": f"could not read upload: {e}"}) from e

        if len(content) > limit:
            raise InvalidInputError(
                MSG_FILE_TOO_LARGE.format(max_mb=self._settings.max_size_mb),
                details={"size_bytes": f">{limit}", "max_size_mb": self._settings.max_size_mb},
            )
        if not content:
            raise InvalidInputError(MSG_EMPTY_FILE, details={"reason": "empty_file"})
        return content

    def _release(self, path: str) -> None:
        try:
            os.remove(path)
            self._logger.info(f"Removed staged image {os.path.basename(path)}")
        except FileNotFoundError:
            pass
        except OSError as e:
            self._logger.warning(f"Failed to remove staged image {path}: {e}")
