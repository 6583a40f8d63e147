"""
Base64 encoding of a staged prescription image for the vision API.
"""

import base64
from dataclasses import dataclass

from rxreader.domain.errors import StorageError


@dataclass(frozen=True)
class EncodedImage:
    """Image bytes as base64 text plus the media type they were uploaded as."""

    data: str
    media_type: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


def encode_image(path: str, media_type: str) -> EncodedImage:
    """Read the file at ``path`` and base64-encode it.

    Raises StorageError if the file cannot be read back.
    """
    try:
        with open(path, "rb") as image_file:
            image_data = base64.b64encode(image_file.read()).decode("utf-8")
    except OSError as e:
        raise StorageError(details={"path": path, "reason": str(e)}) from e
    return EncodedImage(data=image_data, media_type=media_type)
