"""
Storage adapters for Rx-Reader.

Transient staging of uploaded prescription images.
"""

from .transient_store import StagedImage, TransientStore

__all__ = [
    "StagedImage",
    "TransientStore",
]
