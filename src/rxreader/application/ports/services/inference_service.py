"""
Vision inference service interface for prescription image reading.
"""

from abc import ABC, abstractmethod

from rxreader.application.utils.image_encoding import EncodedImage


class VisionInferenceService(ABC):
    """Abstract vision-capable language model: image + prompt in, text out."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """
        Whether a credential is present.

        Checked before any request is staged; False short-circuits the
        pipeline with a configuration failure.
        """

    @abstractmethod
    async def invoke(self, prompt: str, image: EncodedImage) -> str:
        """
        Ask the model about an image.

        Args:
            prompt: Instruction text
            image: Base64 image data and its media type

        Returns:
            The model's free-form text answer
        """

    @abstractmethod
    async def check_connection(self) -> str:
        """
        Send a trivial text-only request to verify the credential works.

        Returns:
            The model's answer
        """
