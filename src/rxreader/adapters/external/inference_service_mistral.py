"""
Mistral AI implementation of VisionInferenceService for prescription images.
"""

import logging
from typing import Any, Optional

import httpx
from mistralai import Mistral

from rxreader.application.ports.services.inference_service import VisionInferenceService
from rxreader.application.utils.image_encoding import EncodedImage
from rxreader.core.config import MistralSettings, get_settings
from rxreader.domain.errors import (
    ConfigurationError,
    InferenceError,
    RateLimitedError,
    RemoteServiceError,
)

SERVICE_NAME = "Mistral"


class MistralVisionService(VisionInferenceService):
    """Mistral AI vision model client. One attempt per call, no retries."""

    def __init__(self, settings: Optional[MistralSettings] = None, client: Optional[Any] = None):
        self._settings = settings or get_settings().mistral
        self._logger = logging.getLogger("rxreader.inference")

        if client is not None:
            self._client = client
        elif self._settings.is_configured:
            self._client = Mistral(api_key=self._settings.api_key.strip())
            self._logger.info(
                f"[InferenceService] Initialized Mistral client (model={self._settings.vision_model})"
            )
        else:
            self._logger.warning(
                "[InferenceService] MISTRAL_API_KEY not set - prescription analysis will be disabled"
            )
            self._client = None

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def invoke(self, prompt: str, image: EncodedImage) -> str:
        """Send the prompt and image to the vision model and return its text."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": image.data_url},
                ],
            }
        ]
        self._logger.info(
            f"Calling Mistral vision API with model: {self._settings.vision_model} "
            f"(media_type={image.media_type}, payload_chars={len(image.data)})"
        )
        return await self._complete(messages)

    async def check_connection(self) -> str:
        """Text-only round trip used by the API self-test endpoint."""
        return await self._complete([{"role": "user", "content": "Say hello"}])

    async def _complete(self, messages) -> str:
        if self._client is None:
            raise ConfigurationError()

        try:
            response = await self._client.chat.complete_async(
                model=self._settings.vision_model,
                messages=messages,
                max_tokens=self._settings.max_tokens,
                temperature=self._settings.temperature,
            )
        except httpx.HTTPError as e:
            self._logger.error(f"Mistral transport failure: {e}", exc_info=True)
            raise InferenceError(details={"reason": str(e)}) from e
        except Exception as e:
            status_code = getattr(e, "status_code", None)
            self._logger.error(
                f"Mistral API call failed (status={status_code}): {e}", exc_info=True
            )
            if status_code == 429:
                raise RateLimitedError(details={"reason": str(e)}) from e
            raise RemoteServiceError(
                SERVICE_NAME, getattr(e, "message", None) or str(e), status_code
            ) from e

        text = self._response_text(response)
        if not text.strip():
            raise InferenceError(details={"reason": "empty response from vision model"})

        self._logger.info(f"Mistral API response length: {len(text)} characters")
        self._logger.debug(f"Mistral API response: {text[:100]}...")
        return text

    @staticmethod
    def _response_text(response: Any) -> str:
        """Pull the text out of a chat completion, tolerating chunked content."""
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""
        content = choices[0].message.content
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        parts = []
        for chunk in content:
            text = getattr(chunk, "text", None)
            if text is None and isinstance(chunk, dict):
                text = chunk.get("text")
            if text:
                parts.append(text)
        return "".join(parts)
