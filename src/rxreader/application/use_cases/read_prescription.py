"""Read prescription use case.

Runs one uploaded image through the pipeline:
validate -> stage -> encode -> infer -> extract.
Every failure surfaces as a PrescriptionError (or an exception the error
classifier understands); nothing is retried. The staged image is removed
by the store's scope on every exit path, including cancellation.
"""

import asyncio
import logging
from typing import Optional

from rxreader.adapters.storage.transient_store import TransientStore
from rxreader.application.ports.services.inference_service import VisionInferenceService
from rxreader.application.prompts import build_extraction_prompt
from rxreader.application.utils.image_encoding import encode_image
from rxreader.application.utils.response_extractor import extract_prescription
from rxreader.application.utils.upload_gate import UploadCandidate, validate_upload
from rxreader.core.config import Settings
from rxreader.core.utils.timing import StageTimer
from rxreader.domain.entities.prescription import PrescriptionRecord
from rxreader.domain.errors import ConfigurationError, InferenceError

logger = logging.getLogger("rxreader.pipeline")


class ReadPrescriptionUseCase:
    """Extract structured prescription data from one uploaded image."""

    def __init__(
        self,
        inference_service: VisionInferenceService,
        store: TransientStore,
        settings: Settings,
    ):
        self._inference_service = inference_service
        self._store = store
        self._settings = settings

    async def execute(self, candidate: Optional[UploadCandidate]) -> PrescriptionRecord:
        """Execute the read prescription use case."""
        accepted = validate_upload(candidate, self._settings.upload)

        # No staging and no remote call without a credential
        if not self._inference_service.is_configured:
            logger.error("Rejecting prescription read: inference credential not configured")
            raise ConfigurationError()

        async with self._store.stage(accepted) as staged:
            image = encode_image(staged.path, staged.media_type)
            raw_text = await self._infer(build_extraction_prompt(), image, staged.name)

            record = extract_prescription(
                raw_text, strict=self._settings.extraction.strict_medicine_fields
            )
            logger.info(
                f"Prescription {staged.name} analyzed: {record.medicine_count} medicine(s)"
            )
            return record

    async def _infer(self, prompt, image, staged_name: str) -> str:
        timeout = self._settings.mistral.timeout_seconds
        with StageTimer(f"vision inference {staged_name}", logger) as timer:
            call = self._inference_service.invoke(prompt, image)
            if timeout is None:
                raw_text = await call
            else:
                try:
                    raw_text = await asyncio.wait_for(call, timeout=timeout)
                except asyncio.TimeoutError as e:
                    raise InferenceError(
                        details={"reason": f"vision call exceeded {timeout}s deadline"}
                    ) from e
            timer.add_metadata("response_chars", len(raw_text))
        return raw_text
