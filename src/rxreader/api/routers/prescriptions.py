"""
Prescription-related API endpoints for image upload and analysis.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Request, UploadFile, status

from ...application.utils.upload_gate import UploadCandidate
from ...domain.errors import ConfigurationError
from ..deps import InferenceServiceDep, ReadPrescriptionUseCaseDep
from ..schemas.prescription import (
    SUCCESS_MESSAGE,
    ApiTestResponse,
    ErrorResponse,
    PrescriptionAnalysisResponse,
)
from ..utils.responses import fail

router = APIRouter(prefix="/api", tags=["Prescriptions"])
logger = logging.getLogger("rxreader.api")


def candidate_from_upload(upload: Optional[UploadFile]) -> Optional[UploadCandidate]:
    """Describe an UploadFile for the upload gate without reading its body."""
    if upload is None:
        return None

    file_size = upload.size
    if file_size is None:
        upload.file.seek(0, 2)  # Seek to end
        file_size = upload.file.tell()
        upload.file.seek(0)  # Reset to beginning

    return UploadCandidate(
        filename=upload.filename,
        media_type=upload.content_type,
        size=file_size,
        source=upload,
    )


@router.post(
    "/read-prescription",
    response_model=PrescriptionAnalysisResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"model": ErrorResponse, "description": "Missing, unsupported or oversized image"},
        429: {"model": ErrorResponse, "description": "Vision API quota exceeded"},
        500: {"model": ErrorResponse, "description": "Configuration, storage, inference or parsing failure"},
    },
)
async def read_prescription(
    request: Request,
    use_case: ReadPrescriptionUseCaseDep,
    prescription: Optional[UploadFile] = File(None, description="Prescription image to analyze"),
):
    """
    Upload and analyze a prescription image.

    This endpoint:
    1. Validates the image type and size
    2. Stages the image for the duration of the request
    3. Asks the vision model to read it
    4. Extracts the JSON answer into medicines, doctor, patient and date

    **Supported image formats:** JPEG, PNG, GIF, WebP
    **Maximum file size:** 10MB
    """
    try:
        logger.info(
            f"Processing prescription upload: "
            f"{prescription.filename if prescription is not None else 'no file'}"
        )
        record = await use_case.execute(candidate_from_upload(prescription))
        return PrescriptionAnalysisResponse(message=SUCCESS_MESSAGE, data=record.to_dict())
    except Exception as exc:
        return fail(request, exc)
    finally:
        if prescription is not None:
            await prescription.close()


@router.get(
    "/test-api",
    response_model=ApiTestResponse,
    responses={
        429: {"model": ErrorResponse, "description": "Vision API quota exceeded"},
        500: {"model": ErrorResponse, "description": "Credential missing or rejected"},
    },
)
async def test_api(request: Request, inference_service: InferenceServiceDep):
    """Verify the configured vision API credential with a trivial request."""
    try:
        if not inference_service.is_configured:
            raise ConfigurationError("Mistral API key not configured")
        text = await inference_service.check_connection()
        return ApiTestResponse(message="API key is working", response=text)
    except Exception as exc:
        return fail(request, exc)
