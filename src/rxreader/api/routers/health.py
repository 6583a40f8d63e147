"""
Health check endpoints.
"""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...core.utils.file_utils import is_directory_writable
from ..deps import InferenceServiceDep, SettingsDep
from ..schemas.common import ApiResponse
from ..utils.responses import ok

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    ready: bool
    checks: Dict[str, str]


@router.get("", response_model=ApiResponse[HealthResponse])
async def health_check(request: Request, settings: SettingsDep):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    return ok(request, data=HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        service=settings.app_name,
    ), message="OK")


@router.get("/ready", response_model=ApiResponse[ReadinessResponse])
async def readiness_check(request: Request, settings: SettingsDep, inference_service: InferenceServiceDep):
    """
    Readiness check endpoint.

    Ready when the vision API credential is configured and the staging
    directory is writable. Does not call the vision API.
    """
    checks = {
        "inference_credential": "ok" if inference_service.is_configured else "missing",
        "staging_dir": "ok" if is_directory_writable(settings.upload.staging_dir) else "not writable",
    }
    ready = all(value == "ok" for value in checks.values())
    body = ok(request, data=ReadinessResponse(ready=ready, checks=checks),
              message="Ready" if ready else "Not ready")
    if not ready:
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return body
