import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from ...application.utils.error_classifier import ClassifiedError, classify_error
from ...core.config import get_settings
from ..schemas.common import ApiResponse
from ..schemas.prescription import ErrorResponse

logger = logging.getLogger("rxreader.api")


def ok(request: Request, data: Any = None, message: str = "") -> ApiResponse[Any]:
    req_id = getattr(request.state, "request_id", None)
    return ApiResponse(success=True, message=message, request_id=req_id or "", data=data)


def classified_response(classified: ClassifiedError) -> JSONResponse:
    """Render a classified failure as the error envelope."""
    body = ErrorResponse(message=classified.message, error=classified.diagnostic)
    return JSONResponse(
        status_code=classified.http_status,
        content=body.model_dump(exclude_none=True),
        headers={"X-Error-Kind": classified.kind.value},
    )


def fail(request: Request, exc: BaseException) -> JSONResponse:
    """Classify ``exc`` and render it; diagnostics are hidden in production."""
    include_diagnostic = not get_settings().is_production
    classified = classify_error(exc, include_diagnostic=include_diagnostic)
    req_id = getattr(request.state, "request_id", None)

    if classified.http_status >= 500:
        logger.error(
            f"{classified.kind.value} on {request.method} {request.url.path}: {exc} | request_id={req_id}",
            exc_info=exc,
        )
    else:
        logger.warning(
            f"{classified.kind.value} on {request.method} {request.url.path}: {classified.message} | request_id={req_id}"
        )
    return classified_response(classified)
