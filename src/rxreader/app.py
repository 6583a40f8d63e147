"""
FastAPI application factory and main app configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routers import health, prescriptions
from .api.schemas.prescription import ErrorResponse
from .api.utils.responses import classified_response, fail
from .application.utils.error_classifier import ClassifiedError
from .core.config import get_settings
from .core.structured_logger import configure_logging
from .core.utils.file_utils import create_directory
from .domain.enums.error_kind import ErrorKind
from .domain.errors import PrescriptionError, RemoteServiceError
from .middleware.request_context_middleware import RequestContextMiddleware

logger = logging.getLogger("rxreader")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"🚀 Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"📊 Environment: {settings.app_env}")

    try:
        create_directory(settings.upload.staging_dir)
        logger.info(f"✅ Staging directory ready: {settings.upload.staging_dir}")
    except OSError as e:
        # Requests will fail with a storage error until this is fixed
        logger.error(f"❌ Staging directory unavailable: {settings.upload.staging_dir} ({e})")

    if settings.mistral.is_configured:
        logger.info(f"✅ Vision model configured: {settings.mistral.vision_model}")
    else:
        logger.warning("⚠️  MISTRAL_API_KEY not set - prescription reads will fail with a configuration error")

    yield

    logger.info(f"🛑 Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    configure_logging(settings.logging)

    app = FastAPI(
        title=settings.app_name,
        description="Structured data extraction from prescription images",
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.allowed_origins,
        allow_credentials=False,
        allow_methods=settings.cors.allowed_methods,
        allow_headers=settings.cors.allowed_headers,
        expose_headers=["X-Request-ID", "X-Process-Time", "X-Error-Kind"],
        max_age=600,
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health.router)
    app.include_router(prescriptions.router)

    @app.exception_handler(PrescriptionError)
    async def prescription_error_handler(request: Request, exc: PrescriptionError):
        return fail(request, exc)

    @app.exception_handler(RemoteServiceError)
    async def remote_service_error_handler(request: Request, exc: RemoteServiceError):
        return fail(request, exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        req_id = getattr(request.state, "request_id", None)
        error_messages = []
        for error in exc.errors():
            loc = " -> ".join(str(x) for x in error.get("loc", []))
            error_messages.append(f"{loc}: {error.get('msg', 'Validation error')}")
        logger.warning(
            f"ValidationError on {request.method} {request.url.path}: {error_messages} | request_id={req_id}"
        )
        diagnostic = None if get_settings().is_production else "; ".join(error_messages)
        return classified_response(
            ClassifiedError(ErrorKind.INVALID_INPUT, "Invalid request. Please upload a prescription image.", diagnostic)
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        req_id = getattr(request.state, "request_id", None)
        logger.error(f"Unhandled error: {type(exc).__name__} | request_id={req_id}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                message="An unexpected error has occurred. Please try again later.",
            ).model_dump(exclude_none=True),
        )

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with API information."""
        current = get_settings()
        return {
            "service": current.app_name,
            "version": current.app_version,
            "environment": current.app_env,
            "status": "running",
            "docs": "/docs",
            "endpoints": {
                "health": "GET /health",
                "ready": "GET /health/ready",
                "read_prescription": "POST /api/read-prescription",
                "test_api": "GET /api/test-api",
            },
        }

    return app


# Create the app instance
app = create_app()
