"""FastAPI dependency providers."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from ..adapters.external.inference_service_mistral import MistralVisionService
from ..adapters.storage.transient_store import TransientStore
from ..application.ports.services.inference_service import VisionInferenceService
from ..application.use_cases.read_prescription import ReadPrescriptionUseCase
from ..core.config import Settings, get_settings


def get_app_settings() -> Settings:
    """Get the current application settings."""
    return get_settings()


@lru_cache()
def get_inference_service() -> VisionInferenceService:
    """Get vision inference service instance (one per process)."""
    return MistralVisionService(get_settings().mistral)


@lru_cache()
def get_transient_store() -> TransientStore:
    """Get transient upload store instance."""
    return TransientStore(get_settings().upload)


def clear_dependency_caches() -> None:
    """Forget cached service instances so they are rebuilt from fresh settings."""
    get_inference_service.cache_clear()
    get_transient_store.cache_clear()


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
InferenceServiceDep = Annotated[VisionInferenceService, Depends(get_inference_service)]
TransientStoreDep = Annotated[TransientStore, Depends(get_transient_store)]


def get_read_prescription_use_case(
    inference_service: InferenceServiceDep,
    store: TransientStoreDep,
    settings: SettingsDep,
) -> ReadPrescriptionUseCase:
    return ReadPrescriptionUseCase(inference_service, store, settings)


ReadPrescriptionUseCaseDep = Annotated[
    ReadPrescriptionUseCase, Depends(get_read_prescription_use_case)
]
