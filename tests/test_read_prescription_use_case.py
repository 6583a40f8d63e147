"""
Read prescription use case tests: ordering, cleanup and deadlines.
"""

import asyncio

import pytest

from conftest import BytesSource, FakeVisionService, jpeg_bytes, staged_files
from rxreader.adapters.storage.transient_store import TransientStore
from rxreader.application.use_cases.read_prescription import ReadPrescriptionUseCase
from rxreader.application.utils.upload_gate import UploadCandidate
from rxreader.domain.errors import (
    ConfigurationError,
    InferenceError,
    InvalidInputError,
    ParseError,
)


def _candidate(content=None, media_type="image/jpeg"):
    content = jpeg_bytes(1024) if content is None else content
    return UploadCandidate(
        filename="rx.jpg", media_type=media_type, size=len(content), source=BytesSource(content)
    )


def _use_case(settings, service):
    return ReadPrescriptionUseCase(service, TransientStore(settings.upload), settings)


@pytest.mark.asyncio
async def test_success_returns_record_and_cleans_up(settings_env, fake_service, staging_dir):
    record = await _use_case(settings_env, fake_service).execute(_candidate())

    assert record.medicine_count == 1
    assert len(fake_service.calls) == 1
    assert len(fake_service.staged_files_seen[0]) == 1
    assert staged_files(staging_dir) == []


@pytest.mark.asyncio
async def test_gate_runs_before_anything_else(settings_env, fake_service, staging_dir):
    with pytest.raises(InvalidInputError):
        await _use_case(settings_env, fake_service).execute(_candidate(media_type="application/pdf"))
    assert fake_service.calls == []
    assert not staging_dir.exists()


@pytest.mark.asyncio
async def test_missing_credential_stages_nothing(settings_env, staging_dir):
    service = FakeVisionService(configured=False)
    with pytest.raises(ConfigurationError):
        await _use_case(settings_env, service).execute(_candidate())
    assert service.calls == []
    assert staged_files(staging_dir) == []


@pytest.mark.asyncio
async def test_extraction_failure_still_cleans_up(settings_env, staging_dir):
    service = FakeVisionService(reply="I cannot read this image.")
    with pytest.raises(ParseError):
        await _use_case(settings_env, service).execute(_candidate())
    assert staged_files(staging_dir) == []


@pytest.mark.asyncio
async def test_cancelled_request_removes_staged_image(settings_env, fake_service, staging_dir):
    fake_service.block = True
    fake_service.started = asyncio.Event()

    task = asyncio.create_task(_use_case(settings_env, fake_service).execute(_candidate()))
    await fake_service.started.wait()
    assert len(staged_files(staging_dir)) == 1

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert staged_files(staging_dir) == []


@pytest.mark.asyncio
async def test_deadline_turns_into_inference_failure(settings_env, fake_service, staging_dir):
    settings_env.mistral.timeout_seconds = 0.05
    fake_service.block = True

    with pytest.raises(InferenceError) as exc_info:
        await _use_case(settings_env, fake_service).execute(_candidate())
    assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)
    assert staged_files(staging_dir) == []
