"""
Shared fixtures: isolated settings, a scripted vision service and an API client.
"""

import asyncio
import os
from typing import List, Optional, Union

import pytest
from fastapi.testclient import TestClient

from rxreader.api.deps import clear_dependency_caches, get_inference_service
from rxreader.application.ports.services.inference_service import VisionInferenceService
from rxreader.application.utils.image_encoding import EncodedImage
from rxreader.core.config import get_settings, reset_settings

AMOXICILLIN_REPLY = (
    "```json\n"
    '{"medicines":[{"name":"Amoxicillin","dosage":"500mg","frequency":"Twice daily",'
    '"duration":"7 days","instructions":"After meals"}],'
    '"doctorName":"Dr. Rao","patientName":"J. Doe","date":"2024-03-01"}'
    "\n```"
)


class FakeVisionService(VisionInferenceService):
    """Scripted stand-in for the remote vision model."""

    def __init__(self, reply: Union[str, BaseException] = AMOXICILLIN_REPLY, configured: bool = True):
        self.reply = reply
        self.configured = configured
        self.calls: List[EncodedImage] = []
        self.staged_files_seen: List[List[str]] = []
        self.staging_dir: Optional[str] = None
        self.block = False
        self.started: Optional[asyncio.Event] = None

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def invoke(self, prompt: str, image: EncodedImage) -> str:
        self.calls.append(image)
        if self.staging_dir is not None:
            self.staged_files_seen.append(sorted(os.listdir(self.staging_dir)))
        if self.started is not None:
            self.started.set()
        if self.block:
            await asyncio.sleep(3600)
        if isinstance(self.reply, BaseException):
            raise self.reply
        return self.reply

    async def check_connection(self) -> str:
        if isinstance(self.reply, BaseException):
            raise self.reply
        return "Hello!"


class BytesSource:
    """Minimal async upload body."""

    def __init__(self, content: bytes):
        self._content = content

    async def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return self._content
        return self._content[:size]


def jpeg_bytes(size: int) -> bytes:
    header = b"\xff\xd8\xff\xe0"
    return header + b"\x00" * max(size - len(header), 0)


def png_bytes(size: int) -> bytes:
    header = b"\x89PNG\r\n\x1a\n"
    return header + b"\x00" * max(size - len(header), 0)


@pytest.fixture
def staging_dir(tmp_path):
    return tmp_path / "staging"


@pytest.fixture
def settings_env(monkeypatch, staging_dir):
    """Point settings at a temp staging dir with a dummy credential."""
    monkeypatch.setenv("APP_ENV", "testing")
    monkeypatch.setenv("MISTRAL_API_KEY", "test-key")
    monkeypatch.setenv("UPLOAD_STAGING_DIR", str(staging_dir))
    monkeypatch.setenv("LOG_FORMAT", "text")
    monkeypatch.delenv("MISTRAL_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("EXTRACTION_STRICT_MEDICINE_FIELDS", raising=False)
    reset_settings()
    clear_dependency_caches()
    yield get_settings()
    reset_settings()
    clear_dependency_caches()


@pytest.fixture
def fake_service(staging_dir):
    service = FakeVisionService()
    service.staging_dir = str(staging_dir)
    return service


@pytest.fixture
def client(settings_env, fake_service):
    """Test client with the vision service replaced by ``fake_service``."""
    from rxreader.app import app

    app.dependency_overrides[get_inference_service] = lambda: fake_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def staged_files(staging_dir) -> List[str]:
    if not os.path.isdir(staging_dir):
        return []
    return os.listdir(staging_dir)
