"""
Mistral vision adapter tests with a scripted SDK client.
"""

from types import SimpleNamespace

import httpx
import pytest

from rxreader.adapters.external.inference_service_mistral import MistralVisionService
from rxreader.application.utils.error_classifier import classify_error
from rxreader.application.utils.image_encoding import EncodedImage
from rxreader.core.config import MistralSettings
from rxreader.domain.enums.error_kind import ErrorKind
from rxreader.domain.errors import (
    ConfigurationError,
    InferenceError,
    RateLimitedError,
    RemoteServiceError,
)


class ScriptedChat:
    def __init__(self, outcome):
        self.outcome = outcome
        self.requests = []

    async def complete_async(self, **kwargs):
        self.requests.append(kwargs)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


def _completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _service(outcome, **settings):
    chat = ScriptedChat(outcome)
    service = MistralVisionService(
        MistralSettings(api_key="test-key", **settings), client=SimpleNamespace(chat=chat)
    )
    return service, chat


IMAGE = EncodedImage(data="QUJD", media_type="image/jpeg")


class SDKError(Exception):
    """Shape of the SDK's HTTP errors: message plus status_code."""

    def __init__(self, message, status_code):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@pytest.mark.asyncio
async def test_invoke_sends_prompt_and_image():
    service, chat = _service(_completion('{"medicines": []}'), vision_model="pixtral-large-latest")

    text = await service.invoke("read this", IMAGE)

    assert text == '{"medicines": []}'
    request = chat.requests[0]
    assert request["model"] == "pixtral-large-latest"
    assert request["temperature"] == 0.1
    content = request["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": "read this"}
    assert content[1] == {"type": "image_url", "image_url": "data:image/jpeg;base64,QUJD"}


@pytest.mark.asyncio
async def test_chunked_content_is_joined():
    chunks = [SimpleNamespace(text='{"medi'), {"type": "text", "text": 'cines": []}'}]
    service, _ = _service(_completion(chunks))
    assert await service.invoke("p", IMAGE) == '{"medicines": []}'


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "   "])
async def test_empty_reply_is_inference_failure(content):
    service, _ = _service(_completion(content))
    with pytest.raises(InferenceError):
        await service.invoke("p", IMAGE)


@pytest.mark.asyncio
async def test_provider_status_is_preserved():
    service, _ = _service(SDKError("Invalid model: pixtral-99", 404))

    with pytest.raises(RemoteServiceError) as exc_info:
        await service.invoke("p", IMAGE)
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Invalid model: pixtral-99"
    assert classify_error(exc_info.value).kind is ErrorKind.CONFIGURATION_FAILURE


@pytest.mark.asyncio
async def test_provider_429_is_rate_limited():
    service, _ = _service(SDKError("Requests rate limit exceeded", 429))

    with pytest.raises(RateLimitedError) as exc_info:
        await service.invoke("p", IMAGE)
    assert classify_error(exc_info.value).http_status == 429


@pytest.mark.asyncio
async def test_transport_error_is_inference_failure():
    service, _ = _service(httpx.ConnectError("connection refused"))
    with pytest.raises(InferenceError):
        await service.invoke("p", IMAGE)


@pytest.mark.asyncio
async def test_unconfigured_service_never_calls_out():
    service = MistralVisionService(MistralSettings(api_key="  "))
    assert service.is_configured is False
    with pytest.raises(ConfigurationError):
        await service.invoke("p", IMAGE)


@pytest.mark.asyncio
async def test_check_connection_is_text_only():
    service, chat = _service(_completion("Hello!"))
    assert await service.check_connection() == "Hello!"
    assert chat.requests[0]["messages"] == [{"role": "user", "content": "Say hello"}]
