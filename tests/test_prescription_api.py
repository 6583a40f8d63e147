"""
End-to-end tests for POST /api/read-prescription and GET /api/test-api.
"""

import pytest

from conftest import jpeg_bytes, png_bytes, staged_files
from rxreader.core.config import reset_settings
from rxreader.domain.errors import (
    MSG_INVALID_TYPE,
    MSG_MISSING_CREDENTIAL,
    MSG_NO_FILE,
    MSG_PARSE,
    MSG_RATE_LIMITED,
    MSG_SCHEMA,
    RemoteServiceError,
)

MiB = 1024 * 1024
URL = "/api/read-prescription"


def _upload(content, filename="rx.jpg", media_type="image/jpeg"):
    return {"prescription": (filename, content, media_type)}


def test_fenced_reply_is_returned_verbatim(client, fake_service, staging_dir):
    response = client.post(URL, files=_upload(jpeg_bytes(2 * MiB)))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Prescription analyzed successfully"
    assert body["data"] == {
        "medicines": [
            {
                "name": "Amoxicillin",
                "dosage": "500mg",
                "frequency": "Twice daily",
                "duration": "7 days",
                "instructions": "After meals",
            }
        ],
        "doctorName": "Dr. Rao",
        "patientName": "J. Doe",
        "date": "2024-03-01",
    }
    assert len(fake_service.calls) == 1
    assert fake_service.calls[0].media_type == "image/jpeg"
    assert len(fake_service.staged_files_seen[0]) == 1
    assert staged_files(staging_dir) == []


def test_pdf_upload_is_rejected(client, fake_service, staging_dir):
    response = client.post(URL, files=_upload(b"%PDF-1.4", filename="rx.pdf", media_type="application/pdf"))

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["message"] == MSG_INVALID_TYPE
    assert response.headers["X-Error-Kind"] == "INVALID_INPUT"
    assert fake_service.calls == []
    assert staged_files(staging_dir) == []


def test_oversized_png_is_rejected(client, fake_service, staging_dir):
    response = client.post(URL, files=_upload(png_bytes(12 * MiB), filename="rx.png", media_type="image/png"))

    assert response.status_code == 400
    assert "File too large" in response.json()["message"]
    assert fake_service.calls == []
    assert staged_files(staging_dir) == []


def test_prose_reply_is_parse_failure(client, fake_service, staging_dir):
    fake_service.reply = "I'm sorry, I cannot read this prescription clearly."
    response = client.post(URL, files=_upload(jpeg_bytes(4096)))

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == MSG_PARSE
    assert body["error"] == "No valid JSON found in response"
    assert staged_files(staging_dir) == []


def test_reply_without_medicines_is_schema_violation(client, fake_service, staging_dir):
    fake_service.reply = '{"doctorName":"Dr. X"}'
    response = client.post(URL, files=_upload(jpeg_bytes(4096)))

    assert response.status_code == 500
    assert response.json()["message"] == MSG_SCHEMA
    assert response.headers["X-Error-Kind"] == "SCHEMA_VIOLATION"
    assert staged_files(staging_dir) == []


def test_provider_rate_limit_is_429(client, fake_service, staging_dir):
    fake_service.reply = RemoteServiceError("Mistral", "Requests rate limit exceeded", 429)
    response = client.post(URL, files=_upload(jpeg_bytes(4096)))

    assert response.status_code == 429
    assert response.json()["message"] == MSG_RATE_LIMITED
    assert staged_files(staging_dir) == []


@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_reply_with_non_json_constant_is_parse_failure(client, fake_service, staging_dir, constant):
    fake_service.reply = '{"medicines":[{"name":"A","dosage":%s}],"date":"x"}' % constant
    response = client.post(URL, files=_upload(jpeg_bytes(4096)))

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["message"] == MSG_PARSE
    assert "data" not in body
    assert staged_files(staging_dir) == []


def test_missing_file(client, fake_service):
    response = client.post(URL)
    assert response.status_code == 400
    assert response.json()["message"] == MSG_NO_FILE
    assert fake_service.calls == []


def test_missing_credential(client, fake_service, staging_dir):
    fake_service.configured = False
    response = client.post(URL, files=_upload(jpeg_bytes(4096)))

    assert response.status_code == 500
    assert response.json()["message"] == MSG_MISSING_CREDENTIAL
    assert fake_service.calls == []
    assert staged_files(staging_dir) == []


def test_unexpected_failure_is_inference_failure(client, fake_service, staging_dir):
    fake_service.reply = RuntimeError("socket closed")
    response = client.post(URL, files=_upload(jpeg_bytes(4096)))

    assert response.status_code == 500
    assert response.json()["message"] == "Failed to analyze prescription"
    assert response.json()["error"] == "RuntimeError: socket closed"
    assert staged_files(staging_dir) == []


def test_production_hides_diagnostics(client, fake_service, monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    reset_settings()
    fake_service.reply = "no json here"

    response = client.post(URL, files=_upload(jpeg_bytes(4096)))

    assert response.status_code == 500
    assert "error" not in response.json()


def test_consecutive_requests_are_independent(client, fake_service, staging_dir):
    first = client.post(URL, files=_upload(jpeg_bytes(1024)))
    fake_service.reply = '{"medicines": []}'
    second = client.post(URL, files=_upload(jpeg_bytes(1024)))

    assert first.json()["data"]["medicines"][0]["name"] == "Amoxicillin"
    assert second.json()["data"] == {"medicines": []}
    assert staged_files(staging_dir) == []


def test_api_self_test(client):
    response = client.get("/api/test-api")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "API key is working", "response": "Hello!"}


@pytest.mark.parametrize(
    "status_code, expected",
    [(429, 429), (401, 500)],
)
def test_api_self_test_failures(client, fake_service, status_code, expected):
    fake_service.reply = RemoteServiceError("Mistral", "rejected", status_code)
    response = client.get("/api/test-api")
    assert response.status_code == expected
    assert response.json()["success"] is False


def test_api_self_test_without_credential(client, fake_service):
    fake_service.configured = False
    response = client.get("/api/test-api")
    assert response.status_code == 500
    assert response.json()["message"] == "Mistral API key not configured"
