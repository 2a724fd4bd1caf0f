from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.uploads import MAX_UPLOAD_BYTES
from pipeline.extract import PARSING_ERROR


class FakeClient:
    """Stands in for the Gemini client; records what it was sent."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.payloads = []
        self.seen_files = []

    def generate(self, payload):
        self.payloads.append(payload)
        self.seen_files.extend(os.listdir(self.upload_dir))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


def client_for(fake, upload_dir):
    fake.upload_dir = str(upload_dir)
    return TestClient(create_app(fake, upload_dir=str(upload_dir)))


def post_image(http, data=b"\xff\xd8\xff fake jpeg", filename="leaf.jpg", content_type="image/jpeg"):
    return http.post("/api/diagnose-pest", files={"image": (filename, data, content_type)})


def test_health(upload_dir):
    http = client_for(FakeClient(), upload_dir)
    response = http.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "Pest diagnosis API is running"}


def test_diagnosis_success(upload_dir):
    fake = FakeClient(reply='Sure!\n```json\n{"diagnosis": {"hasPests": true}, "notes": "aphids"}\n```')
    http = client_for(fake, upload_dir)

    response = post_image(http)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"diagnosis": {"hasPests": True}, "notes": "aphids"},
    }
    assert fake.payloads[0].mime_type == "image/jpeg"
    assert '"prevention"' in fake.payloads[0].prompt


def test_unparsable_reply_is_still_success(upload_dir):
    reply = "The leaves look healthy, no pests visible."
    http = client_for(FakeClient(reply=reply), upload_dir)

    response = post_image(http)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"rawResponse": reply, "parsingError": PARSING_ERROR},
    }


def test_non_image_upload_is_rejected(upload_dir):
    fake = FakeClient(reply="{}")
    http = client_for(fake, upload_dir)

    response = post_image(http, data=b"just text", filename="notes.txt", content_type="text/plain")

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No image uploaded"}
    assert fake.payloads == []


def test_oversized_upload_is_rejected_with_same_message(upload_dir):
    # Size and type violations are indistinguishable to the caller.
    fake = FakeClient(reply="{}")
    http = client_for(fake, upload_dir)

    response = post_image(http, data=b"\x00" * (MAX_UPLOAD_BYTES + 1))

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No image uploaded"}
    assert fake.payloads == []
    assert os.listdir(upload_dir) == []


def test_missing_image_field(upload_dir):
    http = client_for(FakeClient(), upload_dir)
    response = http.post("/api/diagnose-pest", data={"note": "forgot the file"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No image uploaded"}


def test_text_value_in_image_field(upload_dir):
    fake = FakeClient(reply="{}")
    http = client_for(fake, upload_dir)

    response = http.post("/api/diagnose-pest", data={"image": "not a file"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "No image uploaded"}
    assert fake.payloads == []


def test_nan_in_reply_falls_back_to_raw_response(upload_dir):
    reply = "```json\n{\"severity\": NaN}\n```"
    http = client_for(FakeClient(reply=reply), upload_dir)

    response = post_image(http)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"rawResponse": reply, "parsingError": PARSING_ERROR},
    }


def test_storage_failure_is_reported_as_500(upload_dir, monkeypatch):
    def no_space(*args, **kwargs):
        raise OSError(28, "No space left on device")

    fake = FakeClient(reply="{}")
    http = client_for(fake, upload_dir)
    monkeypatch.setattr("api.uploads.open", no_space, raising=False)

    response = post_image(http)

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Failed to analyze image"
    assert "No space left on device" in body["message"]
    assert fake.payloads == []


def test_upstream_failure_passes_message_through(upload_dir):
    fake = FakeClient(error=PermissionError("API key not valid. Please pass a valid API key."))
    http = client_for(fake, upload_dir)

    response = post_image(http)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to analyze image",
        "message": "API key not valid. Please pass a valid API key.",
    }


@pytest.mark.parametrize(
    "fake",
    [
        FakeClient(reply='{"notes": "fine"}'),
        FakeClient(reply="not json"),
        FakeClient(error=ConnectionError("network unreachable")),
    ],
)
def test_upload_removed_after_request(fake, upload_dir):
    http = client_for(fake, upload_dir)

    post_image(http, filename="leaf.png", content_type="image/png")

    assert len(fake.seen_files) == 1
    assert fake.seen_files[0].endswith(".png")
    assert os.listdir(upload_dir) == []
