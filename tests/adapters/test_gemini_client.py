"""Unit tests for GeminiImageClient."""

import base64

import pytest
from unittest.mock import patch

from banana_bot.adapters.gemini.client import (
    IMAGE_ONLY,
    TEXT_AND_IMAGE,
    GeminiImageClient,
    build_request,
    parse_response,
)
from banana_bot.domain.errors import GenerationError
from banana_bot.domain.models import InputImage
from banana_bot.ports.outbound import ImageGeneratorPort

PNG = b"\x89PNG\r\n"
PNG_B64 = base64.b64encode(PNG).decode()


def _image_reply(key="inlineData"):
    return {"candidates": [{"content": {"parts": [{key: {"mimeType": "image/png", "data": PNG_B64}}]}}]}


def _text_reply(text="I cannot edit this image.", finish="STOP"):
    return {
        "candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": finish}],
        "modelVersion": "gemini-test",
    }


def _mock_aiohttp_session(responses, bodies):
    """Stand-in for aiohttp.ClientSession; records each posted JSON body."""
    call_idx = 0

    class FakeResponse:
        def __init__(self, status, data):
            self.status = status
            self._data = data

        async def json(self, content_type="application/json"):
            if isinstance(self._data, Exception):
                raise self._data
            return self._data

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    class FakeSession:
        def __init__(self, *args, **kwargs):
            pass

        def post(self, url, **kwargs):
            nonlocal call_idx
            bodies.append((url, kwargs))
            status, data = responses[call_idx]
            call_idx += 1
            return FakeResponse(status, data)

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    return FakeSession


PATCH_TARGET = "banana_bot.adapters.gemini.client.aiohttp.ClientSession"


@pytest.fixture
def client():
    return GeminiImageClient("gkey", model="test-model", api_base="https://gemini.test/v1beta")


@pytest.fixture
def image():
    return InputImage(data=b"raw", mime="image/jpeg", name="cat.jpg")


class TestBuildRequest:
    def test_text_then_images(self, image):
        body = build_request("make it blue", [image, image], IMAGE_ONLY)
        parts = body["contents"][0]["parts"]
        assert parts[0] == {"text": "make it blue"}
        assert len(parts) == 3
        assert parts[1]["inline_data"]["mime_type"] == "image/jpeg"
        assert base64.b64decode(parts[1]["inline_data"]["data"]) == b"raw"
        assert body["generationConfig"]["responseModalities"] == ["IMAGE"]


class TestParseResponse:
    def test_camel_case_image(self):
        data, info = parse_response(_image_reply("inlineData"))
        assert data == PNG
        assert info["textPreview"] == ""

    def test_snake_case_image(self):
        data, _ = parse_response(_image_reply("inline_data"))
        assert data == PNG

    def test_text_only(self):
        data, info = parse_response(_text_reply())
        assert data is None
        assert info["finishReason"] == "STOP"
        assert info["model"] == "gemini-test"
        assert info["textPreview"] == "I cannot edit this image."

    def test_blocked_prompt(self):
        data, info = parse_response({"promptFeedback": {"blockReason": "SAFETY"}})
        assert data is None
        assert info["blockReason"] == "SAFETY"
        assert info["finishReason"] is None

    def test_empty(self):
        assert parse_response({}) == (None, {
            "finishReason": None, "blockReason": None, "model": None, "textPreview": "",
        })


class TestIsConfigured:
    def test_implements_port(self, client):
        assert isinstance(client, ImageGeneratorPort)

    def test_configured(self, client):
        assert client.is_configured is True

    def test_unconfigured(self):
        assert GeminiImageClient("").is_configured is False

    def test_endpoint(self, client):
        assert client.endpoint == "https://gemini.test/v1beta/models/test-model:generateContent"


class TestTransform:
    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self, client, image):
        bodies = []
        session = _mock_aiohttp_session([(200, _image_reply())], bodies)
        with patch(PATCH_TARGET, session):
            result = await client.transform_image(image, "make it blue")
        assert result == PNG
        assert len(bodies) == 1
        url, kwargs = bodies[0]
        assert url == client.endpoint
        assert kwargs["headers"]["x-goog-api-key"] == "gkey"
        assert kwargs["json"]["generationConfig"]["responseModalities"] == IMAGE_ONLY

    @pytest.mark.asyncio
    async def test_retry_with_text_modality(self, client, image):
        bodies = []
        session = _mock_aiohttp_session([(200, _text_reply()), (200, _image_reply())], bodies)
        with patch(PATCH_TARGET, session):
            result = await client.transform_image(image, "make it blue")
        assert result == PNG
        assert len(bodies) == 2
        assert bodies[1][1]["json"]["generationConfig"]["responseModalities"] == TEXT_AND_IMAGE

    @pytest.mark.asyncio
    async def test_retries_exactly_once(self, client, image):
        bodies = []
        session = _mock_aiohttp_session([
            (200, _text_reply()),
            (200, _text_reply("still text", finish="OTHER")),
            (200, _image_reply()),
        ], bodies)
        with patch(PATCH_TARGET, session):
            with pytest.raises(GenerationError) as exc:
                await client.transform_image(image, "make it blue", trace_id="gmi-1")
        assert len(bodies) == 2
        diag = exc.value.diagnostics()
        assert diag["httpStatus"] == 200
        assert diag["finishReason"] == "OTHER"
        assert diag["blockReason"] == "n/a"
        assert diag["textPreview"] == "still text"
        assert diag["traceId"] == "gmi-1"

    @pytest.mark.asyncio
    async def test_http_error_body(self, client, image):
        bodies = []
        session = _mock_aiohttp_session([
            (500, {"error": {"message": "internal"}}),
            (500, ValueError("not json")),
        ], bodies)
        with patch(PATCH_TARGET, session):
            with pytest.raises(GenerationError) as exc:
                await client.transform_image(image, "p")
        assert exc.value.status == 500
        assert "http=500" in str(exc.value)

    @pytest.mark.asyncio
    async def test_combined_sends_all_images(self, client, image):
        bodies = []
        other = InputImage(data=b"other", mime="image/png", name="b.png")
        session = _mock_aiohttp_session([(200, _image_reply())], bodies)
        with patch(PATCH_TARGET, session):
            await client.transform_images([image, other], "merge")
        parts = bodies[0][1]["json"]["contents"][0]["parts"]
        assert [p.get("text") for p in parts[:1]] == ["merge"]
        assert len(parts) == 3

    @pytest.mark.asyncio
    async def test_text_only_generation_no_retry(self, client):
        bodies = []
        session = _mock_aiohttp_session([(200, _text_reply()), (200, _image_reply())], bodies)
        with patch(PATCH_TARGET, session):
            with pytest.raises(GenerationError):
                await client.generate_image("a banana")
        assert len(bodies) == 1
