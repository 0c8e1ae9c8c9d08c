import asyncio

import httpx
import pytest

from src.services import transcription
from src.services.transcription import TranscriptionError, transcribe_audio


@pytest.fixture
def whisper(monkeypatch):
    monkeypatch.setattr(transcription.settings, "openai_api_key", "sk-test")
    real_client = httpx.AsyncClient

    def install(handler):
        monkeypatch.setattr(
            transcription.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

    return install


def test_transcript_text_is_returned(whisper):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(200, json={"text": "Frame 1 is full of honey."})

    whisper(handler)

    text = asyncio.run(transcribe_audio(b"\x00\x01audio", filename="hive.m4a", content_type="audio/mp4"))

    assert text == "Frame 1 is full of honey."
    assert seen["path"].endswith("/audio/transcriptions")
    assert b"whisper-1" in seen["body"]
    assert b"hive.m4a" in seen["body"]


def test_missing_text_is_empty_transcript(whisper):
    whisper(lambda request: httpx.Response(200, json={}))

    assert asyncio.run(transcribe_audio(b"audio")) == ""


def test_upstream_error_raises(whisper):
    whisper(lambda request: httpx.Response(500, text="upstream broke"))

    with pytest.raises(TranscriptionError):
        asyncio.run(transcribe_audio(b"audio"))


def test_missing_api_key_raises(monkeypatch):
    monkeypatch.setattr(transcription.settings, "openai_api_key", "")

    with pytest.raises(TranscriptionError):
        asyncio.run(transcribe_audio(b"audio"))
