"""
Transcription Service.

Sends inspection audio to the hosted Whisper speech-to-text endpoint and
returns the plain transcript. No local ASR happens here.
"""

from __future__ import annotations

import httpx

from src.config import get_settings
from src.logging_config import get_logger

settings = get_settings()
logger = get_logger(__name__)


class TranscriptionError(Exception):
    """Speech-to-text could not produce a transcript."""


async def transcribe_audio(
    content: bytes,
    filename: str | None = None,
    content_type: str | None = None,
) -> str:
    """
    Transcribe an audio recording.

    Args:
        content: Raw audio bytes (m4a, mp3, webm, wav...).
        filename: Original upload name; the provider sniffs format from it.
        content_type: Upload MIME type.

    Returns:
        The transcript text, or an empty string if the provider returned none.

    Raises:
        TranscriptionError: API key missing or the provider call failed.
    """
    if not settings.openai_api_key:
        raise TranscriptionError("OPENAI_API_KEY is not set")

    logger.info("transcription_started", bytes=len(content), content_type=content_type)

    files = {
        "file": (
            filename or "inspection.m4a",
            content,
            content_type or "application/octet-stream",
        )
    }

    try:
        async with httpx.AsyncClient(timeout=settings.llm_timeout_seconds) as client:
            response = await client.post(
                f"{settings.openai_base_url}/audio/transcriptions",
                headers={"Authorization": f"Bearer {settings.openai_api_key}"},
                data={"model": settings.transcription_model},
                files=files,
            )
            response.raise_for_status()
            data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(
            "transcription_failed",
            status=e.response.status_code,
            details=e.response.text[:300],
        )
        raise TranscriptionError(e.response.text or str(e)) from e
    except (httpx.HTTPError, ValueError) as e:
        logger.error("transcription_failed", error=str(e))
        raise TranscriptionError(str(e)) from e

    text = data.get("text") if isinstance(data, dict) else None
    transcript = text if isinstance(text, str) else ""
    logger.info("transcription_complete", transcript_length=len(transcript))
    return transcript
