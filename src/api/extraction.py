"""
API Router — Transcription & Extraction Endpoints.

Audio -> transcript (hosted Whisper) and transcript -> structured
inspection report (hosted LLM with heuristic fallback).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, File, HTTPException, UploadFile

from src.config import get_settings
from src.logging_config import get_logger
from src.schemas.inspection import ExtractRequest
from src.services.inspection_extraction import extract_inspection
from src.services.transcription import TranscriptionError, transcribe_audio

logger = get_logger(__name__)
router = APIRouter(tags=["Extraction"])


@router.post("/transcribe")
async def transcribe(file: UploadFile | None = File(default=None)) -> dict[str, Any]:
    """Transcribe an uploaded inspection recording."""
    if file is None:
        raise HTTPException(status_code=400, detail="missing_file")

    content = await file.read()
    if len(content) > get_settings().max_upload_bytes:
        raise HTTPException(status_code=413, detail="file_too_large")

    try:
        transcript = await transcribe_audio(
            content,
            filename=file.filename,
            content_type=file.content_type,
        )
    except TranscriptionError as e:
        logger.error("transcribe_error", error=str(e))
        raise HTTPException(status_code=500, detail="transcription_failed")

    return {"transcriptText": transcript}


@router.post("/extract")
async def extract(body: ExtractRequest) -> dict[str, Any]:
    """Extract a structured per-frame report from a transcript."""
    result = await extract_inspection(body.transcript_text, frame_count=body.frame_count)
    return result.model_dump(exclude_none=True)
