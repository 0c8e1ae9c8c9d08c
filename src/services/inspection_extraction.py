"""
Inspection Extraction Service.

Turns a narration transcript into a structured per-frame inspection report
using a hosted LLM with JSON output. The LLM document is validated against
the ``ExtractionResult`` schema; if the call fails for any reason the
heuristic regex extractor is used instead, so callers always get a report.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from src.config import get_settings
from src.logging_config import get_logger
from src.schemas.extraction import ExtractionResult
from src.services import heuristic_extractor

settings = get_settings()
logger = get_logger(__name__)


class ExtractionError(Exception):
    """The hosted extraction call failed or returned an unusable document."""


# System prompt sent with every extraction request.
EXTRACTION_PROMPT = """Return ONLY valid JSON.

Goal: extract a beekeeping inspection into frames with inside/outside structure.

JSON shape:
{
  "frames": [
    {
      "frame_number": number,
      "outside"?: { "empty"?: boolean, "comb_built_pct"?: number, "honey_pct"?: number, "honey_capped_pct"?: number, "brood_pct"?: number, "pollen_pct"?: number, "eggs"?: boolean, "larvae"?: boolean, "notes"?: string },
      "inside"?: { same fields as outside },
      "notes"?: string
    }
  ],
  "totals": {
    "frames_reported": number,
    "honey_equiv_frames"?: number,
    "brood_equiv_frames"?: number,
    "pollen_equiv_frames"?: number
  },
  "queen"?: { "mentioned": boolean, "eoq"?: boolean, "status_note"?: string },
  "questions": string[]
}

Interpretation rules:
- A frame must be explicitly mentioned: "Frame 3" / "Frame number 3".
- "on the outside" -> outside, "on the inside" -> inside.
- "empty" -> empty:true
- "fully capped"/"fully kept"/"capped"/"kept" -> honey_capped_pct:100 (if honey present)
- "not capped"/"unkept"/"not kept" -> honey_capped_pct:0 or omit
- Convert "half" => 50.
- Percentages are 0..100.

Totals:
- frames_reported = number of frames emitted.
- honey_equiv_frames = sum of honey_pct across all sides / 200.
  (two sides = one full frame). Same for brood/pollen.

Questions:
- If queen/EOQ not mentioned, ask: "{queen_question}"
""".replace("{queen_question}", heuristic_extractor.QUEEN_QUESTION)


USER_PROMPT = """Frame count (if known): {frame_count}

Transcript:
{transcript}
"""


async def extract_inspection(
    transcript_text: str,
    frame_count: Optional[int] = None,
) -> ExtractionResult:
    """
    Extract a structured inspection report from a transcript.

    Args:
        transcript_text: Full narration text.
        frame_count: Number of frames in the hive, if known (prompt hint only).

    Returns:
        The validated LLM report, or the heuristic report if the LLM path
        is unavailable or produced an invalid document.
    """
    logger.info(
        "extraction_started",
        transcript_length=len(transcript_text),
        frame_count=frame_count,
    )

    try:
        result = await _call_llm_for_extraction(transcript_text, frame_count)
    except (ExtractionError, httpx.HTTPError) as e:
        logger.warning("llm_extract_failed_using_fallback", error=str(e))
        result = heuristic_extractor.extract(transcript_text)
        logger.info("fallback_extract_complete", frames=len(result.frames))
        return result

    logger.info("llm_extract_complete", frames=len(result.frames))
    return result


async def _call_llm_for_extraction(
    transcript_text: str,
    frame_count: Optional[int],
) -> ExtractionResult:
    """Call the OpenAI Responses API in JSON mode and validate the reply."""
    if not settings.openai_api_key:
        raise ExtractionError("OPENAI_API_KEY is not set")

    user = USER_PROMPT.format(
        frame_count=frame_count if frame_count is not None else "unknown",
        transcript=transcript_text,
    )

    async with httpx.AsyncClient(timeout=settings.llm_timeout_seconds) as client:
        response = await client.post(
            f"{settings.openai_base_url}/responses",
            headers={
                "Authorization": f"Bearer {settings.openai_api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": settings.extract_model,
                "input": [
                    {"role": "system", "content": EXTRACTION_PROMPT},
                    {"role": "user", "content": user},
                ],
                "text": {"format": {"type": "json_object"}},
            },
        )

    if response.status_code >= 400:
        raise ExtractionError(
            f"LLM extract failed ({response.status_code}): {response.text[:300]}"
        )

    try:
        payload = response.json()
    except ValueError:
        raise ExtractionError("LLM extract returned a non-JSON HTTP body")

    text = response_text(payload)
    if not text:
        raise ExtractionError("LLM extract returned empty text")

    return parse_extraction_document(text)


def response_text(data: Any) -> str:
    """
    Gather the text content of a Responses API payload.

    Prefers the ``output_text`` convenience field; otherwise concatenates
    every text part found in ``output[].content[]``.
    """
    if not isinstance(data, dict):
        return ""

    output_text = data.get("output_text")
    if isinstance(output_text, str) and output_text.strip():
        return output_text

    outputs = data.get("output")
    chunks: list[str] = []
    for item in outputs if isinstance(outputs, list) else []:
        content = item.get("content") if isinstance(item, dict) else None
        for part in content if isinstance(content, list) else []:
            if not isinstance(part, dict):
                continue
            for key in ("text", "content"):
                value = part.get(key)
                if isinstance(value, str) and value.strip():
                    chunks.append(value)

    return "\n".join(chunks).strip()


def parse_extraction_document(text: str) -> ExtractionResult:
    """Parse and validate the LLM's JSON text."""
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        raise ExtractionError(f"LLM extract returned non-JSON text: {text[:300]}")

    try:
        return ExtractionResult.model_validate(parsed)
    except ValidationError as e:
        raise ExtractionError(f"LLM JSON failed validation: {e}")
