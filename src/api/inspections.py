"""
API Router — Inspection Endpoints.

Saves inspections with their extraction document stored verbatim, and
serves them back either raw or as a normalized frame report.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, HTTPException

from src.db import get_db
from src.logging_config import bind_record, get_logger
from src.schemas.inspection import InspectionCreate
from src.services.inspection_report import build_report

logger = get_logger(__name__)
router = APIRouter(prefix="/inspections", tags=["Inspections"])


def _document_for_storage(extract: Any) -> Any:
    """Objects are stored as-is, JSON strings are parsed, anything else is ``{}``."""
    if isinstance(extract, (dict, list)):
        return extract
    if isinstance(extract, str):
        try:
            return json.loads(extract)
        except json.JSONDecodeError:
            return {}
    return {}


def _document_from_storage(value: Any) -> dict[str, Any]:
    """Stored documents always come back as an object."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return {}
    return value if isinstance(value, dict) else {}


def _present(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": row["id"],
        "hiveId": row.get("hive_id"),
        "recordedAtLocal": row.get("recorded_at_local"),
        "status": row.get("status") or "completed",
        "transcriptText": row.get("transcript_text") or "",
        "extract": _document_from_storage(row.get("extract_json")),
        "createdAt": row.get("created_at"),
    }


async def _load(inspection_id: str) -> dict[str, Any]:
    bind_record(inspection_id=inspection_id)
    db = get_db()

    try:
        row = await db.get_inspection(inspection_id)
    except Exception as e:
        logger.error("get_inspection_failed", error=str(e))
        raise HTTPException(status_code=500, detail="get_inspection_failed")

    if not row:
        raise HTTPException(status_code=404, detail="not_found")
    bind_record(hive_id=row.get("hive_id"))
    return row


@router.post("", status_code=201)
async def create_inspection(body: InspectionCreate) -> dict[str, Any]:
    """Persist an inspection and its extraction document."""
    bind_record(hive_id=body.hive_id)
    db = get_db()

    try:
        row = await db.create_inspection(
            hive_id=body.hive_id,
            recorded_at_local=body.recorded_at_local,
            transcript_text=body.transcript_text,
            extract=_document_for_storage(body.extract),
        )
    except Exception as e:
        logger.error("create_inspection_failed", hive_id=body.hive_id, error=str(e))
        raise HTTPException(status_code=500, detail="create_inspection_failed")

    inspection_id = row.get("id") if row else None
    logger.info("inspection_created", inspection_id=inspection_id, hive_id=body.hive_id)
    return {"inspectionId": inspection_id}


@router.get("/{inspection_id}")
async def get_inspection(inspection_id: str) -> dict[str, Any]:
    """Return the stored inspection with its extraction document."""
    row = await _load(inspection_id)
    return {"inspection": _present(row)}


@router.get("/{inspection_id}/report")
async def get_inspection_report(inspection_id: str) -> dict[str, Any]:
    """One canonical row per frame plus honey/brood/pollen equivalent frames."""
    row = await _load(inspection_id)
    report = build_report(_document_from_storage(row.get("extract_json")))

    logger.info(
        "inspection_report_built",
        frames=report.totals.frames_reported,
        honey_equiv_frames=report.totals.honey_equiv_frames,
    )
    return {"inspectionId": row["id"], **report.to_dict()}
