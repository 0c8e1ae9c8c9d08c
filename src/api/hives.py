"""
API Router — Hive Endpoints.

CRUD operations for hives (colonies) and their inspection history.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, HTTPException

from src.db import get_db
from src.logging_config import bind_record, get_logger
from src.schemas.hive import HiveCreate, HiveUpdate

logger = get_logger(__name__)
router = APIRouter(prefix="/hives", tags=["Hives"])

# Columns that may be reset to null through PATCH
CLEARABLE_FIELDS = frozenset({"apiary_name"})


def _require_uuid(hive_id: str) -> str:
    try:
        UUID(hive_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid_id")
    return hive_id


@router.get("")
async def list_hives() -> dict[str, Any]:
    """List all hives, newest first."""
    db = get_db()

    try:
        hives = await db.list_hives()
    except Exception as e:
        logger.error("list_hives_error", error=str(e))
        raise HTTPException(status_code=500, detail="list_hives_failed")

    return {"hives": hives}


@router.post("", status_code=201)
async def create_hive(body: HiveCreate) -> dict[str, Any]:
    """Create a hive. Frame count defaults to a standard 10-frame box."""
    db = get_db()

    hive = await db.create_hive(
        name=body.name,
        apiary_name=body.apiary_name,
        frame_count=body.frame_count,
    )
    if not hive:
        raise HTTPException(status_code=500, detail="create_hive_failed")

    logger.info("hive_created", hive_id=hive.get("id"))
    return {"hive": hive}


@router.patch("/{hive_id}")
async def update_hive(hive_id: str, body: HiveUpdate) -> dict[str, Any]:
    """Update any subset of name, apiary name and frame count."""
    _require_uuid(hive_id)
    bind_record(hive_id=hive_id)

    updates = {
        key: value
        for key, value in body.model_dump(exclude_unset=True).items()
        if value is not None or key in CLEARABLE_FIELDS
    }
    if not updates:
        raise HTTPException(status_code=400, detail="no_fields_to_update")

    db = get_db()
    hive = await db.update_hive(hive_id, updates)
    if not hive:
        raise HTTPException(status_code=404, detail="not_found")

    logger.info("hive_updated", hive_id=hive_id, fields=sorted(updates))
    return {"hive": hive}


@router.delete("/{hive_id}")
async def delete_hive(hive_id: str) -> dict[str, Any]:
    """Delete a hive."""
    _require_uuid(hive_id)
    bind_record(hive_id=hive_id)

    db = get_db()
    if not await db.delete_hive(hive_id):
        raise HTTPException(status_code=404, detail="not_found")

    logger.info("hive_deleted", hive_id=hive_id)
    return {"deleted": True}


@router.get("/{hive_id}/inspections")
async def list_hive_inspections(hive_id: str, limit: int = 20) -> dict[str, Any]:
    """Recent inspections recorded for a hive."""
    _require_uuid(hive_id)
    bind_record(hive_id=hive_id)

    db = get_db()
    hive = await db.get_hive(hive_id)
    if not hive:
        raise HTTPException(status_code=404, detail="not_found")

    try:
        rows = await db.list_hive_inspections(hive_id, limit=limit)
    except Exception as e:
        logger.error("list_hive_inspections_error", hive_id=hive_id, error=str(e))
        raise HTTPException(status_code=500, detail="list_inspections_failed")

    return {"hive": hive, "inspections": rows}
