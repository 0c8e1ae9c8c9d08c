import uuid
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient


class FakeDatabase:
    """In-memory stand-in for the Supabase-backed DatabaseClient."""

    def __init__(self) -> None:
        self.hives: dict[str, dict[str, Any]] = {}
        self.inspections: dict[str, dict[str, Any]] = {}

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    async def list_hives(self) -> list[dict[str, Any]]:
        return sorted(self.hives.values(), key=lambda h: h["created_at"], reverse=True)

    async def get_hive(self, hive_id: str) -> dict[str, Any] | None:
        return self.hives.get(hive_id)

    async def create_hive(self, name, apiary_name=None, frame_count=None):
        hive = {
            "id": str(uuid.uuid4()),
            "name": name,
            "apiary_name": apiary_name,
            "frame_count": frame_count or 10,
            "created_at": self._now(),
        }
        self.hives[hive["id"]] = hive
        return hive

    async def update_hive(self, hive_id, updates):
        hive = self.hives.get(hive_id)
        if hive is None:
            return None
        hive.update(updates)
        return hive

    async def delete_hive(self, hive_id):
        return self.hives.pop(hive_id, None) is not None

    async def create_inspection(self, hive_id, recorded_at_local, transcript_text, extract):
        row = {
            "id": str(uuid.uuid4()),
            "hive_id": hive_id,
            "recorded_at_local": recorded_at_local,
            "status": None,
            "transcript_text": transcript_text,
            "extract_json": extract,
            "created_at": self._now(),
        }
        self.inspections[row["id"]] = row
        return row

    async def get_inspection(self, inspection_id):
        return self.inspections.get(inspection_id)

    async def list_hive_inspections(self, hive_id, limit=20):
        rows = [r for r in self.inspections.values() if r["hive_id"] == hive_id]
        return rows[:limit]


@pytest.fixture
def fake_db(monkeypatch):
    from src.api import hives, inspections

    db = FakeDatabase()
    monkeypatch.setattr(hives, "get_db", lambda: db)
    monkeypatch.setattr(inspections, "get_db", lambda: db)
    return db


@pytest.fixture
def client(fake_db, monkeypatch):
    from src.api import middleware
    from src.api_server import app
    from src.services import inspection_extraction

    middleware._rate_counts.clear()
    # Never reach the hosted model from tests; extraction uses the fallback.
    monkeypatch.setattr(inspection_extraction.settings, "openai_api_key", "")
    return TestClient(app)
