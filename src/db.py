"""
Supabase Database Client.

Provides a singleton instance of the Supabase client and typed helper methods
for the hive and inspection tables. Route handlers go through these helpers
so the storage details stay in one place.
"""

from __future__ import annotations

from typing import Any, Optional

from supabase import Client, create_client

from src.config import get_settings
from src.logging_config import get_logger

logger = get_logger(__name__)

HIVE_COLUMNS = "id, name, apiary_name, frame_count, created_at"
INSPECTION_COLUMNS = "id, hive_id, recorded_at_local, status, transcript_text, extract_json, created_at"


class DatabaseClient:
    """Wrapper around the official Supabase Python client."""

    _instance: Optional[DatabaseClient] = None
    _client: Client

    def __new__(cls) -> DatabaseClient:
        """Singleton pattern to ensure only one client instance."""
        if cls._instance is None:
            instance = super().__new__(cls)
            settings = get_settings()

            if not settings.supabase_url or not settings.supabase_service_key:
                logger.warning(
                    "Supabase credentials missing. Database operations will fail.",
                    url=bool(settings.supabase_url),
                    key=bool(settings.supabase_service_key),
                )

            try:
                instance._client = create_client(
                    settings.supabase_url,
                    settings.supabase_service_key,
                )
                logger.info("Supabase client initialized", url=settings.supabase_url)
            except Exception as e:
                logger.error("Failed to initialize Supabase client", error=str(e))
                raise

            cls._instance = instance

        return cls._instance

    @property
    def client(self) -> Client:
        """Access the raw Supabase client."""
        return self._client

    # -- Hives --

    async def list_hives(self) -> list[dict[str, Any]]:
        """All hives, newest first."""
        try:
            response = (
                self.client.table("hives")
                .select(HIVE_COLUMNS)
                .order("created_at", desc=True)
                .execute()
            )
            return response.data or []
        except Exception as e:
            logger.error("Error listing hives", error=str(e))
            raise

    async def get_hive(self, hive_id: str) -> dict[str, Any] | None:
        """Fetch a hive by UUID."""
        try:
            response = (
                self.client.table("hives")
                .select(HIVE_COLUMNS)
                .eq("id", hive_id)
                .limit(1)
                .execute()
            )
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error("Error fetching hive", id=hive_id, error=str(e))
            return None

    async def create_hive(
        self,
        name: str,
        apiary_name: str | None = None,
        frame_count: int | None = None,
    ) -> dict[str, Any] | None:
        """Insert a hive; frame count defaults to the configured standard box size."""
        payload = {
            "name": name,
            "apiary_name": apiary_name,
            "frame_count": frame_count or get_settings().default_frame_count,
        }
        try:
            response = self.client.table("hives").insert(payload).execute()
            if response.data:
                return response.data[0]
            return None
        except Exception as e:
            logger.error("Error creating hive", name=name, error=str(e))
            return None

    async def update_hive(self, hive_id: str, updates: dict[str, Any]) -> dict[str, Any] | None:
        """Update a hive record. Returns None when no row matched."""
        try:
            response = (
                self.client.table("hives")
                .update(updates)
                .eq("id", hive_id)
                .execute()
            )
            # Supabase update returns a list, usually with 1 item
            if response.data:
                return response.data[0]
            return None
        except Exception as e:
            logger.error("Error updating hive", id=hive_id, error=str(e))
            return None

    async def delete_hive(self, hive_id: str) -> bool:
        """Delete a hive. Returns False when no row matched."""
        try:
            response = self.client.table("hives").delete().eq("id", hive_id).execute()
            return bool(response.data)
        except Exception as e:
            logger.error("Error deleting hive", id=hive_id, error=str(e))
            return False

    # -- Inspections --

    async def create_inspection(
        self,
        hive_id: str,
        recorded_at_local: str | None,
        transcript_text: str | None,
        extract: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Store an inspection; ``extract`` goes into the jsonb column untouched."""
        payload = {
            "hive_id": hive_id,
            "recorded_at_local": recorded_at_local or None,
            "transcript_text": transcript_text or None,
            "extract_json": extract,
        }
        try:
            response = self.client.table("inspections").insert(payload).execute()
            if response.data:
                return response.data[0]
            return None
        except Exception as e:
            logger.error("Error creating inspection", hive_id=hive_id, error=str(e))
            raise

    async def get_inspection(self, inspection_id: str) -> dict[str, Any] | None:
        """Fetch a raw inspection row by id."""
        try:
            response = (
                self.client.table("inspections")
                .select(INSPECTION_COLUMNS)
                .eq("id", inspection_id)
                .limit(1)
                .execute()
            )
            return response.data[0] if response.data else None
        except Exception as e:
            logger.error("Error fetching inspection", id=inspection_id, error=str(e))
            raise

    async def list_hive_inspections(self, hive_id: str, limit: int = 20) -> list[dict[str, Any]]:
        """Recent inspections for a hive, newest first."""
        try:
            response = (
                self.client.table("inspections")
                .select(INSPECTION_COLUMNS)
                .eq("hive_id", hive_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            return response.data or []
        except Exception as e:
            logger.error("Error listing inspections", hive_id=hive_id, error=str(e))
            raise


# Global accessor
def get_db() -> DatabaseClient:
    return DatabaseClient()
