"""
Request models for transcript extraction and stored inspections.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ExtractRequest(BaseModel):
    transcript_text: str = Field(min_length=1, alias="transcriptText")
    frame_count: Optional[int] = Field(default=None, ge=1, alias="frameCount")


class InspectionCreate(BaseModel):
    """Body for saving an inspection; ``extract`` is stored verbatim."""
    hive_id: str = Field(min_length=1, alias="hiveId")
    recorded_at_local: str = Field(alias="recordedAtLocal")
    transcript_text: str = Field(alias="transcriptText")
    extract: Any = None
