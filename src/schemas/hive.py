"""
Data models for hive (colony) records.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HiveCreate(BaseModel):
    """Schema for creating a new hive."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1)
    apiary_name: Optional[str] = Field(default=None, alias="apiaryName")
    frame_count: Optional[int] = Field(default=None, ge=1, alias="frameCount")


class HiveUpdate(BaseModel):
    """Partial update; only fields explicitly sent are applied."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1)
    apiary_name: Optional[str] = Field(default=None, alias="apiaryName")
    frame_count: Optional[int] = Field(default=None, ge=1, alias="frameCount")
