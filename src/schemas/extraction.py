"""
Data models for structured inspection extraction results.

These describe the document produced by either the hosted LLM or the
heuristic fallback, and are the validation contract for LLM output.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FrameSide(BaseModel):
    """Observations for one face (inside or outside) of a frame."""
    model_config = ConfigDict(extra="ignore")

    empty: Optional[bool] = None
    comb_built_pct: Optional[float] = Field(default=None, ge=0, le=100)
    honey_pct: Optional[float] = Field(default=None, ge=0, le=100)
    honey_capped_pct: Optional[float] = Field(default=None, ge=0, le=100)
    brood_pct: Optional[float] = Field(default=None, ge=0, le=100)
    pollen_pct: Optional[float] = Field(default=None, ge=0, le=100)
    eggs: Optional[bool] = None
    larvae: Optional[bool] = None
    notes: Optional[str] = None


class FrameReport(BaseModel):
    """A single inspected frame."""
    model_config = ConfigDict(extra="ignore")

    frame_number: int = Field(ge=1)
    outside: Optional[FrameSide] = None
    inside: Optional[FrameSide] = None
    notes: Optional[str] = None


class InspectionTotalsDoc(BaseModel):
    """Hive-level totals as carried inside the extraction document."""
    frames_reported: int = Field(ge=0)
    honey_equiv_frames: Optional[float] = Field(default=None, ge=0)
    brood_equiv_frames: Optional[float] = Field(default=None, ge=0)
    pollen_equiv_frames: Optional[float] = Field(default=None, ge=0)


class QueenStatus(BaseModel):
    mentioned: bool
    eoq: Optional[bool] = None
    status_note: Optional[str] = None


class ExtractionResult(BaseModel):
    """Full structured report extracted from one transcript."""
    model_config = ConfigDict(frozen=True)

    frames: list[FrameReport]
    totals: InspectionTotalsDoc
    queen: Optional[QueenStatus] = None
    questions: list[str] = Field(default_factory=list)
