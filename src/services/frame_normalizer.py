"""
Frame Normalizer / Aggregator.

Reconciles the frame shapes produced by different extractors (two-sided
``outside``/``inside`` objects, flat camelCase or snake_case fields,
boolean vs. percentage "empty" flags) into one canonical row per frame,
and rolls those rows up into hive-level equivalent-frame totals.

Both public functions are total: a malformed frame is skipped and a
missing value falls back to a default, the batch is never aborted.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel

from src.services.coercion import (
    mean_of_present,
    parse_boolean,
    parse_frame_number,
    parse_percentage,
    pick,
)

# ── Accepted field-name aliases, in lookup order ────────────────
FRAME_NUMBER_ALIASES = ("frame_number", "frameNumber", "frame", "number")
OUTSIDE_ALIASES = ("outside", "outsideSide", "outside_face")
INSIDE_ALIASES = ("inside", "insideSide", "inside_face")
NOTES_ALIASES = ("notes", "note", "raw", "rawText")

HONEY_ALIASES = ("honey_pct", "honeyPct", "honeyPercent")
HONEY_CAPPED_ALIASES = ("honey_capped_pct", "honeyCappedPct", "honeyCappedPercent")
BROOD_ALIASES = ("brood_pct", "broodPct", "broodPercent")
POLLEN_ALIASES = ("pollen_pct", "pollenPct", "pollenPercent")
EMPTY_PCT_ALIASES = ("empty_pct", "emptyPct", "emptyPercent")
EMPTY_FLAG_ALIASES = ("empty", "isEmpty")

EGGS_ALIASES = ("eggs", "hasEggs", "eggsPresent")
LARVAE_ALIASES = ("larvae", "hasLarvae", "larvaePresent")
DRONE_ALIASES = ("drone", "drones", "hasDrones", "droneBrood")
QUEEN_CELL_ALIASES = ("queen_cells", "queenCells", "qCells")

# ── Notes heuristics ────────────────────────────────────────────
_EXPLICIT_PCT_RE = re.compile(
    r"(\d{1,3})\s*%\s*(?:of\s*)?(?:this\s*)?(?:frame\s*)?(?:is\s*)?\b(honey|brood|pollen)\b"
)
_IS_EMPTY_RE = re.compile(r"\bis empty\b")

CAPPED_CUES = ("capped", "kept", "sealed")
NOTE_FLAG_CUES: dict[str, tuple[str, ...]] = {
    "eggs": ("egg", "eggs"),
    "larvae": ("larva", "larvae"),
    "drone": ("drone", "drones"),
    "queen_cells": ("queen cell", "queen cells", "q cell", "q.cells", "qc"),
}


@dataclass(frozen=True)
class CanonicalFrameRow:
    """One fully resolved frame, ready for display."""
    frame_number: int
    honey_pct: float = 0.0
    brood_pct: float = 0.0
    pollen_pct: float = 0.0
    empty_pct: float = 0.0
    empty: bool = False
    eggs: bool = False
    larvae: bool = False
    drone: bool = False
    queen_cells: bool = False
    notes: str = ""


@dataclass(frozen=True)
class InspectionTotals:
    """Hive-level rollup: 100 summed percentage points = one equivalent frame."""
    frames_reported: int
    honey_equiv_frames: float
    brood_equiv_frames: float
    pollen_equiv_frames: float


def _as_mapping(frame: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(frame, BaseModel):
        return frame.model_dump(exclude_none=True)
    if isinstance(frame, Mapping):
        return frame
    return None


def _resolve_frame_number(frame: Mapping[str, Any]) -> Optional[int]:
    for key in FRAME_NUMBER_ALIASES:
        number = parse_frame_number(frame.get(key))
        if number is not None:
            return number
    return None


def _side(frame: Mapping[str, Any], aliases: Sequence[str]) -> Mapping[str, Any]:
    side = pick(frame, aliases)
    return side if isinstance(side, Mapping) else {}


def _pct(source: Mapping[str, Any], aliases: Sequence[str]) -> Optional[float]:
    return parse_percentage(pick(source, aliases))


def _honey_pct(source: Mapping[str, Any]) -> Optional[float]:
    # A face reporting both a honey and a capped-honey figure counts as their mean.
    return mean_of_present(_pct(source, HONEY_ALIASES), _pct(source, HONEY_CAPPED_ALIASES))


def _empty_pct(source: Mapping[str, Any]) -> Optional[float]:
    pct = _pct(source, EMPTY_PCT_ALIASES)
    if pct is not None:
        return pct
    flag = _first_bool([source], EMPTY_FLAG_ALIASES)
    if flag is not None:
        return 100.0 if flag else 0.0
    # Some producers put a number under "empty".
    return parse_percentage(source.get("empty"))


def _first_bool(sources: Iterable[Mapping[str, Any]], aliases: Sequence[str]) -> Optional[bool]:
    for source in sources:
        for key in aliases:
            value = parse_boolean(source.get(key))
            if value is not None:
                return value
    return None


def pct_from_notes(notes: str, kind: str) -> Optional[float]:
    """
    Conservative percentage guess for ``kind`` (honey, brood or pollen) from free text.

    Only explicit numeric phrasing ("80% of this frame is brood") or the word
    "half" alongside the kind qualify. Honey additionally maps any capped /
    kept / sealed phrasing to 100, negated or not. Qualitative
    language such as "healthy brood pattern" never produces a number.
    """
    text = notes.lower()

    for match in _EXPLICIT_PCT_RE.finditer(text):
        if match.group(2) == kind:
            return parse_percentage(match.group(1))

    if "half" in text and kind in text:
        return 50.0

    if kind == "honey":
        if any(cue in text for cue in CAPPED_CUES):
            return 100.0

    return None


def flag_from_notes(notes: str, kind: str) -> bool:
    text = notes.lower()
    return any(cue in text for cue in NOTE_FLAG_CUES[kind])


def notes_declare_empty(notes: str) -> bool:
    text = notes.lower()
    return (
        "completely empty" in text
        or "frame is empty" in text
        or _IS_EMPTY_RE.search(text) is not None
    )


def normalize_frame(frame: Any) -> Optional[CanonicalFrameRow]:
    """
    Resolve a single frame report into a canonical row.

    Returns None when the frame has no usable frame number.
    """
    data = _as_mapping(frame)
    if data is None:
        return None

    frame_number = _resolve_frame_number(data)
    if frame_number is None:
        return None

    outside = _side(data, OUTSIDE_ALIASES)
    inside = _side(data, INSIDE_ALIASES)
    two_sided = bool(outside) or bool(inside)

    raw_notes = pick(data, NOTES_ALIASES)
    notes = "" if raw_notes is None else str(raw_notes)

    if two_sided:
        honey = mean_of_present(_honey_pct(outside), _honey_pct(inside))
        brood = mean_of_present(_pct(outside, BROOD_ALIASES), _pct(inside, BROOD_ALIASES))
        pollen = mean_of_present(_pct(outside, POLLEN_ALIASES), _pct(inside, POLLEN_ALIASES))
        side_empties = [v for v in (_empty_pct(outside), _empty_pct(inside)) if v is not None]
        empty_pct = max(side_empties) if side_empties else None
        flag_sources = [outside, inside, data]
        both_sides_empty = (
            _first_bool([outside], EMPTY_FLAG_ALIASES) is True
            and _first_bool([inside], EMPTY_FLAG_ALIASES) is True
        )
    else:
        honey = _honey_pct(data)
        brood = _pct(data, BROOD_ALIASES)
        pollen = _pct(data, POLLEN_ALIASES)
        empty_pct = _empty_pct(data)
        flag_sources = [data]
        both_sides_empty = _first_bool([data], EMPTY_FLAG_ALIASES) is True

    if honey is None:
        honey = pct_from_notes(notes, "honey")
    if brood is None:
        brood = pct_from_notes(notes, "brood")
    if pollen is None:
        pollen = pct_from_notes(notes, "pollen")

    def resolve_flag(aliases: Sequence[str], kind: str) -> bool:
        value = _first_bool(flag_sources, aliases)
        if value is not None:
            return value
        return flag_from_notes(notes, kind)

    return CanonicalFrameRow(
        frame_number=frame_number,
        honey_pct=honey or 0.0,
        brood_pct=brood or 0.0,
        pollen_pct=pollen or 0.0,
        empty_pct=empty_pct or 0.0,
        empty=notes_declare_empty(notes) or both_sides_empty,
        eggs=resolve_flag(EGGS_ALIASES, "eggs"),
        larvae=resolve_flag(LARVAE_ALIASES, "larvae"),
        drone=resolve_flag(DRONE_ALIASES, "drone"),
        queen_cells=resolve_flag(QUEEN_CELL_ALIASES, "queen_cells"),
        notes=notes,
    )


def normalize(frames: Any) -> list[CanonicalFrameRow]:
    """
    Build canonical rows, one per distinct frame number, in ascending order.

    Accepts pydantic ``FrameReport`` objects or plain mappings in any of the
    supported shapes. A repeated frame number keeps its first occurrence.
    """
    if not isinstance(frames, (list, tuple)):
        return []

    rows: dict[int, CanonicalFrameRow] = {}
    for frame in frames:
        row = normalize_frame(frame)
        if row is not None and row.frame_number not in rows:
            rows[row.frame_number] = row

    return [rows[number] for number in sorted(rows)]


def aggregate(rows: Sequence[CanonicalFrameRow]) -> InspectionTotals:
    """Sum per-frame percentages into equivalent frames (two decimals)."""
    return InspectionTotals(
        frames_reported=len(rows),
        honey_equiv_frames=round(sum(r.honey_pct for r in rows) / 100, 2),
        brood_equiv_frames=round(sum(r.brood_pct for r in rows) / 100, 2),
        pollen_equiv_frames=round(sum(r.pollen_pct for r in rows) / 100, 2),
    )
