"""
Heuristic (regex) inspection extractor.

Last-resort fallback used when the hosted LLM extraction is unreachable or
returns a document that fails validation. Splits the narration on
"Frame <n>" / "Frame number <n>" announcements and applies an ordered list
of substring/regex rules to each chunk. Favours simple, auditable rules over
accuracy: a partial report is more useful to the beekeeper than an error.

``extract`` never raises and depends only on its input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from src.schemas.extraction import (
    ExtractionResult,
    FrameReport,
    FrameSide,
    InspectionTotalsDoc,
    QueenStatus,
)
from src.services.coercion import parse_frame_number, parse_percentage

QUEEN_QUESTION = "Did you see the queen (EOQ) or evidence of a laying queen (fresh eggs)?"

_SPLIT_RE = re.compile(r"(?=Frame\s+number\s+\d+|Frame\s+\d+)", re.IGNORECASE)
_FRAME_RE = re.compile(r"Frame\s+(?:number\s+)?(\d+)", re.IGNORECASE)

# Order matters: the "about" variant is preferred.
_COMB_RES = (
    re.compile(r"comb[^0-9]{0,30}about\s+(\d+)\s*%", re.IGNORECASE),
    re.compile(r"comb[^0-9]{0,30}(\d+)\s*%", re.IGNORECASE),
)
_HONEY_RE = re.compile(r"(\d+)\s*%\s*(?:of\s*)?frame\s+is\s+honey", re.IGNORECASE)
_BROOD_RE = re.compile(r"(\d+)\s*%\s*(?:of\s*)?frame\s+is\s+brood", re.IGNORECASE)

OUTSIDE_CUE = "on the outside"
INSIDE_CUE = "on the inside"
CAPPED_CUES = ("capped", "fully capped", "kept", "fully kept")
UNCAPPED_CUES = ("not capped", "uncapped", "not kept", "unkept")


@dataclass
class _Chunk:
    """Working state for one frame's slice of the narration."""
    text: str
    lower: str
    outside: dict[str, Any] = field(default_factory=dict)
    inside: dict[str, Any] = field(default_factory=dict)
    honey_pct: Optional[float] = None

    @property
    def names_outside(self) -> bool:
        return OUTSIDE_CUE in self.lower

    @property
    def names_inside(self) -> bool:
        return INSIDE_CUE in self.lower

    def first_pct(self, *patterns: re.Pattern[str]) -> Optional[float]:
        for pattern in patterns:
            match = pattern.search(self.text)
            if match:
                return parse_percentage(match.group(1))
        return None

    def set_both(self, key: str, value: Any) -> None:
        self.outside[key] = value
        self.inside[key] = value

    def set_scoped(self, key: str, value: Any) -> None:
        """Inside wins over outside when both are named; neither named means both sides."""
        if self.names_inside:
            self.inside[key] = value
        elif self.names_outside:
            self.outside[key] = value
        else:
            self.set_both(key, value)

    def set_gated(self, key: str, value: Any) -> None:
        """Each named side gets the value; neither named means both sides."""
        if self.names_outside:
            self.outside[key] = value
        if self.names_inside:
            self.inside[key] = value
        if not self.names_outside and not self.names_inside:
            self.set_both(key, value)


def _rule_empty(chunk: _Chunk) -> None:
    if "empty" in chunk.lower:
        chunk.set_gated("empty", True)


def _rule_comb_built(chunk: _Chunk) -> None:
    pct = chunk.first_pct(*_COMB_RES)
    if pct is not None:
        chunk.set_scoped("comb_built_pct", pct)


def _rule_honey(chunk: _Chunk) -> None:
    if "half of it honey" in chunk.lower:
        pct: Optional[float] = 50.0
    else:
        pct = chunk.first_pct(_HONEY_RE)
    if pct is not None:
        chunk.honey_pct = pct
        chunk.set_scoped("honey_pct", pct)


def _rule_honey_capped(chunk: _Chunk) -> None:
    if any(cue in chunk.lower for cue in UNCAPPED_CUES):
        return
    if any(cue in chunk.lower for cue in CAPPED_CUES):
        chunk.set_both("honey_capped_pct", chunk.honey_pct if chunk.honey_pct is not None else 100.0)


def _rule_brood(chunk: _Chunk) -> None:
    pct = chunk.first_pct(_BROOD_RE)
    if pct is None and "half of it is brood" in chunk.lower:
        pct = 50.0
    if pct is not None:
        chunk.set_gated("brood_pct", pct)


def _rule_eggs(chunk: _Chunk) -> None:
    if "egg" in chunk.lower:
        chunk.set_both("eggs", True)


def _rule_larvae(chunk: _Chunk) -> None:
    if "larva" in chunk.lower:
        chunk.set_both("larvae", True)


# Evaluated in order; the capped rule reads the honey value set before it.
CHUNK_RULES: tuple[Callable[[_Chunk], None], ...] = (
    _rule_empty,
    _rule_comb_built,
    _rule_honey,
    _rule_honey_capped,
    _rule_brood,
    _rule_eggs,
    _rule_larvae,
)


def split_frame_chunks(transcript_text: str) -> list[str]:
    """Split narration into chunks that each start at a frame announcement."""
    flattened = transcript_text.replace("\n", " ")
    return [part.strip() for part in _SPLIT_RE.split(flattened) if part.strip()]


def _parse_chunk(text: str) -> Optional[FrameReport]:
    match = _FRAME_RE.search(text)
    if not match:
        return None

    frame_number = parse_frame_number(match.group(1))
    if frame_number is None:
        return None

    chunk = _Chunk(text=text, lower=text.lower())
    for rule in CHUNK_RULES:
        rule(chunk)

    return FrameReport(
        frame_number=frame_number,
        outside=FrameSide(**chunk.outside) if chunk.outside else None,
        inside=FrameSide(**chunk.inside) if chunk.inside else None,
        notes=text,
    )


def queen_mentioned(transcript_text: str) -> bool:
    # Plain substring test: "queen cells" also counts as a mention.
    lower = transcript_text.lower()
    return "queen" in lower or "eoq" in lower


def extract(transcript_text: str) -> ExtractionResult:
    """
    Build an inspection report from narration text using regex rules.

    Args:
        transcript_text: Full narration; may be empty.

    Returns:
        ExtractionResult with one frame per recognised announcement,
        ``totals.frames_reported`` set, and the default queen question
        when the queen was never mentioned.
    """
    text = transcript_text or ""

    frames: list[FrameReport] = []
    for chunk_text in split_frame_chunks(text):
        frame = _parse_chunk(chunk_text)
        if frame is not None:
            frames.append(frame)

    mentioned = queen_mentioned(text)

    return ExtractionResult(
        frames=frames,
        totals=InspectionTotalsDoc(frames_reported=len(frames)),
        queen=QueenStatus(mentioned=mentioned),
        questions=[] if mentioned else [QUEEN_QUESTION],
    )
