"""
Inspection report assembly.

Builds the render-ready view of a stored inspection: one canonical row per
frame plus the three equivalent-frame totals, alongside the queen status and
follow-up questions carried in the extraction document.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from src.services.coercion import pick
from src.services.frame_normalizer import (
    CanonicalFrameRow,
    InspectionTotals,
    aggregate,
    normalize,
)


@dataclass(frozen=True)
class InspectionReport:
    rows: list[CanonicalFrameRow]
    totals: InspectionTotals
    queen: dict[str, Any] | None = None
    questions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": [asdict(row) for row in self.rows],
            "totals": asdict(self.totals),
            "queen": self.queen,
            "questions": self.questions,
        }


def build_report(extract_document: Any) -> InspectionReport:
    """
    Normalize and aggregate the frames of a stored extraction document.

    Any document shape is tolerated; a missing or malformed ``frames``
    entry simply yields zero rows.
    """
    document = extract_document if isinstance(extract_document, Mapping) else {}

    rows = normalize(document.get("frames"))

    queen = document.get("queen")
    if queen is None and isinstance(document.get("queenSeen"), bool):
        queen = {"mentioned": document["queenSeen"]}
    questions = pick(document, ("questions", "followUpQuestions"))

    return InspectionReport(
        rows=rows,
        totals=aggregate(rows),
        queen=dict(queen) if isinstance(queen, Mapping) else None,
        questions=[q for q in questions if isinstance(q, str)] if isinstance(questions, list) else [],
    )
