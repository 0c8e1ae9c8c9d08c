import pytest

from src.schemas.extraction import FrameReport, FrameSide
from src.services.frame_normalizer import (
    CanonicalFrameRow,
    aggregate,
    normalize,
    normalize_frame,
    pct_from_notes,
)
from src.services.heuristic_extractor import extract


def test_two_sided_honey_is_the_mean_of_both_faces():
    rows = normalize([{"frame_number": 1, "outside": {"honey_pct": 80}, "inside": {"honey_pct": 20}}])

    assert rows[0].honey_pct == 50


def test_single_face_value_is_used_as_is():
    row = normalize_frame({"frameNumber": 2, "inside": {"broodPct": 70}})

    assert row.brood_pct == 70
    assert row.honey_pct == 0
    assert row.pollen_pct == 0


def test_capped_honey_is_averaged_with_honey_on_the_same_face():
    row = normalize_frame({"frame_number": 1, "outside": {"honey_pct": 60, "honey_capped_pct": 100}})

    assert row.honey_pct == 80


def test_flat_frames_are_read_directly_and_clamped():
    row = normalize_frame(
        {"frameNumber": 2, "honeyPercent": 150, "broodPercent": -10, "pollenPercent": "25"}
    )

    assert row.honey_pct == 100
    assert row.brood_pct == 0
    assert row.pollen_pct == 25


@pytest.mark.parametrize(
    "frame",
    [
        {"notes": "no number here"},
        {"frame_number": "abc"},
        {"frame_number": 0},
        {"frame_number": 2.5},
        {"frame_number": None, "honey_pct": 50},
        "Frame 3",
        None,
    ],
)
def test_frames_without_a_usable_number_are_skipped(frame):
    assert normalize([frame]) == []


def test_frame_number_aliases_are_tried_in_order():
    assert normalize_frame({"frame_number": "x", "frame": 4}).frame_number == 4
    assert normalize_frame({"number": "3"}).frame_number == 3


def test_rows_are_sorted_and_deduplicated():
    rows = normalize(
        [
            {"frame_number": 3},
            {"frame_number": 1, "notes": "first"},
            {"frame_number": 2},
            {"frame_number": 1, "notes": "second"},
        ]
    )

    assert [r.frame_number for r in rows] == [1, 2, 3]
    assert rows[0].notes == "first"


def test_non_list_input_yields_no_rows():
    assert normalize(None) == []
    assert normalize({"frame_number": 1}) == []


def test_notes_backfill_explicit_percentage():
    row = normalize_frame({"frame_number": 1, "notes": "About 80% of this frame is brood, healthy pattern"})

    assert row.brood_pct == 80
    assert row.honey_pct == 0


def test_notes_never_guess_brood_from_quality_words():
    row = normalize_frame({"frame_number": 1, "notes": "Healthy brood pattern, nice and tight"})

    assert row.brood_pct == 0


def test_notes_backfill_half_and_capped():
    assert pct_from_notes("half honey, rest open cells", "honey") == 50
    assert pct_from_notes("Fully capped honey across the face", "honey") == 100
    assert pct_from_notes("Sealed stores", "honey") == 100
    assert pct_from_notes("honey not capped yet", "honey") == 100
    assert pct_from_notes("capped brood", "pollen") is None


def test_notes_backfill_picks_the_matching_kind():
    notes = "80% brood and 20% honey"

    assert pct_from_notes(notes, "brood") == 80
    assert pct_from_notes(notes, "honey") == 20


def test_structured_values_take_precedence_over_notes():
    row = normalize_frame({"frame_number": 1, "outside": {"honey_pct": 30}, "notes": "half honey"})

    assert row.honey_pct == 30


def test_structured_booleans_take_precedence_over_notes():
    row = normalize_frame({"frame_number": 1, "outside": {"eggs": False}, "notes": "eggs everywhere"})

    assert row.eggs is False


def test_flat_boolean_aliases():
    row = normalize_frame(
        {
            "frameNumber": 5,
            "eggsPresent": True,
            "larvaePresent": False,
            "droneBrood": True,
            "queenCells": True,
            "notes": "larvae",
        }
    )

    assert row.eggs is True
    assert row.larvae is False
    assert row.drone is True
    assert row.queen_cells is True


def test_booleans_fall_back_to_notes():
    row = normalize_frame({"frame_number": 1, "notes": "Saw drones and two q cells"})

    assert row.drone is True
    assert row.queen_cells is True
    assert row.eggs is False
    assert row.larvae is False


def test_one_empty_face_does_not_empty_the_frame():
    row = normalize_frame({"frame_number": 1, "outside": {"empty": True}})

    assert row.empty is False
    assert row.empty_pct == 100


def test_both_empty_faces_empty_the_frame():
    row = normalize_frame({"frame_number": 1, "outside": {"empty": True}, "inside": {"empty": True}})

    assert row.empty is True
    assert row.empty_pct == 100


def test_empty_pct_takes_the_larger_face():
    row = normalize_frame({"frame_number": 1, "outside": {"empty": False}, "inside": {"emptyPct": 40}})

    assert row.empty_pct == 40
    assert row.empty is False


def test_explicit_empty_declaration_in_notes():
    row = normalize_frame({"frame_number": 2, "notes": "This frame is completely empty"})

    assert row.empty is True


def test_flat_empty_percentage():
    row = normalize_frame({"frame_number": 1, "emptyPercent": 30})

    assert row.empty_pct == 30
    assert row.empty is False


def test_accepts_pydantic_frame_reports():
    frame = FrameReport(
        frame_number=4,
        outside=FrameSide(honey_pct=90, eggs=True),
        inside=FrameSide(honey_pct=70),
    )

    row = normalize_frame(frame)

    assert row == CanonicalFrameRow(frame_number=4, honey_pct=80, eggs=True)


def test_heuristic_transcript_end_to_end():
    result = extract("Frame 1 is mostly empty on the outside. Frame 2 has eggs and larvae.")

    rows = normalize(result.frames)

    assert len(rows) == 2
    assert rows[0].frame_number == 1
    assert rows[0].empty is False
    assert rows[0].empty_pct == 100
    assert rows[1].eggs is True
    assert rows[1].larvae is True


def test_half_of_it_honey_flows_through_normalize():
    rows = normalize(extract("Frame 3 half of it honey.").frames)

    assert rows[0].honey_pct == 50


def test_capped_wording_in_notes_fills_honey_even_when_negated():
    rows = normalize(extract("Frame 5 some capped but most not capped yet").frames)

    assert rows[0].honey_pct == 100


def test_out_of_range_numbers_are_treated_as_unknown():
    rows = normalize([{"frame_number": 1, "honey_pct": 10**400}, {"frame_number": 10**400}])

    assert [row.frame_number for row in rows] == [1]
    assert rows[0].honey_pct == 0


def test_aggregate_sums_equivalent_frames():
    rows = normalize(
        [
            {"frame_number": 1, "outside": {"honey_pct": 80}, "inside": {"honey_pct": 20}},
            {"frame_number": 2, "honeyPct": 100, "broodPct": 80},
            {"frame_number": 3, "pollen_pct": 25},
        ]
    )

    totals = aggregate(rows)

    assert totals.frames_reported == 3
    assert totals.honey_equiv_frames == 1.5
    assert totals.brood_equiv_frames == 0.8
    assert totals.pollen_equiv_frames == 0.25


def test_aggregate_of_no_rows():
    totals = aggregate([])

    assert totals.frames_reported == 0
    assert totals.honey_equiv_frames == 0
    assert totals.brood_equiv_frames == 0
    assert totals.pollen_equiv_frames == 0


def test_aggregate_is_deterministic():
    frames = [
        {"frame_number": n, "outside": {"honey_pct": 33.3}, "inside": {"brood_pct": 66.7}}
        for n in range(1, 11)
    ]

    assert aggregate(normalize(frames)) == aggregate(normalize(frames))
