import math

import pytest

from src.services.coercion import (
    mean_of_present,
    parse_boolean,
    parse_frame_number,
    parse_percentage,
    pick,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (42, 42.0),
        (12.5, 12.5),
        ("80", 80.0),
        (" 35% ", 35.0),
        (150, 100.0),
        (-10, 0.0),
        ("250", 100.0),
    ],
)
def test_parse_percentage_accepts_numbers_and_clamps(value, expected):
    assert parse_percentage(value) == expected


@pytest.mark.parametrize(
    "value", [None, True, False, "", "lots", math.nan, math.inf, 10**400, [50], {"pct": 50}]
)
def test_parse_percentage_unknown_values_are_absent(value):
    assert parse_percentage(value) is None


def test_parse_boolean_only_accepts_real_booleans():
    assert parse_boolean(True) is True
    assert parse_boolean(False) is False
    assert parse_boolean("true") is None
    assert parse_boolean(1) is None
    assert parse_boolean(None) is None


@pytest.mark.parametrize("value, expected", [(3, 3), (3.0, 3), ("7", 7), (" 12 ", 12)])
def test_parse_frame_number_valid(value, expected):
    assert parse_frame_number(value) == expected


@pytest.mark.parametrize("value", [0, -1, 2.5, "abc", None, True, math.nan, 10**400, "1" * 5000])
def test_parse_frame_number_invalid(value):
    assert parse_frame_number(value) is None


def test_pick_skips_missing_and_none_aliases():
    source = {"honey_pct": None, "honeyPct": 60, "honeyPercent": 90}
    assert pick(source, ("honey_pct", "honeyPct", "honeyPercent")) == 60
    assert pick(source, ("brood_pct",)) is None
    assert pick("not a mapping", ("honey_pct",)) is None


def test_mean_of_present():
    assert mean_of_present(80.0, 20.0) == 50.0
    assert mean_of_present(None, 20.0) == 20.0
    assert mean_of_present(0.0, None) == 0.0
    assert mean_of_present(None, None) is None
