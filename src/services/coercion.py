"""
Value coercion helpers shared by the extractor and the frame normalizer.

Producers of inspection documents (the hosted LLM, the heuristic fallback,
older stored rows) disagree on field names and types. Everything here is a
total function: unrecognised input becomes ``None`` ("unknown"), never 0.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Optional, Sequence


def clamp_pct(value: float) -> float:
    """Clamp a percentage into [0, 100]."""
    return max(0.0, min(100.0, value))


def _to_number(value: Any) -> Optional[float]:
    # bool is an int subclass; True must not read as 1%
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip().rstrip("%").strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def parse_percentage(value: Any) -> Optional[float]:
    """
    Coerce a percentage-like value to a float in [0, 100].

    Numbers and numeric strings (``"80"``, ``"80%"``) are accepted and
    clamped; out-of-range values are clamped, not rejected.

    Returns:
        The clamped percentage, or None when the value is absent or
        not numeric.
    """
    number = _to_number(value)
    if number is None:
        return None
    return clamp_pct(number)


def parse_boolean(value: Any) -> Optional[bool]:
    """Only real booleans count; anything else is unknown."""
    return value if isinstance(value, bool) else None


def parse_frame_number(value: Any) -> Optional[int]:
    """Return a positive integer frame number, or None if ``value`` is not one."""
    number = _to_number(value)
    if number is None or not number.is_integer() or number < 1:
        return None
    return int(number)


def pick(source: Any, aliases: Sequence[str]) -> Any:
    """
    Return the first present value among ``aliases`` in ``source``.

    ``None`` counts as absent so a producer that emits ``"honey_pct": null``
    does not shadow a later alias. Non-mapping sources yield None.
    """
    if not isinstance(source, Mapping):
        return None
    for key in aliases:
        value = source.get(key)
        if value is not None:
            return value
    return None


def mean_of_present(a: Optional[float], b: Optional[float]) -> Optional[float]:
    """Mean of both values when both are known, else whichever one is known."""
    if a is not None and b is not None:
        return (a + b) / 2
    if a is not None:
        return a
    return b
