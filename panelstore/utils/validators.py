from __future__ import annotations

from typing import Any

from panelstore.constants import FRACTION_LABELS, MAX_INCHES
from panelstore.errors import ValidationError


def _to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def clamp_qty(value: Any) -> int:
    return max(1, _to_int(value, 1))


def clamp_feet(value: Any) -> int:
    return max(0, _to_int(value, 0))


def clamp_inches(value: Any) -> int:
    return min(MAX_INCHES, max(0, _to_int(value, 0)))


def check_fraction(value: Any) -> int:
    """Fractions come from a fixed picker; anything off the list is rejected."""
    try:
        v = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"fraction must be one of 0..15, got {value!r}") from None
    if v not in FRACTION_LABELS:
        raise ValidationError(f"fraction must be one of 0..15, got {v}")
    return v
