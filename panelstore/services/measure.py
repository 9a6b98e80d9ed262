"""Per-line length and price math for cut-to-length panels.

A line is measured in whole feet, whole inches (0..11) and sixteenths of an
inch (0..15). Everything here is a pure function of a :class:`LineItem`.
"""
from __future__ import annotations

import re
import uuid
from typing import Tuple

from panelstore.models import CartLineItem, LineItem
from panelstore.utils.formatters import length_label

SIXTEENTHS_PER_FOOT = 12 * 16

_NUM = r"\d+(?:\.\d+)?"
_FRAC = r"(\d+)\s*/\s*(\d+)"
_FEET_INCHES = re.compile(
    rf"^\s*({_NUM})\s*(?:'|ft\.?|feet|foot)\s*"
    rf"(?:({_NUM})\s*)?(?:{_FRAC}\s*)?"
    r"(?:\"|in\.?|inch|inches|'')?\s*$",
    re.I,
)
_INCHES_ONLY = re.compile(
    rf"^\s*({_NUM})(?:\s+{_FRAC})?\s*(?:\"|in\.?|inch|inches|'')\s*$",
    re.I,
)
_BARE_FEET = re.compile(rf"^\s*({_NUM})\s*$")


def new_line() -> LineItem:
    return LineItem(id=uuid.uuid4().hex)


def length_per_panel(line: LineItem) -> float:
    return line.feet + (line.inches / 12) + (line.fraction / 16 / 12)


def total_lf(line: LineItem) -> float:
    return line.qty * length_per_panel(line)


def line_price(line: LineItem, price_per_unit: float) -> float:
    return total_lf(line) * price_per_unit


def snapshot(line: LineItem, price_per_unit: float) -> CartLineItem:
    return CartLineItem(
        qty=line.qty,
        feet=line.feet,
        inches=line.inches,
        fraction=line.fraction,
        piece_mark=line.piece_mark,
        length_per_panel=length_per_panel(line),
        total_lf=total_lf(line),
        line_price=line_price(line, price_per_unit),
    )


def format_length(line) -> str:
    """Renders 10', 10' 6" or 10' 6 1/2" for a LineItem or CartLineItem."""
    return length_label(line.feet, line.inches, line.fraction)


def _fraction(num: str | None, den: str | None) -> float:
    if num is None or den is None:
        return 0.0
    d = int(den)
    if d == 0:
        return 0.0
    return int(num) / d


def _split_sixteenths(total_inches: float) -> Tuple[int, int, int]:
    s = int(round(total_inches * 16))
    feet, rem = divmod(s, SIXTEENTHS_PER_FOOT)
    inches, fraction = divmod(rem, 16)
    return feet, inches, fraction


def parse_length(text: str) -> Tuple[int, int, int]:
    """
    Parse a tape-measure string into (feet, inches, sixteenths).

    Accepts 10'6", 10' 6 1/2", 10 ft 6 in, 126.5" and bare decimal feet
    (10.5). Fractional inches snap to the nearest sixteenth and carry into
    inches/feet. A zero denominator drops the fraction. Returns (0, 0, 0) if
    not parseable.
    """
    s = str(text) if text is not None else ""
    m = _FEET_INCHES.match(s)
    if m:
        feet = float(m.group(1))
        inches = float(m.group(2) or 0)
        return _split_sixteenths(feet * 12 + inches + _fraction(m.group(3), m.group(4)))

    m = _INCHES_ONLY.match(s)
    if m:
        return _split_sixteenths(float(m.group(1)) + _fraction(m.group(2), m.group(3)))

    m = _BARE_FEET.match(s.replace(",", ""))
    if m:
        return _split_sixteenths(float(m.group(1)) * 12)
    return 0, 0, 0
