# tests/test_measure.py
import pytest

from panelstore.models import LineItem
from panelstore.services.measure import (
    format_length,
    length_per_panel,
    line_price,
    new_line,
    parse_length,
    snapshot,
    total_lf,
)


def _line(qty=1, feet=0, inches=0, fraction=0, mark=""):
    return LineItem(id="x", qty=qty, feet=feet, inches=inches, fraction=fraction, piece_mark=mark)


def test_new_line_defaults():
    ln = new_line()
    assert (ln.qty, ln.feet, ln.inches, ln.fraction, ln.piece_mark) == (1, 0, 0, 0, "")
    assert ln.id and ln.id != new_line().id


def test_scenario_a_length_lf_and_price():
    ln = _line(qty=2, feet=10, inches=6, fraction=8)
    assert length_per_panel(ln) == pytest.approx(10.541667, abs=1e-6)
    assert total_lf(ln) == pytest.approx(21.083333, abs=1e-6)
    assert round(line_price(ln, 2.85), 2) == 60.09


def test_length_formula_matches_components():
    for f in (0, 1, 7, 20):
        for i in range(12):
            for k in range(16):
                assert length_per_panel(_line(feet=f, inches=i, fraction=k)) == pytest.approx(
                    f + i / 12 + k / 16 / 12
                )


def test_length_strictly_increasing_in_each_component():
    base = dict(feet=5, inches=5, fraction=5)
    for name, top in (("feet", 40), ("inches", 11), ("fraction", 15)):
        prev = None
        for v in range(top + 1):
            cur = length_per_panel(_line(**{**base, name: v}))
            if prev is not None:
                assert cur > prev
            prev = cur


def test_price_scales_linearly_with_qty():
    one = line_price(_line(qty=1, feet=12, inches=3, fraction=4), 3.25)
    two = line_price(_line(qty=2, feet=12, inches=3, fraction=4), 3.25)
    assert two == pytest.approx(2 * one)


def test_zero_length_line_is_inert():
    ln = _line(qty=5)
    assert length_per_panel(ln) == 0
    assert total_lf(ln) == 0
    assert line_price(ln, 4.0) == 0


def test_snapshot_carries_computed_values():
    ln = _line(qty=3, feet=8, inches=0, fraction=0, mark="A1")
    snap = snapshot(ln, 2.0)
    assert snap.piece_mark == "A1"
    assert snap.length_per_panel == 8
    assert snap.total_lf == 24
    assert snap.line_price == 48


def test_format_length():
    assert format_length(_line(feet=10)) == "10'"
    assert format_length(_line(feet=10, inches=6)) == "10' 6\""
    assert format_length(_line(feet=10, inches=6, fraction=8)) == "10' 6 1/2\""
    assert format_length(_line(feet=3, fraction=15)) == "3' 0 15/16\""


@pytest.mark.parametrize(
    "text, expected",
    [
        ("10'6\"", (10, 6, 0)),
        ("10' 6 1/2\"", (10, 6, 8)),
        ("10 ft 6 in", (10, 6, 0)),
        ("12'", (12, 0, 0)),
        ("126.5\"", (10, 6, 8)),
        ("7 3/16\"", (0, 7, 3)),
        ("10.5", (10, 6, 0)),
        ("11' 11 31/32\"", (12, 0, 0)),
        ("junk", (0, 0, 0)),
        ("", (0, 0, 0)),
        (None, (0, 0, 0)),
        ("5' 3 1/0\"", (5, 3, 0)),
    ],
)
def test_parse_length(text, expected):
    assert parse_length(text) == expected
