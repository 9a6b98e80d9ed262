from __future__ import annotations

import dataclasses
import logging
import math
import threading
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from panelstore.constants import UNIT_EA
from panelstore.errors import ValidationError
from panelstore.models import CartItem, LineItem, Product
from panelstore.services import measure
from panelstore.utils.validators import (
    check_fraction,
    clamp_feet,
    clamp_inches,
    clamp_qty,
)

if TYPE_CHECKING:
    from panelstore.services.cart import CartStore

log = logging.getLogger(__name__)

NO_VALID_LINES = "Please enter valid measurements"

# field name (as sent by the UI) -> (dataclass attribute, coercion)
_FIELDS = {
    "qty": ("qty", clamp_qty),
    "feet": ("feet", clamp_feet),
    "inches": ("inches", clamp_inches),
    "fraction": ("fraction", check_fraction),
    "pieceMark": ("piece_mark", lambda v: "" if v is None else str(v)),
    "piece_mark": ("piece_mark", lambda v: "" if v is None else str(v)),
}

# one tape-measure string (10' 6 1/2") sets feet, inches and fraction together
LENGTH_FIELD = "length"


class OrderSession:
    """
    Cut list for one product configuration.

    Always holds at least one line so there is somewhere to type. Lines with a
    zero length are kept while editing and only dropped at submit().
    """

    def __init__(self, product: Product, price_per_unit: float):
        self.product = product
        self.price_per_unit = float(price_per_unit)
        self._lines: List[LineItem] = [measure.new_line()]
        self._lock = threading.Lock()

    @property
    def lines(self) -> List[LineItem]:
        return list(self._lines)

    def add_line(self) -> LineItem:
        line = measure.new_line()
        with self._lock:
            self._lines = [*self._lines, line]
        return line

    def remove_line(self, line_id: str) -> None:
        with self._lock:
            if len(self._lines) > 1:
                self._lines = [ln for ln in self._lines if ln.id != line_id]

    def update_line(self, line_id: str, field: str, value: Any) -> None:
        if field == LENGTH_FIELD:
            feet, inches, fraction = measure.parse_length(value)
            changes = {"feet": feet, "inches": inches, "fraction": fraction}
        elif field in _FIELDS:
            attr, coerce = _FIELDS[field]
            changes = {attr: coerce(value)}
        else:
            raise ValidationError(f"Unknown line field: {field}")
        with self._lock:
            self._lines = [
                dataclasses.replace(ln, **changes) if ln.id == line_id else ln
                for ln in self._lines
            ]

    def total_lf(self) -> float:
        return sum(measure.total_lf(ln) for ln in self._lines)

    def total_price(self) -> float:
        return sum(measure.line_price(ln, self.price_per_unit) for ln in self._lines)

    def panel_count(self) -> int:
        return sum(ln.qty for ln in self._lines)

    def submittable_lines(self) -> List[LineItem]:
        return [ln for ln in self._lines if ln.qty > 0 and measure.length_per_panel(ln) > 0]

    def build_item(self) -> CartItem:
        valid = self.submittable_lines()
        if not valid:
            raise ValidationError(NO_VALID_LINES)

        snaps = tuple(measure.snapshot(ln, self.price_per_unit) for ln in valid)
        p = self.product
        return CartItem(
            product_id=p.id,
            title=p.title,
            unit=p.unit,
            price_per_unit=self.price_per_unit,
            quantity=sum(s.total_lf for s in snaps),
            total_price=sum(s.line_price for s in snaps),
            img=p.img,
            lines=snaps,
        )

    def submit(self, cart: "CartStore") -> CartItem:
        item = self.build_item()
        cart.add_item(item)
        log.info("submitted %s: %d line(s), %.2f LF", item.product_id, len(item.lines), item.quantity)
        return item

    def summary(self) -> Dict[str, Any]:
        return {
            "productId": self.product.id,
            "title": self.product.title,
            "unit": self.product.unit,
            "pricePerUnit": self.price_per_unit,
            "lines": [
                {
                    "id": ln.id,
                    "qty": ln.qty,
                    "feet": ln.feet,
                    "inches": ln.inches,
                    "fraction": ln.fraction,
                    "pieceMark": ln.piece_mark,
                    "length": measure.format_length(ln),
                    "lengthPerPanel": measure.length_per_panel(ln),
                    "totalLF": measure.total_lf(ln),
                    "linePrice": measure.line_price(ln, self.price_per_unit),
                }
                for ln in self._lines
            ],
            "totalLF": self.total_lf(),
            "totalPrice": self.total_price(),
            "panelCount": self.panel_count(),
        }


def simple_cart_item(
    product: Product,
    price_per_unit: Optional[float],
    measurement: float,
    variant: Optional[str] = None,
) -> CartItem:
    """Cart item for products sold by the square or each rather than cut to length."""
    if price_per_unit is None:
        raise ValidationError("No price available for this product. Request a quote.")

    if not math.isfinite(measurement):
        raise ValidationError("Enter a number")
    if product.unit == UNIT_EA:
        if measurement < 1 or measurement != int(measurement):
            raise ValidationError("Quantity must be a whole number of at least 1")
        measurement = int(measurement)
    elif measurement < 0.01:
        raise ValidationError("Amount must be at least 0.01")

    return CartItem(
        product_id=product.id,
        title=variant or product.title,
        unit=product.unit,
        price_per_unit=float(price_per_unit),
        quantity=measurement,
        total_price=float(price_per_unit) * measurement,
        img=product.img,
    )
