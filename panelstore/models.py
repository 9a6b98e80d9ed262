from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from panelstore.errors import PersistenceError


@dataclass(frozen=True)
class LineItem:
    id: str
    qty: int = 1
    feet: int = 0
    inches: int = 0
    fraction: int = 0  # sixteenths of an inch, 0..15
    piece_mark: str = ""


@dataclass(frozen=True)
class Product:
    id: str
    title: str
    unit: str  # LF / SQ / EA
    price_per_unit: Optional[float] = None
    img: str = ""
    color: str = ""
    gauge: str = ""


@dataclass(frozen=True)
class CartLineItem:
    qty: int
    feet: int
    inches: int
    fraction: int
    piece_mark: str
    length_per_panel: float
    total_lf: float
    line_price: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "qty": self.qty,
            "feet": self.feet,
            "inches": self.inches,
            "fraction": self.fraction,
            "pieceMark": self.piece_mark,
            "lengthPerPanel": self.length_per_panel,
            "totalLF": self.total_lf,
            "linePrice": self.line_price,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "CartLineItem":
        d = _mapping(raw, "line")
        return cls(
            qty=_int(d, "qty"),
            feet=_int(d, "feet"),
            inches=_int(d, "inches"),
            fraction=_int(d, "fraction"),
            piece_mark=_str(d, "pieceMark", default=""),
            length_per_panel=_num(d, "lengthPerPanel"),
            total_lf=_num(d, "totalLF"),
            line_price=_num(d, "linePrice"),
        )


@dataclass(frozen=True)
class CartItem:
    product_id: str
    title: str
    unit: str
    price_per_unit: float
    quantity: float
    total_price: float
    img: str = ""
    lines: Optional[Tuple[CartLineItem, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "productId": self.product_id,
            "title": self.title,
            "unit": self.unit,
            "pricePerUnit": self.price_per_unit,
            "quantity": self.quantity,
            "totalPrice": self.total_price,
            "img": self.img,
        }
        if self.lines is not None:
            d["lines"] = [ln.to_dict() for ln in self.lines]
        return d

    @classmethod
    def from_dict(cls, raw: Any) -> "CartItem":
        d = _mapping(raw, "item")
        lines = d.get("lines")
        if lines is not None:
            if not isinstance(lines, list):
                raise PersistenceError("item 'lines' must be a list")
            lines = tuple(CartLineItem.from_dict(x) for x in lines)
        return cls(
            product_id=_str(d, "productId"),
            title=_str(d, "title"),
            unit=_str(d, "unit"),
            price_per_unit=_num(d, "pricePerUnit"),
            quantity=_num(d, "quantity"),
            total_price=_num(d, "totalPrice"),
            img=_str(d, "img", default=""),
            lines=lines,
        )


@dataclass(frozen=True)
class CartState:
    items: Tuple[CartItem, ...] = field(default_factory=tuple)
    total_items: int = 0
    total_amount: float = 0.0

    @classmethod
    def of(cls, items) -> "CartState":
        """Build a state whose totals are derived from ``items``."""
        items = tuple(items)
        total = 0.0
        for it in items:
            total += it.total_price
        return cls(items=items, total_items=len(items), total_amount=total)

    def find(self, product_id: str) -> Optional[CartItem]:
        for it in self.items:
            if it.product_id == product_id:
                return it
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [it.to_dict() for it in self.items],
            "totalItems": self.total_items,
            "totalAmount": self.total_amount,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "CartState":
        d = _mapping(raw, "cart")
        items = d.get("items")
        if not isinstance(items, list):
            raise PersistenceError("cart 'items' must be a list")
        decoded: List[CartItem] = [CartItem.from_dict(x) for x in items]
        seen = set()
        for it in decoded:
            if it.product_id in seen:
                raise PersistenceError(f"duplicate productId in stored cart: {it.product_id}")
            seen.add(it.product_id)
        return cls.of(decoded)


# ---------------- decode helpers ----------------

def _mapping(raw: Any, what: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise PersistenceError(f"{what} must be an object, got {type(raw).__name__}")
    return raw


def _str(d: Dict[str, Any], key: str, default: str | None = None) -> str:
    v = d.get(key)
    if v is None:
        if default is None:
            raise PersistenceError(f"missing '{key}'")
        return default
    if not isinstance(v, str):
        raise PersistenceError(f"'{key}' must be a string")
    return v


def _num(d: Dict[str, Any], key: str) -> float:
    v = d.get(key)
    # bool is an int subclass; reject it explicitly
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise PersistenceError(f"'{key}' must be a number")
    return float(v)


def _int(d: Dict[str, Any], key: str) -> int:
    v = d.get(key)
    if isinstance(v, bool) or not isinstance(v, int):
        raise PersistenceError(f"'{key}' must be an integer")
    return v
