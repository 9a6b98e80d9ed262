from __future__ import annotations

import asyncio
import csv
import enum
import logging
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, NamedTuple, Optional, Tuple

from panelstore.models import Product

log = logging.getLogger(__name__)


class PriceStatus(str, enum.Enum):
    LOADING = "loading"
    RESOLVED = "resolved"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class PriceRow:
    title: str
    color: str
    gauge: str
    price: float


class PriceVariant(NamedTuple):
    variant: str
    price: float


class PriceQuote(NamedTuple):
    status: PriceStatus
    price: Optional[float]


RowSource = Callable[[], Awaitable[List[PriceRow]]]


def _norm(s: str | None) -> str:
    return (s or "").strip().casefold()


def _key(title: str, color: str, gauge: str) -> Tuple[str, str, str]:
    return _norm(title), _norm(color), _norm(gauge)


def read_price_rows_csv(path: str) -> List[PriceRow]:
    """
    Read title,color,gauge,price rows. Header names are matched
    case-insensitively; rows without a usable price (non-numeric,
    NaN, infinite or negative) are skipped.
    """
    rows: List[PriceRow] = []
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        for raw in reader:
            r = {_norm(k): (v or "").strip() for k, v in raw.items() if k}
            try:
                price = float(r.get("price", "").replace("$", "").replace(",", ""))
            except ValueError:
                continue
            if not math.isfinite(price) or price < 0:
                continue
            rows.append(PriceRow(r.get("title", ""), r.get("color", ""), r.get("gauge", ""), price))
    return rows


def load_price_rows_csv(path: str) -> RowSource:
    async def _load() -> List[PriceRow]:
        return await asyncio.to_thread(read_price_rows_csv, path)

    return _load


class PricingResolver:
    """
    Per-LF prices keyed by (title, color, gauge).

    The table arrives asynchronously. Until load() finishes every lookup
    answers None and status stays LOADING; a failed load is UNAVAILABLE.
    """

    def __init__(self, source: RowSource):
        self._source = source
        self._status = PriceStatus.LOADING
        self._prices: Dict[Tuple[str, str, str], float] = {}
        self._by_title: Dict[str, List[PriceRow]] = {}

    @property
    def status(self) -> PriceStatus:
        return self._status

    async def load(self) -> PriceStatus:
        try:
            rows = await self._source()
        except Exception:
            log.exception("price table load failed")
            self._status = PriceStatus.UNAVAILABLE
            return self._status

        self._index(rows)
        self._status = PriceStatus.RESOLVED
        log.info("price table loaded: %d rows, %d titles", len(rows), len(self._by_title))
        return self._status

    def _index(self, rows: List[PriceRow]) -> None:
        prices: Dict[Tuple[str, str, str], float] = {}
        by_title: Dict[str, List[PriceRow]] = {}
        for row in rows:
            prices[_key(row.title, row.color, row.gauge)] = row.price
            by_title.setdefault(_norm(row.title), []).append(row)
        self._prices = prices
        self._by_title = by_title

    def get_price(self, title: str, color: str, gauge: str) -> Optional[float]:
        if self._status is not PriceStatus.RESOLVED:
            return None
        return self._prices.get(_key(title, color, gauge))

    def get_prices_for_product(self, title: str) -> List[PriceVariant]:
        if self._status is not PriceStatus.RESOLVED:
            return []
        return [
            PriceVariant(f"{r.color} {r.gauge}".strip(), r.price)
            for r in self._by_title.get(_norm(title), [])
        ]

    def variant_price(self, title: str, variant: str) -> Optional[float]:
        want = _norm(variant)
        for v in self.get_prices_for_product(title):
            if _norm(v.variant) == want:
                return v.price
        return None

    def effective_price(self, product: Product, variant: Optional[str] = None) -> PriceQuote:
        """
        Selected variant first, then the table row for the product's own
        color/gauge, then the catalog price.
        """
        if self._status is PriceStatus.LOADING:
            return PriceQuote(PriceStatus.LOADING, None)

        price = None
        if variant:
            price = self.variant_price(product.title, variant)
        if price is None:
            price = self.get_price(product.title, product.color, product.gauge)
        if price is None:
            price = product.price_per_unit

        if price is None:
            return PriceQuote(PriceStatus.UNAVAILABLE, None)
        return PriceQuote(PriceStatus.RESOLVED, float(price))
