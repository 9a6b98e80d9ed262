# tests/conftest.py
import asyncio

import pytest

from panelstore.models import CartItem, Product
from panelstore.services.cart import CartStore, MemoryCartStorage
from panelstore.services.pricing import PriceRow, PricingResolver

PRICE_ROWS = [
    PriceRow("Standing Seam 24 Gauge", "Galvalume", "24ga", 3.10),
    PriceRow("Standing Seam 24 Gauge", "Charcoal", "24ga", 3.45),
    PriceRow("R-Panel", "Burnished Slate", "26ga", 2.85),
    PriceRow("r-panel ", " GALVALUME", "26GA ", 2.40),
    PriceRow("Ridge Cap", "Charcoal", "26ga", 14.00),
]


def rows_source(rows):
    async def _load():
        return list(rows)

    return _load


@pytest.fixture
def resolver():
    r = PricingResolver(rows_source(PRICE_ROWS))
    asyncio.run(r.load())
    return r


@pytest.fixture
def storage():
    return MemoryCartStorage()


@pytest.fixture
def cart(storage):
    return CartStore(storage, "cart")


@pytest.fixture
def r_panel():
    return Product(id="r-panel-slate", title="R-Panel", unit="LF", price_per_unit=2.50,
                   img="/img/r-panel.jpg", color="Burnished Slate", gauge="26ga")


def make_item(product_id="a", total_price=10.0, quantity=1.0, price_per_unit=10.0, **kw):
    return CartItem(
        product_id=product_id,
        title=kw.pop("title", f"Product {product_id}"),
        unit=kw.pop("unit", "EA"),
        price_per_unit=price_per_unit,
        quantity=quantity,
        total_price=total_price,
        **kw,
    )
