# tests/test_pricing.py
import asyncio

from conftest import PRICE_ROWS, rows_source

from panelstore.models import Product
from panelstore.services.pricing import (
    PriceStatus,
    PricingResolver,
    load_price_rows_csv,
)


def test_lookup_is_case_and_whitespace_insensitive(resolver):
    assert resolver.get_price("R-Panel", "Burnished Slate", "26ga") == 2.85
    assert resolver.get_price("  r-panel", "burnished slate ", "26GA") == 2.85
    assert resolver.get_price("R-PANEL", "Galvalume", "26ga") == 2.40


def test_scenario_d_no_match_is_none(resolver):
    assert resolver.get_price("Standing Seam 24 Gauge", "Bronze", "24ga") is None


def test_variants_for_title(resolver):
    variants = resolver.get_prices_for_product("standing seam 24 gauge")
    assert [(v.variant, v.price) for v in variants] == [
        ("Galvalume 24ga", 3.10),
        ("Charcoal 24ga", 3.45),
    ]
    assert resolver.get_prices_for_product("Nothing") == []


def test_loading_is_not_unavailable():
    r = PricingResolver(rows_source(PRICE_ROWS))
    assert r.status is PriceStatus.LOADING
    assert r.get_price("R-Panel", "Burnished Slate", "26ga") is None
    p = Product(id="p", title="R-Panel", unit="LF", price_per_unit=2.5)
    assert r.effective_price(p).status is PriceStatus.LOADING
    assert asyncio.run(r.load()) is PriceStatus.RESOLVED


def test_failed_load_is_unavailable_not_raised():
    async def boom():
        raise OSError("network down")

    r = PricingResolver(boom)
    assert asyncio.run(r.load()) is PriceStatus.UNAVAILABLE
    assert r.get_price("R-Panel", "Burnished Slate", "26ga") is None


def test_effective_price_order(resolver, r_panel):
    # table row for the product's own color/gauge beats the catalog price
    assert resolver.effective_price(r_panel).price == 2.85
    # a selected variant overrides both
    q = resolver.effective_price(r_panel, "galvalume 26ga")
    assert (q.status, q.price) == (PriceStatus.RESOLVED, 2.40)
    # unknown variant falls back to the default row
    assert resolver.effective_price(r_panel, "Purple 22ga").price == 2.85

    catalog_only = Product(id="x", title="Trim", unit="EA", price_per_unit=9.5)
    assert resolver.effective_price(catalog_only).price == 9.5

    quote_only = Product(id="y", title="Standing Seam 24 Gauge", unit="LF", color="Bronze", gauge="24ga")
    q = resolver.effective_price(quote_only)
    assert (q.status, q.price) == (PriceStatus.UNAVAILABLE, None)


def test_csv_source(tmp_path):
    path = tmp_path / "pricing.csv"
    path.write_text(
        "Title,COLOR,Gauge,Price\n"
        "R-Panel,Galvalume,26ga,$2.40\n"
        "R-Panel,Red,26ga,\n"
        "PBR Panel,White,26ga,2.95\n",
        encoding="utf-8",
    )
    r = PricingResolver(load_price_rows_csv(str(path)))
    assert asyncio.run(r.load()) is PriceStatus.RESOLVED
    assert r.get_price("r-panel", "galvalume", "26ga") == 2.40
    assert r.get_price("R-Panel", "Red", "26ga") is None
    assert r.get_price("PBR Panel", "White", "26ga") == 2.95


def test_csv_missing_file_is_unavailable(tmp_path):
    r = PricingResolver(load_price_rows_csv(str(tmp_path / "missing.csv")))
    assert asyncio.run(r.load()) is PriceStatus.UNAVAILABLE


def test_csv_skips_non_finite_and_negative_prices(tmp_path):
    path = tmp_path / "pricing.csv"
    path.write_text(
        "title,color,gauge,price\n"
        "R-Panel,Red,26ga,NaN\n"
        "R-Panel,Blue,26ga,inf\n"
        "R-Panel,Green,26ga,-inf\n"
        "R-Panel,Tan,26ga,-1.00\n"
        "R-Panel,White,26ga,2.60\n",
        encoding="utf-8",
    )
    r = PricingResolver(load_price_rows_csv(str(path)))
    asyncio.run(r.load())
    for color in ("Red", "Blue", "Green", "Tan"):
        assert r.get_price("R-Panel", color, "26ga") is None
    assert [v.price for v in r.get_prices_for_product("R-Panel")] == [2.60]
