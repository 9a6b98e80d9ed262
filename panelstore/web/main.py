from __future__ import annotations

import asyncio
import math
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Form, HTTPException, Request
from fastapi.responses import FileResponse

from panelstore.config import settings
from panelstore.constants import MAX_ORDER_SESSIONS, UNIT_LF, UNITS
from panelstore.db.sqlite import init_db
from panelstore.errors import ValidationError
from panelstore.models import Product
from panelstore.services.cart import CartStore, SqliteCartStorage
from panelstore.services.order import OrderSession, simple_cart_item
from panelstore.services.pricing import (
    PriceQuote,
    PriceStatus,
    PricingResolver,
    load_price_rows_csv,
)
from panelstore.services.quote_pdf import generate_quote_pdf


def create_app(
    cart: Optional[CartStore] = None,
    resolver: Optional[PricingResolver] = None,
) -> FastAPI:
    own_db = cart is None
    if cart is None:
        cart = CartStore(SqliteCartStorage(), settings.cart_key)
    if resolver is None:
        resolver = PricingResolver(load_price_rows_csv(settings.price_table_path))

    app = FastAPI(title="Panel Store")
    app.state.cart = cart
    app.state.resolver = resolver
    app.state.orders = {}
    app.state.price_task = None

    @app.on_event("startup")
    async def _startup() -> None:
        if own_db:
            init_db()
        cart.restore()
        if resolver.status is PriceStatus.LOADING:
            # cart commands do not wait for prices
            app.state.price_task = asyncio.create_task(resolver.load())

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        task = app.state.price_task
        if task is not None and not task.done():
            task.cancel()

    _register_routes(app)
    return app


# ---------------- dependencies ----------------

def get_cart(request: Request) -> CartStore:
    return request.app.state.cart


def get_resolver(request: Request) -> PricingResolver:
    return request.app.state.resolver


def get_orders(request: Request) -> Dict[str, OrderSession]:
    return request.app.state.orders


def _cart_payload(cart: CartStore) -> Dict[str, Any]:
    return cart.state.to_dict()


def _session(orders: Dict[str, OrderSession], sid: str) -> OrderSession:
    sess = orders.get(sid)
    if sess is None:
        raise HTTPException(status_code=404, detail="order session not found")
    return sess


def _require_line(sess: OrderSession, line_id: str) -> None:
    if not any(ln.id == line_id for ln in sess.lines):
        raise HTTPException(status_code=404, detail="line not found")


def _require_price(quote: PriceQuote) -> float:
    if quote.status is PriceStatus.LOADING:
        raise HTTPException(status_code=409, detail="Loading pricing...")
    if quote.price is None:
        raise HTTPException(status_code=422, detail="No price available for this product. Request a quote.")
    return quote.price


def _product_from_form(
    product_id: str,
    title: str,
    unit: str,
    price_per_unit: Optional[float],
    img: str,
    color: str,
    gauge: str,
) -> Product:
    if price_per_unit is not None and not (math.isfinite(price_per_unit) and price_per_unit >= 0):
        raise HTTPException(status_code=422, detail="price_per_unit must be a non-negative number")
    u = unit.strip().upper()
    if u not in UNITS:
        raise HTTPException(status_code=422, detail=f"unit must be one of {', '.join(UNITS)}")
    return Product(
        id=product_id.strip(),
        title=title.strip(),
        unit=u,
        price_per_unit=price_per_unit,
        img=img,
        color=color,
        gauge=gauge,
    )


def _register_routes(app: FastAPI) -> None:

    @app.get("/")
    def index(resolver: PricingResolver = Depends(get_resolver)):
        return {"service": "panel-store", "pricing": resolver.status.value}

    # ---------------- pricing ----------------

    @app.get("/pricing/status")
    def pricing_status(resolver: PricingResolver = Depends(get_resolver)):
        return {"status": resolver.status.value}

    @app.get("/pricing/price")
    def pricing_price(
        title: str,
        color: str = "",
        gauge: str = "",
        resolver: PricingResolver = Depends(get_resolver),
    ):
        return {
            "status": resolver.status.value,
            "price": resolver.get_price(title, color, gauge),
        }

    @app.get("/pricing/variants")
    def pricing_variants(title: str, resolver: PricingResolver = Depends(get_resolver)):
        return {
            "status": resolver.status.value,
            "variants": [v._asdict() for v in resolver.get_prices_for_product(title)],
        }

    # ---------------- ordering sessions (cut lists) ----------------

    @app.post("/orders")
    def order_open(
        product_id: str = Form(...),
        title: str = Form(...),
        unit: str = Form(UNIT_LF),
        price_per_unit: Optional[float] = Form(None),
        img: str = Form(""),
        color: str = Form(""),
        gauge: str = Form(""),
        variant: Optional[str] = Form(None),
        resolver: PricingResolver = Depends(get_resolver),
        orders: Dict[str, OrderSession] = Depends(get_orders),
    ):
        product = _product_from_form(product_id, title, unit, price_per_unit, img, color, gauge)
        if product.unit != UNIT_LF:
            raise HTTPException(status_code=422, detail="cut lists are for LF products; use /cart/items")
        price = _require_price(resolver.effective_price(product, variant))

        while len(orders) >= MAX_ORDER_SESSIONS:
            orders.pop(next(iter(orders)), None)
        sid = uuid.uuid4().hex
        orders[sid] = OrderSession(product, price)
        return {"sessionId": sid, **orders[sid].summary()}

    @app.get("/orders/{sid}")
    def order_show(sid: str, orders: Dict[str, OrderSession] = Depends(get_orders)):
        return {"sessionId": sid, **_session(orders, sid).summary()}

    @app.delete("/orders/{sid}")
    def order_discard(sid: str, orders: Dict[str, OrderSession] = Depends(get_orders)):
        _session(orders, sid)
        orders.pop(sid, None)
        return {"sessionId": sid, "discarded": True}

    @app.post("/orders/{sid}/lines")
    def order_add_line(sid: str, orders: Dict[str, OrderSession] = Depends(get_orders)):
        sess = _session(orders, sid)
        line = sess.add_line()
        return {"sessionId": sid, "lineId": line.id, **sess.summary()}

    @app.patch("/orders/{sid}/lines/{line_id}")
    def order_update_line(
        sid: str,
        line_id: str,
        field: str = Form(...),
        value: str = Form(""),
        orders: Dict[str, OrderSession] = Depends(get_orders),
    ):
        sess = _session(orders, sid)
        _require_line(sess, line_id)
        try:
            sess.update_line(line_id, field, value)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return {"sessionId": sid, **sess.summary()}

    @app.delete("/orders/{sid}/lines/{line_id}")
    def order_remove_line(sid: str, line_id: str, orders: Dict[str, OrderSession] = Depends(get_orders)):
        sess = _session(orders, sid)
        _require_line(sess, line_id)
        sess.remove_line(line_id)
        return {"sessionId": sid, **sess.summary()}

    @app.post("/orders/{sid}/submit")
    def order_submit(
        sid: str,
        orders: Dict[str, OrderSession] = Depends(get_orders),
        cart: CartStore = Depends(get_cart),
    ):
        sess = _session(orders, sid)
        try:
            item = sess.submit(cart)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        orders.pop(sid, None)
        return {"added": item.to_dict(), "cart": _cart_payload(cart)}

    # ---------------- cart ----------------

    @app.get("/cart")
    def cart_show(cart: CartStore = Depends(get_cart)):
        return _cart_payload(cart)

    @app.post("/cart/items")
    def cart_add(
        product_id: str = Form(...),
        title: str = Form(...),
        unit: str = Form(...),
        measurement: float = Form(...),
        price_per_unit: Optional[float] = Form(None),
        img: str = Form(""),
        color: str = Form(""),
        gauge: str = Form(""),
        variant: Optional[str] = Form(None),
        resolver: PricingResolver = Depends(get_resolver),
        cart: CartStore = Depends(get_cart),
    ):
        product = _product_from_form(product_id, title, unit, price_per_unit, img, color, gauge)
        price = _require_price(resolver.effective_price(product, variant))
        try:
            item = simple_cart_item(product, price, measurement, variant)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        cart.add_item(item)
        return {"added": item.to_dict(), "cart": _cart_payload(cart)}

    @app.patch("/cart/items/{product_id}")
    def cart_update(product_id: str, quantity: float = Form(...), cart: CartStore = Depends(get_cart)):
        if not math.isfinite(quantity):
            raise HTTPException(status_code=422, detail="quantity must be a number")
        if cart.state.find(product_id) is None:
            raise HTTPException(status_code=404, detail="item not in cart")
        cart.update_quantity(product_id, quantity)
        return _cart_payload(cart)

    @app.delete("/cart/items/{product_id}")
    def cart_remove(product_id: str, cart: CartStore = Depends(get_cart)):
        if cart.state.find(product_id) is None:
            raise HTTPException(status_code=404, detail="item not in cart")
        cart.remove_item(product_id)
        return _cart_payload(cart)

    @app.delete("/cart")
    def cart_clear(cart: CartStore = Depends(get_cart)):
        cart.clear()
        return _cart_payload(cart)

    @app.get("/cart/checkout")
    def cart_checkout(cart: CartStore = Depends(get_cart)):
        items = cart.checkout_snapshot()
        return {
            "items": [it.to_dict() for it in items],
            "totalAmount": cart.state.total_amount,
            "currency": settings.currency,
        }

    @app.get("/cart/quote.pdf", response_class=FileResponse)
    def cart_quote_pdf(cart: CartStore = Depends(get_cart)):
        try:
            path = generate_quote_pdf(cart.state)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        p = Path(path)
        return FileResponse(str(p), filename=p.name, media_type="application/pdf")

    # ---------------- session ----------------

    @app.post("/logout")
    def logout(
        cart: CartStore = Depends(get_cart),
        orders: Dict[str, OrderSession] = Depends(get_orders),
    ):
        orders.clear()
        cart.reset()
        return _cart_payload(cart)


app = create_app()
