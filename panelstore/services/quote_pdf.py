from __future__ import annotations

import os
from datetime import datetime

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from panelstore.config import settings
from panelstore.errors import ValidationError
from panelstore.models import CartState
from panelstore.services.measure import format_length
from panelstore.utils.formatters import lf, money


def generate_quote_pdf(state: CartState, export_dir: str | None = None) -> str:
    """
    Quote / cut list for the current cart: one row per item, one indented
    row per cut piece, cart total at the bottom. Returns the file path.
    """
    if not state.items:
        raise ValidationError("Your cart is empty")

    out_dir = export_dir or settings.export_dir
    os.makedirs(out_dir, exist_ok=True)

    now = datetime.now()
    filename = f"quote_{now.strftime('%Y%m%d_%H%M%S_%f')}.pdf"
    path = os.path.join(out_dir, filename)

    c = canvas.Canvas(path, pagesize=A4)
    w, h = A4

    y = h - 50
    c.setFont("Helvetica-Bold", 14)
    c.drawString(40, y, "QUOTE REQUEST")
    y -= 20

    c.setFont("Helvetica", 11)
    c.drawString(40, y, f"Date: {now.strftime('%Y-%m-%d %H:%M')}")
    y -= 16
    c.drawString(40, y, f"Currency: {settings.currency}")
    y -= 24

    # header
    c.setFont("Helvetica-Bold", 10)
    c.drawString(40, y, "Item")
    c.drawString(290, y, "Qty")
    c.drawString(370, y, "Price")
    c.drawString(470, y, "Total")
    y -= 10
    c.line(40, y, 550, y)
    y -= 16

    def _next_line(font: str = "Helvetica", size: int = 10) -> None:
        nonlocal y
        y -= 14
        if y < 80:
            c.showPage()
            y = h - 50
        c.setFont(font, size)

    c.setFont("Helvetica", 10)
    for it in state.items:
        c.setFont("Helvetica-Bold", 10)
        c.drawString(40, y, it.title[:45])
        c.drawRightString(340, y, f"{it.quantity:.2f} {it.unit}")
        c.drawRightString(420, y, f"{it.price_per_unit:.2f}")
        c.drawRightString(550, y, f"{it.total_price:.2f}")
        _next_line()

        for ln in it.lines or ():
            mark = f" [{ln.piece_mark}]" if ln.piece_mark else ""
            c.drawString(56, y, f"{ln.qty} @ {format_length(ln)}{mark}"[:50])
            c.drawRightString(340, y, lf(ln.total_lf))
            c.drawRightString(550, y, f"{ln.line_price:.2f}")
            _next_line()

    y -= 10
    c.line(40, y, 550, y)
    y -= 18
    c.setFont("Helvetica-Bold", 12)
    c.drawRightString(550, y, f"TOTAL: {money(state.total_amount)}")

    c.save()
    return path
