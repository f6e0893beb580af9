from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from io import BytesIO
from typing import List, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from quote_message import format_mxn
from pricing_engine import QuotationBreakdown, format_quantity

ESTIMATE_DISCLAIMER = "Esta cotización es un estimado. El precio final se confirma con nuestro equipo."


@dataclass(frozen=True)
class QuotePdfLineItem:
    description: str
    qty: Decimal
    unit_price: Decimal
    amount: Decimal


@dataclass(frozen=True)
class QuotePdfArtifact:
    quote_id: str
    quote_date: date
    business_name: str
    contact_phone: str
    summary_rows: Tuple[Tuple[str, str], ...]
    line_items: Tuple[QuotePdfLineItem, ...]
    subtotal: Decimal
    total: Decimal
    notes: Tuple[str, ...] = ()


def line_items_from_breakdown(breakdown: QuotationBreakdown) -> Tuple[QuotePdfLineItem, ...]:
    return tuple(
        QuotePdfLineItem(
            description=li.label,
            qty=li.quantity,
            unit_price=li.unit_price,
            amount=li.line_total,
        )
        for li in breakdown.line_items
    )


def make_quote_pdf_bytes(artifact: QuotePdfArtifact) -> bytes:
    """
    Render a printable estimate.

    Layout: header band (business + quote id/date/total), a "DETALLES DEL SISTEMA" block
    with the visitor's answers, the line items table (continued on extra pages when it does
    not fit) and a totals box after the last row.
    """
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    # Uncompressed streams keep the text searchable in tests.
    c.setPageCompression(0)
    w, h = letter

    margin = 0.6 * inch
    x0 = margin
    y_top = h - margin
    pad = 0.15 * inch
    content_w = w - 2 * margin

    # Header band
    header_h = 1.1 * inch
    _rect(c, x0, y_top - header_h, content_w, header_h, stroke=1, fill=0)
    c.setFont("Helvetica-Bold", 14)
    c.drawString(x0 + pad, y_top - 0.42 * inch, artifact.business_name or "-")
    c.setFont("Helvetica", 9)
    c.drawString(x0 + pad, y_top - 0.65 * inch, "Cotizador de cámaras de seguridad")
    if artifact.contact_phone:
        c.drawString(x0 + pad, y_top - 0.85 * inch, f"WhatsApp: +{artifact.contact_phone}")

    box_w = 2.3 * inch
    box_x = w - margin - box_w
    c.setFont("Helvetica-Bold", 10)
    c.drawString(box_x, y_top - 0.35 * inch, "Cotización")
    c.drawString(box_x, y_top - 0.55 * inch, f"COT-{artifact.quote_id}")
    c.setFont("Helvetica", 9)
    c.drawString(box_x, y_top - 0.75 * inch, f"Fecha: {artifact.quote_date.isoformat()}")
    c.setFont("Helvetica-Bold", 11)
    c.drawString(box_x, y_top - 0.97 * inch, f"Total: {format_mxn(artifact.total)}")

    y = y_top - header_h - 0.25 * inch

    # Summary block, two columns of label/value pairs.
    rows = list(artifact.summary_rows)
    per_col = (len(rows) + 1) // 2
    row_h = 0.2 * inch
    block_h = 0.45 * inch + max(1, per_col) * row_h
    _rect(c, x0, y - block_h, content_w, block_h, stroke=1, fill=0)
    c.setFont("Helvetica-Bold", 9)
    c.drawString(x0 + pad, y - 0.25 * inch, "DETALLES DEL SISTEMA")
    col_w = content_w / 2.0
    for idx, (label, value) in enumerate(rows):
        col = idx // per_col if per_col else 0
        row = idx % per_col if per_col else 0
        tx = x0 + pad + col * col_w
        ty = y - 0.5 * inch - row * row_h
        c.setFont("Helvetica", 8)
        _draw_truncated(c, tx, ty, f"{label}: {value or '-'}", max_width=col_w - 2 * pad)

    y = y - block_h - 0.3 * inch

    footer_y = margin + 0.2 * inch
    remaining = list(artifact.line_items)
    while True:
        remaining, y = _render_line_items(
            c,
            line_items=remaining,
            x0=x0,
            table_w=content_w,
            pad=pad,
            top_y=y,
            bottom_y=footer_y + 0.3 * inch,
        )
        if not remaining:
            break
        _draw_footer(c, x0, footer_y, artifact)
        c.showPage()
        c.setFont("Helvetica-Bold", 10)
        c.drawString(x0, y_top - 0.1 * inch, "CONCEPTOS (CONTINUACIÓN)")
        y = y_top - 0.35 * inch

    totals_h = 0.75 * inch
    if y - totals_h < footer_y + 0.3 * inch:
        _draw_footer(c, x0, footer_y, artifact)
        c.showPage()
        y = y_top
    _render_totals(c, artifact, right_x=x0 + content_w, top_y=y - 0.1 * inch, box_h=totals_h)

    _draw_footer(c, x0, footer_y, artifact)
    c.showPage()
    c.save()
    return buf.getvalue()


def _rect(c: canvas.Canvas, x: float, y: float, w: float, h: float, *, stroke: int, fill: int) -> None:
    c.rect(x, y, w, h, stroke=stroke, fill=fill)


def _hline(c: canvas.Canvas, x1: float, x2: float, y: float) -> None:
    c.line(x1, y, x2, y)


def _draw_footer(c: canvas.Canvas, x0: float, y: float, artifact: QuotePdfArtifact) -> None:
    c.setFont("Helvetica", 8)
    c.setFillColor(colors.grey)
    c.drawString(x0, y, ESTIMATE_DISCLAIMER)
    note_y = y + 0.14 * inch
    for n in artifact.notes[:3]:
        c.drawString(x0, note_y, f"Nota: {n}")
        note_y += 0.12 * inch
    c.setFillColor(colors.black)


def _render_line_items(
    c: canvas.Canvas,
    *,
    line_items: List[QuotePdfLineItem],
    x0: float,
    table_w: float,
    pad: float,
    top_y: float,
    bottom_y: float,
) -> Tuple[List[QuotePdfLineItem], float]:
    """
    Draw as many rows as fit between `top_y` and `bottom_y`.

    Returns the rows that did not fit and the y coordinate under the last drawn row.
    """
    right = x0 + table_w
    qty_x = right - 3.1 * inch
    unit_x = right - 1.6 * inch
    amount_x = right - pad

    c.setFont("Helvetica-Bold", 9)
    c.drawString(x0 + pad, top_y - 0.2 * inch, "CONCEPTO")
    c.drawRightString(qty_x, top_y - 0.2 * inch, "CANTIDAD")
    c.drawRightString(unit_x, top_y - 0.2 * inch, "PRECIO UNITARIO")
    c.drawRightString(amount_x, top_y - 0.2 * inch, "TOTAL")
    _hline(c, x0, right, top_y - 0.3 * inch)

    row_h = 0.26 * inch
    row_y = top_y - 0.5 * inch
    desc_max_w = qty_x - 0.9 * inch - (x0 + pad)

    c.setFont("Helvetica", 9)
    rendered = 0
    for li in line_items:
        if row_y < bottom_y:
            break
        _draw_truncated(c, x0 + pad, row_y, li.description, max_width=desc_max_w)
        c.drawRightString(qty_x, row_y, format_quantity(li.qty))
        c.drawRightString(unit_x, row_y, format_mxn(li.unit_price))
        c.drawRightString(amount_x, row_y, format_mxn(li.amount))
        row_y -= row_h
        rendered += 1

    _hline(c, x0, right, row_y + row_h - 0.1 * inch)
    return line_items[rendered:], row_y


def _render_totals(c: canvas.Canvas, artifact: QuotePdfArtifact, *, right_x: float, top_y: float, box_h: float) -> None:
    box_w = 2.6 * inch
    tx = right_x - box_w
    _rect(c, tx, top_y - box_h, box_w, box_h, stroke=1, fill=0)
    c.setFont("Helvetica", 9)
    _totals_row(c, tx, top_y - 0.27 * inch, "Subtotal", artifact.subtotal, box_w)
    c.setFont("Helvetica-Bold", 10)
    _totals_row(c, tx, top_y - 0.55 * inch, "Total", artifact.total, box_w)


def _totals_row(c: canvas.Canvas, x: float, y: float, label: str, amount: Decimal, box_w: float) -> None:
    """
    Draw one label/value row inside the totals box, truncating the label so it never runs
    into the right-aligned amount.
    """
    left_pad = 0.12 * inch
    right_pad = 0.12 * inch
    gap = 0.10 * inch
    amount_txt = format_mxn(amount)
    amount_w = c.stringWidth(amount_txt)

    label_max = box_w - left_pad - right_pad - amount_w - gap
    _draw_truncated(c, x + left_pad, y, (label or "").strip(), max_width=max(0.0, label_max))
    c.drawRightString(x + box_w - right_pad, y, amount_txt)


def _draw_truncated(c: canvas.Canvas, x: float, y: float, text: str, *, max_width: float) -> None:
    """
    Draw text truncated with an ellipsis so it stays inside a box.
    """
    t = (text or "").strip()
    if not t or max_width <= 0:
        return
    if c.stringWidth(t) <= max_width:
        c.drawString(x, y, t)
        return
    # ASCII ellipsis; the built-in Type1 fonts lack the unicode one.
    ell = "..."
    lo = 0
    hi = len(t)
    best = ""
    while lo <= hi:
        mid = (lo + hi) // 2
        cand = (t[:mid].rstrip() + ell) if mid < len(t) else t
        if c.stringWidth(cand) <= max_width:
            best = cand
            lo = mid + 1
        else:
            hi = mid - 1
    if best:
        c.drawString(x, y, best)
