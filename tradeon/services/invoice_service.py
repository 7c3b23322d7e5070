"""Invoice aggregation for one order or a combined set of orders.

Invoices are derived views, never stored. Line items come from the order's
structured items when present, otherwise from the legacy note lines
("Red Shirt: 3 pcs × ৳450"), otherwise from the order's own product fields.
"""
import re
import time
import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Dict, List, Any, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.models.order import Order
from tradeon.schemas.invoice import (
    Invoice, InvoiceLine, InvoiceTotals, InvoiceOrderSection, BillTo, CompanyProfile,
)


logger = logging.getLogger(__name__)

# "<name>: <qty> pcs × ৳<price>"; a decimal price keeps its fraction
NOTE_LINE_PATTERN = re.compile(r"^(.+?):\s*(\d+)\s*pcs\s*×\s*৳([\d,]+(?:\.\d+)?)")

ZERO = Decimal("0")


class EmptyInvoiceError(Exception):
    """Raised when an invoice is requested for zero orders."""
    pass


def to_decimal(value: Any) -> Decimal:
    """Parse a money value; commas are thousands separators, junk is 0."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    text = str(value).replace(",", "").strip()
    try:
        return Decimal(text) if text else ZERO
    except InvalidOperation:
        return ZERO


def _to_int(value: Any) -> int:
    try:
        return int(str(value).replace(",", "").strip())
    except (TypeError, ValueError):
        return 0


def format_note_line(name: str, quantity: int, unit_price: Decimal) -> str:
    """Render one line item in the legacy notes format."""
    price = to_decimal(unit_price)
    price_text = f"{price:,.0f}" if price == price.to_integral_value() else f"{price:,.2f}"
    return f"{name}: {quantity} pcs × ৳{price_text}"


def parse_note_lines(notes: Optional[str]) -> List[InvoiceLine]:
    """Parse note text into line items. Lines that don't match are dropped."""
    if not notes:
        return []
    lines = []
    for raw in notes.split("\n"):
        if not raw:
            continue
        match = NOTE_LINE_PATTERN.match(raw)
        if not match:
            continue
        name, qty_text, price_text = match.groups()
        qty = _to_int(qty_text)
        unit_price = to_decimal(price_text)
        lines.append(InvoiceLine(
            name=name.strip(),
            qty=qty,
            unit_price=unit_price,
            total=qty * unit_price,
        ))
    return lines


def parse_order_lines(order: Any) -> List[InvoiceLine]:
    """
    Itemize an order.

    Preference order: structured order items, note lines, then a single
    synthetic line built from the order's product fields. Never raises.
    """
    items = getattr(order, "items", None)
    if items:
        return [
            InvoiceLine(
                name=item.name,
                qty=item.quantity,
                unit_price=to_decimal(item.unit_price),
                total=item.quantity * to_decimal(item.unit_price),
            )
            for item in sorted(items, key=lambda i: i.position or 0)
        ]

    parsed = parse_note_lines(getattr(order, "notes", None))
    if parsed:
        return parsed

    name = order.product_name
    if getattr(order, "variant_name", None):
        name = f"{name} ({order.variant_name})"
    return [InvoiceLine(
        name=name,
        qty=order.quantity or 0,
        unit_price=to_decimal(order.unit_price),
        total=to_decimal(order.total_price),
    )]


def calc_totals(orders: Sequence[Any]) -> InvoiceTotals:
    """Sum order-level money fields across every order."""
    product_total = domestic_total = shipping_total = commission_total = ZERO
    for order in orders:
        product_total += to_decimal(order.total_price)
        domestic_total += to_decimal(getattr(order, "domestic_courier_charge", None))
        shipping_total += to_decimal(getattr(order, "shipping_charges", None))
        commission_total += to_decimal(getattr(order, "commission", None))
    return InvoiceTotals(
        product_total=product_total,
        domestic_total=domestic_total,
        shipping_total=shipping_total,
        commission_total=commission_total,
        grand_total=product_total + domestic_total + shipping_total + commission_total,
    )


def line_total_mismatch(order: Any) -> Optional[Decimal]:
    """
    Difference between an order's total_price and its parsed line sum.

    Returns None when they agree. Informational only; totals are never
    rewritten from the lines.
    """
    line_sum = sum((line.total for line in parse_order_lines(order)), ZERO)
    difference = to_decimal(order.total_price) - line_sum
    return difference if difference != ZERO else None


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if number == 0:
        return "0"
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(digits[rem])
    return "".join(reversed(out))


def combined_invoice_number(now_ms: Optional[int] = None) -> str:
    """Time-derived number for combined invoices. Not guaranteed unique."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"COMB-{_base36(now_ms).upper()}"


def company_profile(settings_map: Dict[str, str]) -> CompanyProfile:
    """Seller block for the invoice header, with site-wide fallbacks."""
    return CompanyProfile(
        name=settings_map.get("invoice_company_name") or settings_map.get("site_name") or "TradeOn.Global",
        address=settings_map.get("invoice_company_address") or settings_map.get("head_office_address") or "",
        phone=settings_map.get("invoice_company_phone") or settings_map.get("contact_phone") or "",
        email=settings_map.get("invoice_company_email") or settings_map.get("contact_email") or "",
        website=settings_map.get("invoice_company_website") or "www.tradeon.global",
        footer_text=settings_map.get("invoice_footer_text") or "Thank you for shopping with us!",
    )


def _bill_to(order: Any) -> Optional[BillTo]:
    profile = getattr(order, "profile", None)
    if profile is None:
        return None
    return BillTo(full_name=profile.full_name, phone=profile.phone, address=profile.address)


def build_invoice(
    orders: Sequence[Any],
    settings_map: Dict[str, str],
    now_ms: Optional[int] = None,
) -> Invoice:
    """
    Aggregate orders into an invoice view.

    More than one order makes a combined invoice. The bill-to block comes
    from the first order; all orders are assumed to share a customer.
    """
    if not orders:
        raise EmptyInvoiceError("At least one order is required to build an invoice")

    is_combined = len(orders) > 1
    first = orders[0]
    invoice_number = combined_invoice_number(now_ms) if is_combined else first.order_number

    sections = []
    all_lines: List[InvoiceLine] = []
    for order in orders:
        lines = parse_order_lines(order)
        domestic = to_decimal(getattr(order, "domestic_courier_charge", None))
        sections.append(InvoiceOrderSection(
            order_id=getattr(order, "id", None),
            order_number=order.order_number,
            invoice_name=getattr(order, "invoice_name", None),
            lines=lines,
            domestic_courier_charge=domestic,
            subtotal=to_decimal(order.total_price) + domestic,
        ))
        all_lines.extend(lines)

    return Invoice(
        invoice_number=invoice_number,
        invoice_date=datetime.now(timezone.utc).date(),
        is_combined=is_combined,
        invoice_name=getattr(first, "invoice_name", None),
        bill_to=_bill_to(first),
        company=company_profile(settings_map),
        sections=sections,
        lines=all_lines,
        totals=calc_totals(orders),
    )


class InvoiceService:
    """Loads orders and builds invoices for them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_orders(self, order_ids: Sequence[uuid.UUID]) -> List[Order]:
        """Fetch orders keeping the caller's ordering. Missing ids are skipped."""
        result = await self.db.execute(select(Order).where(Order.id.in_(list(order_ids))))
        by_id = {order.id: order for order in result.scalars().all()}
        return [by_id[order_id] for order_id in order_ids if order_id in by_id]

    async def invoice_for_orders(
        self,
        orders: Sequence[Order],
        settings_map: Dict[str, str],
    ) -> Invoice:
        for order in orders:
            difference = line_total_mismatch(order)
            if difference is not None:
                logger.warning(
                    f"Order {order.order_number} total differs from its line items by {difference}"
                )
        return build_invoice(orders, settings_map)
