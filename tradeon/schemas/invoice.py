"""Pydantic schemas for derived invoices."""
from datetime import date
from decimal import Decimal
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field


class InvoiceLine(BaseModel):
    """One itemized row."""
    name: str
    qty: int
    unit_price: Decimal
    total: Decimal


class InvoiceTotals(BaseModel):
    product_total: Decimal = Decimal("0")
    domestic_total: Decimal = Decimal("0")
    shipping_total: Decimal = Decimal("0")
    commission_total: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")


class InvoiceOrderSection(BaseModel):
    """Rows contributed by a single order."""
    order_id: Optional[uuid.UUID] = None
    order_number: str
    invoice_name: Optional[str] = None
    lines: List[InvoiceLine]
    domestic_courier_charge: Decimal = Decimal("0")
    subtotal: Decimal


class BillTo(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CompanyProfile(BaseModel):
    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    footer_text: str = ""


class Invoice(BaseModel):
    invoice_number: str
    invoice_date: date
    is_combined: bool
    invoice_name: Optional[str] = None
    bill_to: Optional[BillTo] = None
    company: CompanyProfile
    sections: List[InvoiceOrderSection]
    lines: List[InvoiceLine]
    totals: InvoiceTotals


class CombinedInvoiceRequest(BaseModel):
    """Orders to aggregate into one invoice."""
    order_ids: List[uuid.UUID] = Field(default_factory=list)
