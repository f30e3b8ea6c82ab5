"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from backend.app.schemas.client import ClientRead
from backend.app.schemas.freelancer import FreelancerRead
from backend.app.schemas.invoice_item import InvoiceItemCreate, InvoiceItemRead


class InvoiceCreate(BaseModel):
    freelancer_id: Optional[str] = None
    client_id: str
    invoice_number: Optional[str] = None
    # Dates stay strings here so the service can report format errors itself.
    date_issued: str
    due_date: str
    subtotal: Optional[Decimal] = None
    tax_rate: Decimal = Decimal("0")
    tax_amount: Optional[Decimal] = None
    total: Optional[Decimal] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class InvoiceCreateRequest(InvoiceCreate):
    items: List[InvoiceItemCreate]


class InvoiceUpdate(BaseModel):
    client_id: Optional[str] = None
    invoice_number: Optional[str] = None
    date_issued: Optional[str] = None
    due_date: Optional[str] = None
    subtotal: Optional[Decimal] = None
    tax_rate: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total: Optional[Decimal] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class InvoiceStatusUpdate(BaseModel):
    status: str


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    freelancer_id: str
    client_id: str
    user_id: Optional[str] = None

    invoice_number: str
    date_issued: date
    due_date: date
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    status: str
    notes: Optional[str] = None

    created_at: datetime
    updated_at: datetime


class InvoiceWithItemsRead(InvoiceRead):
    items: List[InvoiceItemRead] = []


class InvoiceWithRelationsRead(InvoiceWithItemsRead):
    client: ClientRead
    freelancer: FreelancerRead


class InvoiceNumberRead(BaseModel):
    invoice_number: str


class InvoiceStats(BaseModel):
    total_invoices: int
    total_amount: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    overdue_amount: Decimal
