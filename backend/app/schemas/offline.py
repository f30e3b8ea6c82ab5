"""Records kept by the offline (local storage) variant.

These serialize with camelCase keys, the shape of the export/import document.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.app.core.time import utc_now


class OfflineRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FreelancerInfo(OfflineRecord):
    id: str
    name: str
    email: str
    address: str
    phone: Optional[str] = None
    website: Optional[str] = None


class ClientRecord(OfflineRecord):
    id: str
    company_name: str
    contact_name: Optional[str] = None
    email: str
    address: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)


class InvoiceItemRecord(OfflineRecord):
    id: str
    description: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


class InvoiceRecord(OfflineRecord):
    id: str
    invoice_number: str
    date_issued: date
    due_date: date
    freelancer: FreelancerInfo
    client: ClientRecord
    items: List[InvoiceItemRecord]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    status: Literal["draft", "sent", "paid", "overdue"] = "draft"
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class InvoiceFormItem(OfflineRecord):
    description: str
    quantity: Decimal
    rate: Decimal


class InvoiceForm(OfflineRecord):
    invoice_number: Optional[str] = None
    date_issued: date
    due_date: date
    client_id: str
    items: List[InvoiceFormItem]
    tax_rate: Decimal = Decimal("0")
    notes: Optional[str] = None
