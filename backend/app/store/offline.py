"""State container for the offline variant, persisted through ``LocalStorage``."""

import uuid
from typing import Any, List, Optional

from backend.app.core.errors import NotFoundError, ValidationError
from backend.app.core.time import utc_now
from backend.app.schemas.offline import (
    ClientRecord,
    FreelancerInfo,
    InvoiceForm,
    InvoiceItemRecord,
    InvoiceRecord,
)
from backend.app.services.calculations import (
    calculate_invoice_totals,
    calculate_item_amount,
    generate_invoice_number,
)
from backend.app.services.validation import (
    INVALID_STATUS_MESSAGE,
    PRECISION_MESSAGE,
    has_excess_precision,
    is_valid_status,
    normalize_email,
    validate_items,
)
from backend.app.storage.local import LocalStorage


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


class OfflineStore:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self._load()

    def _load(self) -> None:
        self.freelancer: Optional[FreelancerInfo] = self.storage.get_freelancer()
        self.clients: List[ClientRecord] = self.storage.get_clients()
        self.invoices: List[InvoiceRecord] = self.storage.get_invoices()
        self.invoice_counter: int = self.storage.get_invoice_counter()

    # Freelancer

    def set_freelancer(self, freelancer: FreelancerInfo) -> None:
        self.storage.save_freelancer(freelancer)
        self.freelancer = freelancer

    # Clients

    def add_client(self, **fields: Any) -> ClientRecord:
        if "email" in fields and fields["email"]:
            fields["email"] = normalize_email(fields["email"])
        client = ClientRecord(id=_new_id("client"), created_at=utc_now(), **fields)
        clients = [*self.clients, client]
        self.storage.save_clients(clients)
        self.clients = clients
        return client

    def update_client(self, client_id: str, **changes: Any) -> None:
        clients = [
            client.model_copy(update=changes) if client.id == client_id else client
            for client in self.clients
        ]
        self.storage.save_clients(clients)
        self.clients = clients

    def delete_client(self, client_id: str) -> None:
        clients = [client for client in self.clients if client.id != client_id]
        self.storage.save_clients(clients)
        self.clients = clients

    def get_client(self, client_id: str) -> Optional[ClientRecord]:
        return next((client for client in self.clients if client.id == client_id), None)

    # Invoices

    def add_invoice(self, **fields: Any) -> InvoiceRecord:
        now = utc_now()
        invoice = InvoiceRecord(id=_new_id("invoice"), created_at=now, updated_at=now, **fields)
        invoices = [*self.invoices, invoice]
        self.storage.save_invoices(invoices)
        self.invoices = invoices
        return invoice

    def create_invoice_from_form(self, form: InvoiceForm) -> InvoiceRecord:
        """Price the form's items, add the invoice, and advance the counter."""
        if self.freelancer is None:
            raise ValidationError("Freelancer profile is required")
        client = self.get_client(form.client_id)
        if client is None:
            raise NotFoundError("Client not found")
        error = validate_items(form.items)
        if error is None and has_excess_precision(form.tax_rate):
            error = PRECISION_MESSAGE
        if error:
            raise ValidationError(error)

        items = [
            InvoiceItemRecord(
                id=_new_id("item"),
                description=item.description.strip(),
                quantity=item.quantity,
                rate=item.rate,
                amount=calculate_item_amount(item.quantity, item.rate),
            )
            for item in form.items
        ]
        subtotal, tax_amount, total = calculate_invoice_totals(items, form.tax_rate)
        invoice = self.add_invoice(
            invoice_number=form.invoice_number or self.next_invoice_number(),
            date_issued=form.date_issued,
            due_date=form.due_date,
            freelancer=self.freelancer,
            client=client,
            items=items,
            subtotal=subtotal,
            tax_rate=form.tax_rate,
            tax_amount=tax_amount,
            total=total,
            status="draft",
            notes=form.notes,
        )
        self.increment_invoice_counter()
        return invoice

    def update_invoice(self, invoice_id: str, **changes: Any) -> None:
        self._require_invoice(invoice_id)
        if "status" in changes and not is_valid_status(changes["status"]):
            raise ValidationError(INVALID_STATUS_MESSAGE)
        invoices = [
            invoice.model_copy(update={**changes, "updated_at": utc_now()}) if invoice.id == invoice_id else invoice
            for invoice in self.invoices
        ]
        self.storage.save_invoices(invoices)
        self.invoices = invoices

    def delete_invoice(self, invoice_id: str) -> None:
        invoices = [invoice for invoice in self.invoices if invoice.id != invoice_id]
        self.storage.save_invoices(invoices)
        self.invoices = invoices

    def get_invoice(self, invoice_id: str) -> Optional[InvoiceRecord]:
        return next((invoice for invoice in self.invoices if invoice.id == invoice_id), None)

    def _require_invoice(self, invoice_id: str) -> InvoiceRecord:
        invoice = self.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")
        return invoice

    # Invoice counter

    def next_invoice_number(self) -> str:
        return generate_invoice_number(self.invoice_counter)

    def increment_invoice_counter(self) -> None:
        counter = self.invoice_counter + 1
        self.storage.save_invoice_counter(counter)
        self.invoice_counter = counter

    # Whole-store operations

    def export_data(self) -> str:
        return self.storage.export_data()

    def import_data(self, json_data: str) -> bool:
        imported = self.storage.import_data(json_data)
        if imported:
            self._load()
        return imported

    def reset(self) -> None:
        self.storage.clear_all()
        self._load()
