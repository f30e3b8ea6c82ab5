"""Invoice service: numbering, the create protocol, and invoice CRUD.

Invoice creation is two separate writes, the invoice row and then its item
rows. If the item write fails, the invoice row is removed again by a
compensating delete so no invoice is left behind without items.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from backend.app.core.errors import (
    NotFoundError,
    RelationshipError,
    UnknownStorageError,
    ValidationError,
    service_boundary,
    translate_integrity_error,
)
from backend.app.models.client import Client
from backend.app.models.freelancer import Freelancer
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_item import InvoiceItem
from backend.app.models.user import User
from backend.app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from backend.app.schemas.invoice_item import InvoiceItemCreate
from backend.app.services.access import require_user, require_uuid
from backend.app.services.calculations import (
    calculate_invoice_totals,
    calculate_item_amount,
    format_sequential_invoice_number,
    round_money,
)
from backend.app.services.validation import check_invoice_totals, validate_invoice_input, validate_invoice_update

logger = logging.getLogger(__name__)

DUPLICATE_NUMBER_MESSAGE = "Invoice number already exists"
MISSING_REFERENCE_MESSAGE = "Invalid freelancer or client ID - referenced record does not exist"


def _scoped(db: Session, user: User):
    return db.query(Invoice).filter(Invoice.user_id == user.id)


def _get_owned_invoice(db: Session, user: User, invoice_id: str, with_relations: bool = False) -> Invoice:
    query = _scoped(db, user).filter(Invoice.id == invoice_id)
    if with_relations:
        query = query.options(
            selectinload(Invoice.items),
            selectinload(Invoice.client),
            selectinload(Invoice.freelancer),
        )
    invoice = query.first()
    if not invoice:
        raise NotFoundError("Invoice not found")
    return invoice


def _storage_message(exc: SQLAlchemyError, fallback: str) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig or exc) or fallback


# Numbering


def _next_invoice_number(db: Session, user: User, freelancer_id: Optional[str]) -> str:
    # Count-then-format: two concurrent creations can read the same count.
    require_uuid(freelancer_id, "Invalid freelancer ID format")
    count = (
        db.query(func.count(Invoice.id))
        .filter(Invoice.freelancer_id == freelancer_id, Invoice.user_id == user.id)
        .scalar()
    )
    return format_sequential_invoice_number((count or 0) + 1)


@service_boundary("generating invoice number")
def get_next_invoice_number(db: Session, user: Optional[User], freelancer_id: str) -> str:
    user = require_user(user)
    return _next_invoice_number(db, user, freelancer_id)


# Creation protocol


def _price_items(items: Sequence[InvoiceItemCreate]) -> List[Dict[str, Any]]:
    priced = []
    for item in items:
        data = item.model_dump()
        if data["amount"] is None:
            data["amount"] = calculate_item_amount(data["quantity"], data["rate"])
        priced.append(data)
    return priced


def _fill_totals(draft: Dict[str, Any], items: List[Dict[str, Any]]) -> None:
    # Stored totals always come from the items; supplied values were checked to match.
    tax_rate = draft.get("tax_rate") or Decimal("0")
    draft["subtotal"], draft["tax_amount"], draft["total"] = calculate_invoice_totals(items, tax_rate)
    draft["tax_rate"] = tax_rate


def _validate_relationships(db: Session, user: User, draft: Dict[str, Any]) -> None:
    freelancer = (
        db.query(Freelancer.id)
        .filter(Freelancer.id == draft["freelancer_id"], Freelancer.user_id == user.id)
        .first()
    )
    if not freelancer:
        raise NotFoundError("Freelancer not found")

    client = (
        db.query(Client.id, Client.freelancer_id)
        .filter(Client.id == draft["client_id"], Client.user_id == user.id)
        .first()
    )
    if not client:
        raise NotFoundError("Client not found")
    if client.freelancer_id != draft["freelancer_id"]:
        raise RelationshipError("Client does not belong to the specified freelancer")


def _insert_invoice_row(db: Session, invoice: Invoice) -> Invoice:
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


def _insert_invoice_items(db: Session, invoice_id: str, items: List[Dict[str, Any]]) -> List[InvoiceItem]:
    rows = [
        InvoiceItem(
            invoice_id=invoice_id,
            position=position,
            description=item["description"].strip(),
            quantity=item["quantity"],
            rate=item["rate"],
            amount=round_money(item["amount"]),
        )
        for position, item in enumerate(items)
    ]
    db.add_all(rows)
    db.commit()
    return rows


def _delete_invoice_row(db: Session, invoice_id: str) -> None:
    db.query(Invoice).filter(Invoice.id == invoice_id).delete(synchronize_session=False)
    db.commit()


def _compensate_invoice(db: Session, invoice_id: str) -> None:
    """Best-effort removal of an invoice whose items could not be written.

    Deleting an already-missing row is a no-op, so this is safe to repeat.
    A failure here is logged and swallowed so it cannot mask the item error.
    """
    try:
        _delete_invoice_row(db, invoice_id)
        logger.warning("Rolled back invoice %s after item insert failure", invoice_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Rollback of invoice %s failed: %s", invoice_id, exc)


@service_boundary("creating the invoice")
def create_invoice(
    db: Session,
    user: Optional[User],
    invoice: InvoiceCreate,
    items: Sequence[InvoiceItemCreate],
) -> Invoice:
    user = require_user(user)
    draft = invoice.model_dump()

    if not draft.get("invoice_number"):
        draft["invoice_number"] = _next_invoice_number(db, user, draft.get("freelancer_id"))

    item_data = _price_items(items or [])
    validation_error = validate_invoice_input(draft, item_data)
    if validation_error:
        raise ValidationError(validation_error)
    _fill_totals(draft, item_data)

    _validate_relationships(db, user, draft)

    invoice_row = Invoice(
        freelancer_id=draft["freelancer_id"],
        client_id=draft["client_id"],
        user_id=user.id,
        invoice_number=draft["invoice_number"],
        date_issued=date.fromisoformat(draft["date_issued"]),
        due_date=date.fromisoformat(draft["due_date"]),
        subtotal=round_money(draft["subtotal"]),
        tax_rate=draft["tax_rate"],
        tax_amount=round_money(draft["tax_amount"]),
        total=round_money(draft["total"]),
        status=draft.get("status") or "draft",
        notes=draft.get("notes") or None,
    )
    try:
        _insert_invoice_row(db, invoice_row)
    except IntegrityError as exc:
        db.rollback()
        logger.error("Error creating invoice: %s", exc.orig)
        raise translate_integrity_error(
            exc,
            unique_message=DUPLICATE_NUMBER_MESSAGE,
            foreign_key_message=MISSING_REFERENCE_MESSAGE,
        ) from exc

    invoice_id = invoice_row.id
    try:
        _insert_invoice_items(db, invoice_id, item_data)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Error creating invoice items for %s: %s", invoice_id, exc)
        _compensate_invoice(db, invoice_id)
        raise UnknownStorageError(_storage_message(exc, "Failed to create invoice items")) from exc

    logger.info("Created invoice %s (%s) with %d items", invoice_row.invoice_number, invoice_id, len(item_data))
    return _get_owned_invoice(db, user, invoice_id, with_relations=True)


# Reads


@service_boundary("fetching invoices")
def get_invoices_for_freelancer(
    db: Session,
    user: Optional[User],
    freelancer_id: str,
    include_relations: bool = False,
) -> List[Invoice]:
    user = require_user(user)
    require_uuid(freelancer_id, "Invalid freelancer ID format")
    query = _scoped(db, user).filter(Invoice.freelancer_id == freelancer_id)
    if include_relations:
        query = query.options(
            selectinload(Invoice.items),
            selectinload(Invoice.client),
            selectinload(Invoice.freelancer),
        )
    return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()


@service_boundary("fetching the invoice")
def get_invoice_with_items(db: Session, user: Optional[User], invoice_id: str) -> Invoice:
    user = require_user(user)
    require_uuid(invoice_id, "Invalid invoice ID format")
    return _get_owned_invoice(db, user, invoice_id, with_relations=True)


@service_boundary("fetching invoice statistics")
def get_invoice_stats(db: Session, user: Optional[User], freelancer_id: str) -> Dict[str, Any]:
    user = require_user(user)
    require_uuid(freelancer_id, "Invalid freelancer ID format")
    rows = (
        _scoped(db, user)
        .with_entities(Invoice.total, Invoice.status)
        .filter(Invoice.freelancer_id == freelancer_id)
        .all()
    )

    def _sum(status: Optional[str] = None) -> Decimal:
        return round_money(sum((row.total for row in rows if status is None or row.status == status), Decimal("0")))

    return {
        "total_invoices": len(rows),
        "total_amount": _sum(),
        "paid_amount": _sum("paid"),
        "pending_amount": _sum("sent"),
        "overdue_amount": _sum("overdue"),
    }


# Mutations


@service_boundary("updating the invoice")
def update_invoice(db: Session, user: Optional[User], invoice_id: str, updates: InvoiceUpdate) -> Invoice:
    """Apply a partial update to invoice fields; items are left untouched.

    Subtotal, tax amount and total are recomputed from the items, so supplied
    values must agree with them.
    """
    user = require_user(user)
    require_uuid(invoice_id, "Invalid invoice ID format")
    fields = {
        name: value
        for name, value in updates.model_dump(exclude_unset=True).items()
        if value is not None or name == "notes"
    }
    validation_error = validate_invoice_update(fields)
    if validation_error:
        raise ValidationError(validation_error)

    invoice = _get_owned_invoice(db, user, invoice_id)
    if "client_id" in fields and fields["client_id"] != invoice.client_id:
        client = db.query(Client).filter(Client.id == fields["client_id"], Client.user_id == user.id).first()
        if not client:
            raise NotFoundError("Client not found")
        if client.freelancer_id != invoice.freelancer_id:
            raise RelationshipError("Client does not belong to the specified freelancer")

    # Totals are derived from the stored items and the (possibly new) tax rate.
    tax_rate = fields.get("tax_rate", invoice.tax_rate)
    totals_error = check_invoice_totals(fields, invoice.items, tax_rate)
    if totals_error:
        raise ValidationError(totals_error)
    fields["subtotal"], fields["tax_amount"], fields["total"] = calculate_invoice_totals(invoice.items, tax_rate)

    for name, value in fields.items():
        if name in ("date_issued", "due_date"):
            value = date.fromisoformat(value)
        elif name == "invoice_number":
            value = value.strip()
        setattr(invoice, name, value)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Error updating invoice %s: %s", invoice_id, exc.orig)
        raise translate_integrity_error(exc, unique_message=DUPLICATE_NUMBER_MESSAGE) from exc
    return _get_owned_invoice(db, user, invoice_id, with_relations=True)


def update_invoice_status(db: Session, user: Optional[User], invoice_id: str, status: str):
    return update_invoice(db, user, invoice_id, InvoiceUpdate(status=status))


@service_boundary("deleting the invoice")
def delete_invoice(db: Session, user: Optional[User], invoice_id: str) -> bool:
    user = require_user(user)
    require_uuid(invoice_id, "Invalid invoice ID format")
    invoice = _get_owned_invoice(db, user, invoice_id)
    db.delete(invoice)
    db.commit()
    logger.info("Deleted invoice %s", invoice_id)
    return True
