from decimal import Decimal

import pytest

from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.models.client import Client
from backend.app.models.freelancer import Freelancer
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_item import InvoiceItem
from backend.app.models.user import User
from backend.app.schemas.invoice import InvoiceCreate, InvoiceUpdate
from backend.app.schemas.invoice_item import InvoiceItemCreate
from backend.app.services import clients as client_service
from backend.app.services import invoices as invoice_service
from backend.app.services.validation import INVALID_STATUS_MESSAGE

MISSING_ID = "0b9e8f7a-6d5c-4b3a-8f1e-2d3c4b5a6f70"


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def _create_fixture_rows(db, email="owner@example.com"):
    user = User(email=email, hashed_password="x", is_active=True)
    db.add(user)
    db.commit()
    db.refresh(user)
    freelancer = Freelancer(user_id=user.id, name="Owner", email=f"profile-{email}", address="1 Main St")
    db.add(freelancer)
    db.commit()
    db.refresh(freelancer)
    client = Client(freelancer_id=freelancer.id, user_id=user.id, company_name="Acme", email="ap@acme.com")
    db.add(client)
    db.commit()
    db.refresh(client)
    return user, freelancer, client


def _create_invoice(db, user, freelancer, client, rate="100", status=None):
    result = invoice_service.create_invoice(
        db,
        user,
        InvoiceCreate(
            freelancer_id=freelancer.id,
            client_id=client.id,
            date_issued="2025-03-01",
            due_date="2025-03-31",
            status=status,
        ),
        [InvoiceItemCreate(description="Work", quantity=Decimal("1"), rate=Decimal(rate))],
    )
    assert result.ok, result.error
    return result.data


def test_next_number_counts_existing_invoices():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        assert invoice_service.get_next_invoice_number(db, user, freelancer.id).data == "INV-001"
        _create_invoice(db, user, freelancer, client)
        assert invoice_service.get_next_invoice_number(db, user, freelancer.id).data == "INV-002"
    finally:
        db.close()


def test_next_number_rejects_bad_input():
    db = SessionLocal()
    try:
        user, _, _ = _create_fixture_rows(db)
        assert invoice_service.get_next_invoice_number(db, user, "abc").error == "Invalid freelancer ID format"
        assert invoice_service.get_next_invoice_number(db, None, MISSING_ID).error_type == "authentication"
    finally:
        db.close()


def test_list_newest_first_with_relations():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        first = _create_invoice(db, user, freelancer, client)
        second = _create_invoice(db, user, freelancer, client)
        invoices = invoice_service.get_invoices_for_freelancer(db, user, freelancer.id, include_relations=True).data
        assert [invoice.id for invoice in invoices] == [second.id, first.id]
        assert all(invoice.items and invoice.client for invoice in invoices)
    finally:
        db.close()


def test_get_invoice_errors():
    db = SessionLocal()
    try:
        user, _, _ = _create_fixture_rows(db)
        assert invoice_service.get_invoice_with_items(db, user, "nope").error == "Invalid invoice ID format"
        missing = invoice_service.get_invoice_with_items(db, user, MISSING_ID)
        assert missing.error == "Invoice not found"
        assert missing.error_type == "not_found"
    finally:
        db.close()


def test_update_fields_keeps_items():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        invoice = _create_invoice(db, user, freelancer, client)
        result = invoice_service.update_invoice(
            db, user, invoice.id, InvoiceUpdate(due_date="2025-04-30", notes="Net 60", invoice_number=" A-9 ")
        )
        assert result.ok, result.error
        assert result.data.due_date.isoformat() == "2025-04-30"
        assert result.data.notes == "Net 60"
        assert result.data.invoice_number == "A-9"
        assert len(result.data.items) == 1
    finally:
        db.close()


def test_invalid_status_fails_before_lookup():
    db = SessionLocal()
    try:
        user, _, _ = _create_fixture_rows(db)
        result = invoice_service.update_invoice_status(db, user, MISSING_ID, "archived")
        assert result.error == INVALID_STATUS_MESSAGE
        assert result.error_type == "validation"
    finally:
        db.close()


def test_status_transition():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        invoice = _create_invoice(db, user, freelancer, client)
        assert invoice_service.update_invoice_status(db, user, invoice.id, "sent").data.status == "sent"
        assert invoice_service.update_invoice_status(db, user, invoice.id, "paid").data.status == "paid"
    finally:
        db.close()


def test_update_rejects_client_of_another_freelancer():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        other = Freelancer(user_id=user.id, name="Second", email="second@example.com", address="2 Side St")
        db.add(other)
        db.commit()
        foreign_client = Client(freelancer_id=other.id, user_id=user.id, company_name="Globex", email="a@globex.com")
        db.add(foreign_client)
        db.commit()
        invoice = _create_invoice(db, user, freelancer, client)

        result = invoice_service.update_invoice(db, user, invoice.id, InvoiceUpdate(client_id=foreign_client.id))
        assert result.error == "Client does not belong to the specified freelancer"
    finally:
        db.close()


def test_delete_invoice_removes_items():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        invoice = _create_invoice(db, user, freelancer, client)
        assert invoice_service.delete_invoice(db, user, invoice.id).data is True
        assert db.query(Invoice).count() == 0
        assert db.query(InvoiceItem).count() == 0
        assert invoice_service.delete_invoice(db, user, invoice.id).error == "Invoice not found"
    finally:
        db.close()


def test_deleting_client_removes_its_invoices():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        _create_invoice(db, user, freelancer, client)
        assert client_service.delete_client(db, user, client.id).ok
        assert db.query(Invoice).count() == 0
        assert db.query(InvoiceItem).count() == 0
    finally:
        db.close()


def test_stats_group_totals_by_status():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        _create_invoice(db, user, freelancer, client, rate="100")
        _create_invoice(db, user, freelancer, client, rate="250.50", status="paid")
        _create_invoice(db, user, freelancer, client, rate="40", status="sent")
        _create_invoice(db, user, freelancer, client, rate="10", status="overdue")

        stats = invoice_service.get_invoice_stats(db, user, freelancer.id).data
        assert stats["total_invoices"] == 4
        assert stats["total_amount"] == Decimal("400.50")
        assert stats["paid_amount"] == Decimal("250.50")
        assert stats["pending_amount"] == Decimal("40.00")
        assert stats["overdue_amount"] == Decimal("10.00")
    finally:
        db.close()


def test_tax_rate_update_recomputes_totals():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        invoice = _create_invoice(db, user, freelancer, client, rate="250")
        result = invoice_service.update_invoice(db, user, invoice.id, InvoiceUpdate(tax_rate=Decimal("8.25")))
        assert result.ok, result.error
        assert result.data.subtotal == Decimal("250.00")
        assert result.data.tax_amount == Decimal("20.63")
        assert result.data.total == Decimal("270.63")
    finally:
        db.close()


def test_update_cannot_desync_totals_from_items():
    db = SessionLocal()
    try:
        user, freelancer, client = _create_fixture_rows(db)
        invoice = _create_invoice(db, user, freelancer, client, rate="100")

        result = invoice_service.update_invoice(db, user, invoice.id, InvoiceUpdate(total=Decimal("7")))
        assert result.error == "Total must equal subtotal plus tax amount"
        assert result.error_type == "validation"

        too_fine = invoice_service.update_invoice(db, user, invoice.id, InvoiceUpdate(tax_rate=Decimal("1.005")))
        assert too_fine.error == "Numeric fields cannot have more than 2 decimal places"

        db.expire_all()
        stored = db.query(Invoice).filter(Invoice.id == invoice.id).one()
        assert stored.total == Decimal("100.00")
        assert stored.subtotal == sum(item.amount for item in stored.items)
    finally:
        db.close()
