from decimal import Decimal

from backend.app.services.validation import (
    INVALID_STATUS_MESSAGE,
    check_invoice_totals,
    clean_optional,
    is_valid_date_string,
    is_valid_email,
    is_valid_uuid,
    validate_invoice_input,
    validate_invoice_update,
    validate_items,
)

FREELANCER_ID = "3f1c2b8e-5d4a-4c1b-9e2f-7a6b5c4d3e21"
CLIENT_ID = "8a7b6c5d-4e3f-4a1b-8c9d-0e1f2a3b4c5d"


def _invoice(**overrides):
    invoice = {
        "freelancer_id": FREELANCER_ID,
        "client_id": CLIENT_ID,
        "invoice_number": "INV-001",
        "date_issued": "2025-01-15",
        "due_date": "2025-02-14",
        "subtotal": Decimal("100.00"),
        "tax_rate": Decimal("0"),
        "tax_amount": Decimal("0.00"),
        "total": Decimal("100.00"),
    }
    invoice.update(overrides)
    return invoice


ITEMS = [{"description": "Design", "quantity": Decimal("1"), "rate": Decimal("100"), "amount": Decimal("100.00")}]


def test_uuid_format():
    assert is_valid_uuid(FREELANCER_ID)
    assert is_valid_uuid(FREELANCER_ID.upper())
    assert not is_valid_uuid("not-a-uuid")
    assert not is_valid_uuid("3f1c2b8e-5d4a-6c1b-9e2f-7a6b5c4d3e21")
    assert not is_valid_uuid(None)


def test_email_format():
    assert is_valid_email("a@b.co")
    assert not is_valid_email("a@b")
    assert not is_valid_email("a b@c.com")


def test_date_strings_must_be_real_days():
    assert is_valid_date_string("2024-02-29")
    assert not is_valid_date_string("2023-02-29")
    assert not is_valid_date_string("2025-1-5")
    assert not is_valid_date_string("15/01/2025")


def test_clean_optional():
    assert clean_optional("  x ") == "x"
    assert clean_optional("   ") is None
    assert clean_optional(None) is None


def test_valid_invoice_passes():
    assert validate_invoice_input(_invoice(), ITEMS) is None


def test_missing_required_fields():
    assert (
        validate_invoice_input(_invoice(invoice_number=""), ITEMS)
        == "Missing required fields: freelancer_id, client_id, or invoice_number"
    )


def test_id_formats():
    assert validate_invoice_input(_invoice(freelancer_id="abc"), ITEMS) == "Invalid freelancer_id format"
    assert validate_invoice_input(_invoice(client_id="abc"), ITEMS) == "Invalid client_id format"


def test_date_formats():
    assert validate_invoice_input(_invoice(date_issued="2025/01/15"), ITEMS) == "Invalid date_issued format. Use YYYY-MM-DD"
    assert validate_invoice_input(_invoice(due_date="soon"), ITEMS) == "Invalid due_date format. Use YYYY-MM-DD"


def test_negative_numbers_rejected():
    assert validate_invoice_input(_invoice(tax_rate=Decimal("-1")), ITEMS) == "Numeric fields cannot be negative"


def test_status_must_be_known():
    assert validate_invoice_input(_invoice(status="cancelled"), ITEMS) == INVALID_STATUS_MESSAGE
    assert INVALID_STATUS_MESSAGE == "Invalid status. Must be one of: draft, sent, paid, overdue"


def test_item_messages_are_one_indexed():
    assert validate_items([]) == "At least one invoice item is required"
    bad = [ITEMS[0], {"description": " ", "quantity": 1, "rate": 1}]
    assert validate_items(bad) == "Item 2: Description is required"
    assert validate_items([{"description": "x", "quantity": 0, "rate": 1}]) == "Item 1: Quantity must be greater than 0"
    assert validate_items([{"description": "x", "quantity": 1, "rate": -1}]) == "Item 1: Rate cannot be negative"
    assert (
        validate_items([{"description": "x", "quantity": 1, "rate": 1, "amount": -1}])
        == "Item 1: Amount cannot be negative"
    )


def test_update_validation():
    assert validate_invoice_update({"status": "paid"}) is None
    assert validate_invoice_update({"status": "void"}) == INVALID_STATUS_MESSAGE
    assert validate_invoice_update({"invoice_number": "  "}) == "Invoice number cannot be blank"
    assert validate_invoice_update({"due_date": "2025-13-01"}) == "Invalid due_date format. Use YYYY-MM-DD"
    assert validate_invoice_update({"total": Decimal("-0.01")}) == "Numeric fields cannot be negative"


def test_precision_beyond_cents_rejected():
    assert validate_items([{"description": "x", "quantity": Decimal("0.001"), "rate": 1}]) == (
        "Item 1: Quantity cannot have more than 2 decimal places"
    )
    assert validate_items([{"description": "x", "quantity": 1, "rate": Decimal("9.999")}]) == (
        "Item 1: Rate cannot have more than 2 decimal places"
    )
    assert validate_items([{"description": "x", "quantity": Decimal("1.500"), "rate": 1}]) is None
    assert validate_invoice_input(_invoice(tax_rate=Decimal("12.345")), ITEMS) == (
        "Numeric fields cannot have more than 2 decimal places"
    )
    assert validate_invoice_update({"tax_rate": Decimal("0.125")}) == "Numeric fields cannot have more than 2 decimal places"


def test_supplied_amounts_must_agree_with_items():
    assert validate_items([{"description": "x", "quantity": 2, "rate": 10, "amount": 15}]) == (
        "Item 1: Amount must equal quantity times rate"
    )
    assert validate_invoice_input(_invoice(subtotal=Decimal("1")), ITEMS) == "Subtotal must equal the sum of item amounts"
    assert validate_invoice_input(_invoice(tax_amount=Decimal("5")), ITEMS) == "Tax amount must equal subtotal times tax rate"
    assert validate_invoice_input(_invoice(total=Decimal("7")), ITEMS) == "Total must equal subtotal plus tax amount"
    assert check_invoice_totals({"total": None}, ITEMS, 0) is None
