"""Input validation shared by the entity services."""

import re
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from backend.app.models.invoice import INVOICE_STATUSES
from backend.app.services.calculations import CENTS, calculate_invoice_totals, calculate_item_amount, to_decimal

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INVALID_STATUS_MESSAGE = "Invalid status. Must be one of: " + ", ".join(INVOICE_STATUSES)
PRECISION_MESSAGE = "Numeric fields cannot have more than 2 decimal places"

MONEY_FIELDS = ("subtotal", "tax_rate", "tax_amount", "total")


def is_valid_uuid(value: Any) -> bool:
    return isinstance(value, str) and bool(UUID_PATTERN.match(value))


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value))


def is_valid_date_string(value: Any) -> bool:
    """Accept ``YYYY-MM-DD`` only when it names a real calendar day."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        return date.fromisoformat(value).isoformat() == value
    except ValueError:
        return False


def is_valid_status(value: Any) -> bool:
    return value in INVOICE_STATUSES


def normalize_email(value: str) -> str:
    return value.strip().lower()


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Trim an optional text field, collapsing blanks to ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def _is_negative(value: Any) -> bool:
    return value is not None and Decimal(str(value)) < 0


def has_excess_precision(value: Any) -> bool:
    """True when ``value`` carries more than the two decimal places stored."""
    if value is None:
        return False
    number = to_decimal(value)
    return number != number.quantize(CENTS)


def validate_items(items: Optional[Sequence[Any]]) -> Optional[str]:
    if not items:
        return "At least one invoice item is required"
    for index, item in enumerate(items, start=1):
        description = _field(item, "description")
        if not description or not str(description).strip():
            return f"Item {index}: Description is required"
        quantity = _field(item, "quantity")
        if quantity is None or Decimal(str(quantity)) <= 0:
            return f"Item {index}: Quantity must be greater than 0"
        if has_excess_precision(quantity):
            return f"Item {index}: Quantity cannot have more than 2 decimal places"
        rate = _field(item, "rate")
        if rate is None or _is_negative(rate):
            return f"Item {index}: Rate cannot be negative"
        if has_excess_precision(rate):
            return f"Item {index}: Rate cannot have more than 2 decimal places"
        amount = _field(item, "amount")
        if _is_negative(amount):
            return f"Item {index}: Amount cannot be negative"
        if amount is not None and to_decimal(amount) != calculate_item_amount(quantity, rate):
            return f"Item {index}: Amount must equal quantity times rate"
    return None


def check_invoice_totals(provided: Any, items: Sequence[Any], tax_rate: Any) -> Optional[str]:
    """Compare caller-supplied totals with the ones derived from ``items``.

    Fields left as ``None`` are not checked; they are filled in by the caller.
    """
    amounts = []
    for item in items:
        amount = _field(item, "amount")
        if amount is None:
            amount = calculate_item_amount(_field(item, "quantity"), _field(item, "rate"))
        amounts.append({"amount": amount})
    subtotal, tax_amount, total = calculate_invoice_totals(amounts, tax_rate or 0)
    given = _field(provided, "subtotal")
    if given is not None and to_decimal(given) != subtotal:
        return "Subtotal must equal the sum of item amounts"
    given = _field(provided, "tax_amount")
    if given is not None and to_decimal(given) != tax_amount:
        return "Tax amount must equal subtotal times tax rate"
    given = _field(provided, "total")
    if given is not None and to_decimal(given) != total:
        return "Total must equal subtotal plus tax amount"
    return None


def validate_invoice_input(invoice: Any, items: Optional[Sequence[Any]]) -> Optional[str]:
    """Return the first structural problem with a new invoice, or ``None``."""
    freelancer_id = _field(invoice, "freelancer_id")
    client_id = _field(invoice, "client_id")
    if not freelancer_id or not client_id or not _field(invoice, "invoice_number"):
        return "Missing required fields: freelancer_id, client_id, or invoice_number"
    if not is_valid_uuid(freelancer_id):
        return "Invalid freelancer_id format"
    if not is_valid_uuid(client_id):
        return "Invalid client_id format"

    if not is_valid_date_string(_field(invoice, "date_issued")):
        return "Invalid date_issued format. Use YYYY-MM-DD"
    if not is_valid_date_string(_field(invoice, "due_date")):
        return "Invalid due_date format. Use YYYY-MM-DD"

    if any(_is_negative(_field(invoice, name)) for name in MONEY_FIELDS):
        return "Numeric fields cannot be negative"
    if any(has_excess_precision(_field(invoice, name)) for name in MONEY_FIELDS):
        return PRECISION_MESSAGE

    status = _field(invoice, "status")
    if status and not is_valid_status(status):
        return INVALID_STATUS_MESSAGE

    return validate_items(items) or check_invoice_totals(invoice, items, _field(invoice, "tax_rate"))


def validate_invoice_update(updates: Mapping[str, Any]) -> Optional[str]:
    """Validate a partial invoice update before it reaches storage."""
    if "status" in updates and not is_valid_status(updates["status"]):
        return INVALID_STATUS_MESSAGE
    if "client_id" in updates and not is_valid_uuid(updates["client_id"]):
        return "Invalid client_id format"
    if "invoice_number" in updates and not str(updates["invoice_number"] or "").strip():
        return "Invoice number cannot be blank"
    for name in ("date_issued", "due_date"):
        if name in updates and not is_valid_date_string(updates[name]):
            return f"Invalid {name} format. Use YYYY-MM-DD"
    if any(_is_negative(updates.get(name)) for name in MONEY_FIELDS):
        return "Numeric fields cannot be negative"
    if any(has_excess_precision(updates.get(name)) for name in MONEY_FIELDS):
        return PRECISION_MESSAGE
    return None
