"""Monetary calculations for invoices.

Every stage rounds to cents on its own with half-up rounding, so a total is
always the exact sum of an already-rounded subtotal and tax amount.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

CENTS = Decimal("0.01")


def to_decimal(value: Decimal | float | int | str | None) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    # str() first so 0.1 becomes Decimal("0.1"), not its binary approximation.
    return Decimal(str(value))


def round_money(value: Decimal | float | int | str | None) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def calculate_item_amount(quantity: Decimal | float | int, rate: Decimal | float | int) -> Decimal:
    return round_money(to_decimal(quantity) * to_decimal(rate))


def _item_amount(item: Any) -> Decimal:
    if isinstance(item, Mapping):
        return to_decimal(item.get("amount"))
    return to_decimal(getattr(item, "amount", None))


def calculate_subtotal(items: Iterable[Any]) -> Decimal:
    return round_money(sum((_item_amount(item) for item in items), Decimal("0")))


def calculate_tax_amount(subtotal: Decimal | float | int, tax_rate: Decimal | float | int) -> Decimal:
    return round_money(to_decimal(subtotal) * to_decimal(tax_rate) / Decimal("100"))


def calculate_total(subtotal: Decimal | float | int, tax_amount: Decimal | float | int) -> Decimal:
    return round_money(to_decimal(subtotal) + to_decimal(tax_amount))


def calculate_invoice_totals(items: Iterable[Any], tax_rate: Decimal | float | int) -> tuple[Decimal, Decimal, Decimal]:
    """Return ``(subtotal, tax_amount, total)`` for already-priced items."""
    subtotal = calculate_subtotal(items)
    tax_amount = calculate_tax_amount(subtotal, tax_rate)
    return subtotal, tax_amount, calculate_total(subtotal, tax_amount)


def format_currency(amount: Decimal | float | int | None) -> str:
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def generate_invoice_number(counter: int) -> str:
    """Counter-based number used by the offline store, e.g. ``INV-0007``."""
    return f"INV-{counter:04d}"


def format_sequential_invoice_number(sequence: int) -> str:
    """Count-based number used by the hosted store, e.g. ``INV-007``."""
    return f"INV-{sequence:03d}"
