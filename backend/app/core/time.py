"""Time utilities for timezone-aware UTC datetimes and display dates."""

from datetime import UTC, date, datetime


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def format_display_date(value: date | datetime) -> str:
    """Render a date the way printed invoices show it, e.g. ``Mar 07, 2025``."""
    return value.strftime("%b %d, %Y")
