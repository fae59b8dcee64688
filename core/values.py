"""Coercion helpers for values coming back from the store.

Aggregates may arrive as ``Decimal``, ``int``, ``str`` or ``None`` depending
on the backend, and legacy text columns may hold padded or numeric values.
"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def as_text(value: Any) -> str:
    """Return a trimmed string, or ``''`` for anything that is not text-like."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        return str(value) if math.isfinite(value) else ""
    return ""


def as_optional_number(value: Any) -> Optional[float]:
    """Return a finite float, or ``None`` when the value is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, Decimal):
        try:
            number = float(value)
        except (InvalidOperation, ValueError):
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def as_number(value: Any) -> float:
    """Like :func:`as_optional_number` but non-numeric input counts as zero."""
    number = as_optional_number(value)
    return 0.0 if number is None else number


def as_iso_date(value: Any) -> Optional[str]:
    """Format a date-like value as ISO-8601, or ``None`` when unparseable."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).isoformat()
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).isoformat()
        except ValueError:
            return None
    return None
