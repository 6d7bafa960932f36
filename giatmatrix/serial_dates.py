"""Spreadsheet day-serial conversion and date matching.

A day-serial counts days from the legacy spreadsheet epoch 1899-12-30. Only
the integer part is meaningful for matching; time-of-day fractions are
dropped.
"""

from __future__ import annotations

import datetime
import math
from typing import Any, Optional

SERIAL_EPOCH = datetime.date(1899, 12, 30)


def serial_to_date(value: Any) -> Optional[datetime.date]:
    """Convert a raw header cell value to a calendar date.

    Args:
        value: Cell value as returned with unformatted rendering

    Returns:
        ``SERIAL_EPOCH + floor(value)`` days, or None for empty, non-numeric,
        negative or non-finite values.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    try:
        return SERIAL_EPOCH + datetime.timedelta(days=math.floor(value))
    except OverflowError:
        return None


def date_to_serial(value: datetime.date) -> int:
    """Inverse of :func:`serial_to_date` for whole days."""
    if isinstance(value, datetime.datetime):
        value = value.date()
    return (value - SERIAL_EPOCH).days


def matches_date(value: Any, target: datetime.date) -> bool:
    """Return True when the cell value decodes to ``target``'s (year, month, day)."""
    decoded = serial_to_date(value)
    if decoded is None:
        return False
    if isinstance(target, datetime.datetime):
        target = target.date()
    return (decoded.year, decoded.month, decoded.day) == (target.year, target.month, target.day)
