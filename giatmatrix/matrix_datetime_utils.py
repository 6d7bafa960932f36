"""Date and time helpers for the activity matrix.

All matrix dates are interpreted in one fixed local zone (Asia/Jakarta by
default); sheet names use Indonesian month names.
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_MATRIX_TIMEZONE = "Asia/Jakarta"
DEFAULT_SHEET_PREFIX = "Giat"

INDONESIAN_MONTHS = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)


def get_zone(name: Optional[str] = None) -> ZoneInfo:
    """Return the ZoneInfo for ``name``, falling back to the matrix default.

    Args:
        name: IANA zone name; None selects Asia/Jakarta

    Returns:
        ZoneInfo instance
    """
    zone_name = name or DEFAULT_MATRIX_TIMEZONE
    try:
        return ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, falling back to %s", zone_name, DEFAULT_MATRIX_TIMEZONE)
        return ZoneInfo(DEFAULT_MATRIX_TIMEZONE)


def to_local(dt: datetime.datetime, tz: Optional[datetime.tzinfo] = None) -> datetime.datetime:
    """Convert an aware datetime into the matrix zone. Naive values are assumed local."""
    zone = tz or get_zone()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone)
    return dt.astimezone(zone)


def to_local_date(
    value: datetime.date | datetime.datetime, tz: Optional[datetime.tzinfo] = None
) -> datetime.date:
    """Return the calendar date of ``value`` as seen in the matrix zone."""
    if isinstance(value, datetime.datetime):
        return to_local(value, tz).date()
    return value


def sheet_name_for(
    value: datetime.date | datetime.datetime,
    tz: Optional[datetime.tzinfo] = None,
    prefix: str = DEFAULT_SHEET_PREFIX,
) -> str:
    """Build the month sheet name, e.g. ``Giat_Agustus_24``.

    Args:
        value: Event date or datetime
        tz: Matrix zone used to resolve the local date
        prefix: Sheet name prefix

    Returns:
        ``<prefix>_<IndonesianMonth>_<yy>``
    """
    local_date = to_local_date(value, tz)
    month = INDONESIAN_MONTHS[local_date.month - 1]
    return f"{prefix}_{month}_{local_date.year % 100:02d}"


def format_time_label(
    start: Optional[datetime.datetime],
    tz: Optional[datetime.tzinfo] = None,
    is_all_day: bool = False,
) -> str:
    """Return the cell time label, e.g. ``Pukul 09.00``. Empty for all-day events."""
    if start is None or is_all_day:
        return ""
    local = to_local(start, tz)
    return f"Pukul {local:%H.%M}"


def format_display_date(value: datetime.date) -> str:
    return f"{value:%d/%m/%Y}"


def parse_api_time(
    payload: Optional[dict[str, Any]], tz: Optional[datetime.tzinfo] = None
) -> tuple[Optional[datetime.datetime], bool]:
    """Parse a Calendar API ``start``/``end`` object.

    Args:
        payload: Mapping with ``dateTime`` or ``date``
        tz: Zone used to anchor all-day dates

    Returns:
        (datetime or None, is_all_day)
    """
    if not payload:
        return None, False

    date_time = payload.get("dateTime")
    if date_time:
        try:
            return datetime.datetime.fromisoformat(str(date_time).replace("Z", "+00:00")), False
        except ValueError:
            logger.warning("Unparseable event dateTime %r", date_time)
            return None, False

    date_only = payload.get("date")
    if date_only:
        try:
            day = datetime.date.fromisoformat(str(date_only))
        except ValueError:
            logger.warning("Unparseable event date %r", date_only)
            return None, True
        return datetime.datetime.combine(day, datetime.time.min, tzinfo=tz), True

    return None, False
