"""Date column lookup over the activity-matrix header row."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from typing import Any, Optional

from gspread.utils import a1_to_rowcol, rowcol_to_a1

from .matrix_datetime_utils import to_local_date
from .models import DEFAULT_LAYOUT, MatrixLayout
from .serial_dates import matches_date

logger = logging.getLogger(__name__)


def column_letter(column_index: int) -> str:
    """Convert a 1-based column index to its letter name (1 -> A, 27 -> AA)."""
    if column_index < 1:
        raise ValueError(f"Column index must be >= 1, got {column_index}")
    return rowcol_to_a1(1, column_index)[:-1]


def column_index(letters: str) -> int:
    """Convert a column letter name to its 1-based index (A -> 1, AI -> 35)."""
    cleaned = (letters or "").strip().upper()
    if not cleaned or not cleaned.isalpha() or not cleaned.isascii():
        raise ValueError(f"Invalid column letters: {letters!r}")
    return a1_to_rowcol(f"{cleaned}1")[1]


def resolve_column(
    header_values: Sequence[Any],
    target: datetime.date | datetime.datetime,
    layout: MatrixLayout = DEFAULT_LAYOUT,
    tz: Optional[datetime.tzinfo] = None,
) -> Optional[int]:
    """Find the physical column holding ``target`` in the header row.

    Scans left to right; the first matching serial wins. Cells beyond the
    layout's last column are ignored.

    Args:
        header_values: Header cells starting at ``layout.first_column``
        target: Event date; aware datetimes are converted to the matrix zone
        layout: Matrix geometry
        tz: Matrix zone

    Returns:
        1-based column index, or None when no header cell matches
    """
    target_date = to_local_date(target, tz)
    for offset, value in enumerate(list(header_values)[: layout.column_count]):
        if matches_date(value, target_date):
            return layout.first_column + offset

    logger.debug("No header column matches %s", target_date)
    return None
