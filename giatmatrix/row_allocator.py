"""Append-row allocation inside one date column's data window."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Optional

from .models import DEFAULT_LAYOUT, MatrixLayout


def is_populated(value: Any) -> bool:
    """A cell is occupied unless it is missing or the empty string."""
    return value is not None and value != ""


def flatten_column(rows: Sequence[Any]) -> list[Any]:
    """Flatten a values-API column response (``[["a"], [], ["b"]]``) to one value per row."""
    flat: list[Any] = []
    for row in rows:
        if isinstance(row, (list, tuple)):
            flat.append(row[0] if row else "")
        else:
            flat.append(row)
    return flat


def allocate_row(
    window_values: Sequence[Any],
    layout: MatrixLayout = DEFAULT_LAYOUT,
) -> Optional[int]:
    """Return the window offset of the first row past the last populated value.

    The values API omits trailing empty rows, so a short sequence is treated as
    padded with empties; values past the window are ignored.

    Args:
        window_values: Column values from ``layout.first_data_row`` downward
        layout: Matrix geometry

    Returns:
        0-based offset into the window, or None when the window is full
    """
    window = list(window_values)[: layout.window_size]
    last_populated = -1
    for offset, value in enumerate(window):
        if is_populated(value):
            last_populated = offset

    candidate = last_populated + 1
    if candidate >= layout.window_size:
        return None
    return candidate


def allocate_row_number(
    window_values: Sequence[Any],
    layout: MatrixLayout = DEFAULT_LAYOUT,
) -> Optional[int]:
    """Like :func:`allocate_row` but returns the absolute 1-based sheet row."""
    offset = allocate_row(window_values, layout)
    if offset is None:
        return None
    return layout.first_data_row + offset
