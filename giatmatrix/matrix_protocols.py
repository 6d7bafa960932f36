"""Protocol definitions for the external collaborators of the write path.

The spreadsheet service and the cross-request serialization mechanism live
outside this package; these protocols fix the interface the writer relies on.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol


class MatrixSheetClient(Protocol):
    """Protocol for spreadsheet value access."""

    def get_values(self, range_a1: str, unformatted: bool = False) -> list[list[Any]]:
        """Read a range of values.

        Args:
            range_a1: Sheet-qualified A1 range, e.g. ``Giat_Agustus_24!E17:AI17``
            unformatted: Return raw numbers (day-serials) instead of display text

        Returns:
            Row-major values; trailing empty rows and cells may be omitted

        Raises:
            SheetNotFoundError: If the sheet in ``range_a1`` does not exist
        """
        ...

    def update_value(self, range_a1: str, value: str) -> None:
        """Write one cell with user-entered semantics.

        Args:
            range_a1: Sheet-qualified single cell
            value: Cell value
        """
        ...

    def clear_value(self, range_a1: str) -> None:
        """Clear one cell."""
        ...

    def list_sheet_titles(self) -> list[str]:
        """Return the titles of all sheets in the spreadsheet."""
        ...


class WriteGuard(Protocol):
    """Protocol for the external serialization mechanism around a matrix append.

    Implementations serialize writers across processes (a per-sheet lock in a
    shared store, a single-consumer queue, ...). ``hold`` yields the
    transaction token that ``MatrixWriter.plan_append`` requires.
    """

    def hold(self, sheet_name: str) -> AbstractContextManager[str]:
        """Acquire exclusive append rights for ``sheet_name``.

        Args:
            sheet_name: Month sheet being written

        Returns:
            Context manager yielding the transaction token
        """
        ...
