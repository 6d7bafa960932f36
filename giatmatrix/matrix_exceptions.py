"""Exception hierarchy for activity-matrix operations.

The pure matrix helpers report "not found" and "full" as ``None``; these types
are raised by the write path (``MatrixWriter``) and by sheet adapters so callers
can tell a missing date column apart from a full one and present an
actionable message.
"""

from __future__ import annotations

import datetime
from typing import Optional


class MatrixError(Exception):
    """Base exception for all activity-matrix errors.

    Carries the sheet name (and date, where one applies) so callers can name
    both in a human-readable message.
    """

    kind = "matrix_error"

    def __init__(
        self,
        message: str,
        *,
        sheet_name: Optional[str] = None,
        target_date: Optional[datetime.date] = None,
    ) -> None:
        super().__init__(message)
        self.sheet_name = sheet_name
        self.target_date = target_date


class MatrixNotFoundError(MatrixError):
    """Something the write path needs does not exist in the spreadsheet."""

    kind = "not_found"


class DateColumnNotFoundError(MatrixNotFoundError):
    """No header column matches the event date.

    Raised when:
    - The header row of the month sheet has no serial for the date
    - The header cells are empty or not numeric
    """

    kind = "date_column_not_found"


class SheetNotFoundError(MatrixNotFoundError):
    """The named month sheet does not exist.

    Raised by sheet adapters and propagated unchanged; never retried.
    """

    kind = "sheet_not_found"


class CapacityExceededError(MatrixError):
    """The data window of a date column is fully occupied."""

    kind = "column_full"


# Alias matching the failure wording used by callers.
ColumnFullError = CapacityExceededError


class MatrixConfigurationError(MatrixError):
    """The write path was invoked with an invalid layout or call contract."""

    kind = "configuration"


class UnknownSectionError(MatrixConfigurationError):
    """A section (bagian) name has no row band in the layout."""

    kind = "unknown_section"


class MissingTransactionTokenError(MatrixConfigurationError):
    """``plan_append`` was called without a token from a write guard.

    Row allocation reads a snapshot and writes in a second call; the caller must
    hold an external serialization token around both phases.
    """

    kind = "missing_transaction_token"
