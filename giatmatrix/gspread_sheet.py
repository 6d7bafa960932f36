"""``MatrixSheetClient`` implementation backed by gspread.

Credentials are the caller's concern: pass an authorized ``gspread.Client``
(or an already opened ``gspread.Spreadsheet``).
"""

from __future__ import annotations

import logging
from typing import Any

import gspread
from gspread.exceptions import APIError, WorksheetNotFound

from .matrix_exceptions import SheetNotFoundError

logger = logging.getLogger(__name__)

# Sheets API wording when the sheet part of an A1 range does not exist.
MISSING_SHEET_MARKER = "Unable to parse range"


def _sheet_of(range_a1: str) -> str:
    return range_a1.split("!", 1)[0].strip("'")


class GspreadMatrixSheet:
    """Spreadsheet value access through one ``gspread.Spreadsheet``."""

    def __init__(self, spreadsheet: gspread.Spreadsheet):
        self.spreadsheet = spreadsheet

    @classmethod
    def open(cls, client: gspread.Client, spreadsheet_id: str) -> GspreadMatrixSheet:
        """Open a spreadsheet by key.

        Args:
            client: Authorized gspread client
            spreadsheet_id: Spreadsheet key

        Returns:
            GspreadMatrixSheet wrapping the opened spreadsheet
        """
        logger.debug("Opening spreadsheet %s", spreadsheet_id)
        return cls(client.open_by_key(spreadsheet_id))

    def _raise_translated(self, exc: APIError, range_a1: str) -> None:
        if MISSING_SHEET_MARKER in str(exc):
            sheet = _sheet_of(range_a1)
            raise SheetNotFoundError(
                f"Sheet '{sheet}' not found; create the sheet for this month and year first",
                sheet_name=sheet,
            ) from exc
        raise exc

    def get_values(self, range_a1: str, unformatted: bool = False) -> list[list[Any]]:
        params = {"valueRenderOption": "UNFORMATTED_VALUE"} if unformatted else None
        try:
            response = self.spreadsheet.values_get(range_a1, params=params)
        except APIError as e:
            self._raise_translated(e, range_a1)
        return response.get("values", [])

    def update_value(self, range_a1: str, value: str) -> None:
        try:
            self.spreadsheet.values_update(
                range_a1,
                params={"valueInputOption": "USER_ENTERED"},
                body={"values": [[value]]},
            )
        except APIError as e:
            self._raise_translated(e, range_a1)

    def clear_value(self, range_a1: str) -> None:
        try:
            self.spreadsheet.values_clear(range_a1)
        except APIError as e:
            self._raise_translated(e, range_a1)

    def list_sheet_titles(self) -> list[str]:
        return [worksheet.title for worksheet in self.spreadsheet.worksheets()]

    def has_sheet(self, title: str) -> bool:
        try:
            self.spreadsheet.worksheet(title)
        except WorksheetNotFound:
            return False
        return True
