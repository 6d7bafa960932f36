"""Shared pytest configuration and fixtures for giatmatrix tests."""

import datetime
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any
from zoneinfo import ZoneInfo

import pytest
from gspread.utils import a1_to_rowcol

from giatmatrix.matrix_exceptions import SheetNotFoundError
from giatmatrix.models import MatrixLayout
from giatmatrix.serial_dates import date_to_serial


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Write/read path tests over in-memory fakes")


class FakeSheetClient:
    """In-memory MatrixSheetClient.

    Cells live in ``sheets[name][(row, col)]``. ``get_values`` trims trailing
    empty rows and cells the way the Sheets values API does.
    """

    def __init__(self) -> None:
        self.sheets: dict[str, dict[tuple[int, int], Any]] = {}
        self.updates: list[tuple[str, str]] = []
        self.clears: list[str] = []
        self.reads: list[tuple[str, bool]] = []

    def add_sheet(self, name: str) -> dict[tuple[int, int], Any]:
        return self.sheets.setdefault(name, {})

    def _parse(self, range_a1: str) -> tuple[str, int, int, int, int]:
        sheet, _, cells = range_a1.partition("!")
        assert cells, f"unsupported range {range_a1}"
        if sheet not in self.sheets:
            raise SheetNotFoundError(f"Sheet '{sheet}' not found", sheet_name=sheet)
        start, _, end = cells.partition(":")
        r1, c1 = a1_to_rowcol(start)
        r2, c2 = a1_to_rowcol(end) if end else (r1, c1)
        return sheet, r1, c1, r2, c2

    def get_values(self, range_a1: str, unformatted: bool = False) -> list[list[Any]]:
        self.reads.append((range_a1, unformatted))
        sheet, r1, c1, r2, c2 = self._parse(range_a1)
        cells = self.sheets[sheet]
        rows = []
        for row in range(r1, r2 + 1):
            values = [cells.get((row, col), "") for col in range(c1, c2 + 1)]
            while values and values[-1] == "":
                values.pop()
            rows.append(values)
        while rows and not rows[-1]:
            rows.pop()
        return rows

    def update_value(self, range_a1: str, value: str) -> None:
        sheet, row, col, _, _ = self._parse(range_a1)
        self.sheets[sheet][(row, col)] = value
        self.updates.append((range_a1, value))

    def clear_value(self, range_a1: str) -> None:
        sheet, row, col, _, _ = self._parse(range_a1)
        self.sheets[sheet].pop((row, col), None)
        self.clears.append(range_a1)

    def list_sheet_titles(self) -> list[str]:
        return list(self.sheets)


class FakeWriteGuard:
    """WriteGuard that hands out sequential tokens and records each hold."""

    def __init__(self) -> None:
        self.held: list[str] = []
        self.counter = 0

    @contextmanager
    def hold(self, sheet_name: str) -> Iterator[str]:
        self.counter += 1
        self.held.append(sheet_name)
        yield f"token-{self.counter}"


def month_header(year: int, month: int, first_day: int = 1, columns: int = 31) -> list[Any]:
    """Header row of day-serials starting at ``first_day``; unused columns are empty."""
    values: list[Any] = []
    for offset in range(columns):
        try:
            day = datetime.date(year, month, first_day + offset)
        except ValueError:
            values.append("")
            continue
        values.append(date_to_serial(day))
    return values


def fill_header(cells: dict[tuple[int, int], Any], header: list[Any], layout: MatrixLayout) -> None:
    for offset, value in enumerate(header):
        if value != "":
            cells[(layout.header_row, layout.first_column + offset)] = value


@pytest.fixture
def jakarta() -> ZoneInfo:
    """Matrix time zone."""
    return ZoneInfo("Asia/Jakarta")


@pytest.fixture
def layout() -> MatrixLayout:
    return MatrixLayout()


@pytest.fixture
def sheet_client() -> FakeSheetClient:
    return FakeSheetClient()


@pytest.fixture
def write_guard() -> FakeWriteGuard:
    return FakeWriteGuard()


@pytest.fixture
def august_2024_sheet(
    sheet_client: FakeSheetClient, layout: MatrixLayout
) -> Generator[dict[tuple[int, int], Any], None, None]:
    """``Giat_Agustus_24`` with Aug 2..31 in the header, so Aug 5 sits at offset 3 (column H)."""
    cells = sheet_client.add_sheet("Giat_Agustus_24")
    fill_header(cells, month_header(2024, 8, first_day=2), layout)
    yield cells


@pytest.fixture
def header_for() -> Any:
    """Factory building a header row: ``header_for(year, month, first_day=1)``."""
    return month_header


@pytest.fixture
def put_header(layout: MatrixLayout) -> Any:
    """Write a header row into a fake sheet's cells: ``put_header(cells, header)``."""

    def _put(cells: dict[tuple[int, int], Any], header: list[Any]) -> None:
        fill_header(cells, header, layout)

    return _put
