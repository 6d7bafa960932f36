"""Data models for activity-matrix and event-metadata processing."""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any, Optional

from gspread.utils import rowcol_to_a1
from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from .matrix_exceptions import UnknownSectionError

# Row bands (1-based, inclusive) owned by each section in the reference sheet.
SECTION_ROW_BANDS: dict[str, tuple[int, int]] = {
    "setcam": (18, 22),
    "tapem": (23, 27),
    "trantib": (28, 32),
    "kesra": (33, 37),
    "pm": (38, 42),
    "perkeu": (43, 47),
    "paten": (48, 52),
}


class MatrixLayout(BaseModel):
    """Fixed geometry of a monthly activity-matrix sheet.

    Rows and columns are 1-based sheet coordinates. The header row holds one
    day-serial per column; each date column owns the data window below it.
    """

    header_row: int = Field(default=17, ge=1, description="Row holding date serials")
    first_column: int = Field(default=5, ge=1, description="First date column (E)")
    last_column: int = Field(default=35, ge=1, description="Last date column (AI)")
    first_data_row: int = Field(default=18, ge=1, description="First row of the data window")
    last_data_row: int = Field(default=52, ge=1, description="Last row of the data window")
    tag_event_ids: bool = Field(
        default=False, description="Append an eventId tag as a fifth cell field"
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_bounds(self) -> MatrixLayout:
        if self.last_column < self.first_column:
            raise ValueError("last_column must not precede first_column")
        if self.last_data_row < self.first_data_row:
            raise ValueError("last_data_row must not precede first_data_row")
        if self.header_row >= self.first_data_row:
            raise ValueError("header_row must be above the data window")
        return self

    @property
    def window_size(self) -> int:
        """Number of rows in each column's data window."""
        return self.last_data_row - self.first_data_row + 1

    @property
    def column_count(self) -> int:
        return self.last_column - self.first_column + 1

    def header_range(self, sheet_name: str) -> str:
        """A1 range of the header row, e.g. ``Giat_Agustus_24!E17:AI17``."""
        first = rowcol_to_a1(self.header_row, self.first_column)
        last = rowcol_to_a1(self.header_row, self.last_column)
        return f"{sheet_name}!{first}:{last}"

    def column_range(self, sheet_name: str, column_index: int) -> str:
        """A1 range of one column's data window, e.g. ``Giat_Agustus_24!H18:H52``."""
        first = rowcol_to_a1(self.first_data_row, column_index)
        last = rowcol_to_a1(self.last_data_row, column_index)
        return f"{sheet_name}!{first}:{last}"

    def data_range(self, sheet_name: str) -> str:
        """A1 range covering every date column's data window."""
        first = rowcol_to_a1(self.first_data_row, self.first_column)
        last = rowcol_to_a1(self.last_data_row, self.last_column)
        return f"{sheet_name}!{first}:{last}"

    def for_section(self, section: str) -> MatrixLayout:
        """Return a copy of this layout narrowed to one section's row band.

        Raises:
            UnknownSectionError: If the section has no band, or its band falls
                outside this layout's data window.
        """
        key = (section or "").strip().lower()
        band = SECTION_ROW_BANDS.get(key)
        if band is None:
            raise UnknownSectionError(f"Row band for section '{section}' not found")
        start, end = band
        if start < self.first_data_row or end > self.last_data_row:
            raise UnknownSectionError(
                f"Row band {start}..{end} for section '{section}' lies outside "
                f"the data window {self.first_data_row}..{self.last_data_row}"
            )
        return self.model_copy(update={"first_data_row": start, "last_data_row": end})


DEFAULT_LAYOUT = MatrixLayout()


class AttachmentSource(str, Enum):
    """Where an attachment record came from."""

    API = "api"
    DESCRIPTION = "description"


class Attachment(BaseModel):
    """An event attachment; identity for deduplication is ``file_url``."""

    file_url: str = Field(..., alias="fileUrl", description="Link to the file")
    title: str = Field(default="File", description="Display title")
    file_id: Optional[str] = Field(default=None, alias="fileId", description="Storage file id")
    source: AttachmentSource = Field(..., description="Provenance of the record")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_record(self) -> dict[str, Any]:
        """Return the ``{fileUrl, title, fileId, source}`` shape exposed to callers."""
        return self.model_dump(by_alias=True, mode="json")


class DescriptionAnnotations(BaseModel):
    """Fields derived from a raw event description. Never persisted."""

    disposition: Optional[str] = None
    saved_at_text: Optional[str] = Field(default=None, alias="savedAtText")
    cleaned_body: str = Field(default="", alias="cleanedBody")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class CalendarEvent(BaseModel):
    """Calendar event as fetched from the calendar service. Read-only here."""

    id: Optional[str] = Field(default=None, description="Event ID")
    summary: Optional[str] = Field(default=None, description="Event title")
    description: Optional[str] = Field(default=None, description="Free-text/HTML body")
    location: Optional[str] = Field(default=None, description="Event location")
    start: Optional[datetime.datetime] = Field(default=None, description="Event start")
    end: Optional[datetime.datetime] = Field(default=None, description="Event end")
    is_all_day: bool = Field(default=False, description="All-day event flag")
    attachments: list[dict[str, Any]] = Field(
        default_factory=list, description="Attachments declared by the calendar API"
    )

    @field_serializer("start", "end", when_used="unless-none")
    def serialize_datetime(self, dt: datetime.datetime) -> str:
        """Serialize datetime fields to ISO format."""
        return dt.isoformat()

    @classmethod
    def from_api(cls, resource: dict[str, Any], tz: Optional[datetime.tzinfo] = None) -> CalendarEvent:
        """Build an event from a Google Calendar v3 event resource.

        ``start.date`` (no time) marks an all-day event; the date is anchored at
        midnight in ``tz`` (or naive if no zone is given).

        Args:
            resource: Event resource mapping as returned by ``events.list``
            tz: Zone used to anchor all-day dates

        Returns:
            Parsed CalendarEvent
        """
        from .matrix_datetime_utils import parse_api_time

        start, start_all_day = parse_api_time(resource.get("start"), tz)
        end, _ = parse_api_time(resource.get("end"), tz)
        return cls(
            id=resource.get("id"),
            summary=resource.get("summary"),
            description=resource.get("description"),
            location=resource.get("location"),
            start=start,
            end=end,
            is_all_day=start_all_day,
            attachments=list(resource.get("attachments") or []),
        )


class MatrixEntry(BaseModel):
    """A decoded cell value."""

    summary: str
    location: str = ""
    time_label: str = ""
    disposition: str = ""
    event_id: Optional[str] = None


class ReservedSlot(BaseModel):
    """Result of the planning phase of a matrix append.

    The slot is a snapshot: it stays valid only while the caller's external
    write guard (identified by ``token``) is held.
    """

    sheet_name: str
    column_index: int
    column_letter: str
    row: int
    target_date: datetime.date
    token: str
    layout: MatrixLayout = Field(default_factory=MatrixLayout)

    model_config = ConfigDict(frozen=True)

    @property
    def cell(self) -> str:
        """Cell address without sheet, e.g. ``H20``."""
        return f"{self.column_letter}{self.row}"

    @property
    def range_a1(self) -> str:
        """Fully qualified cell address, e.g. ``Giat_Agustus_24!H20``."""
        return f"{self.sheet_name}!{self.cell}"


class MatrixWriteResult(BaseModel):
    """Outcome of a write path invocation, reported as data."""

    success: bool
    cell: Optional[str] = None
    sheet_name: Optional[str] = None
    value: Optional[str] = None
    target_date: Optional[datetime.date] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def is_column_full(self) -> bool:
        return self.error_kind == "column_full"

    @property
    def is_not_found(self) -> bool:
        return self.error_kind in ("date_column_not_found", "sheet_not_found")
