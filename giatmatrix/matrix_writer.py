"""Write path: place one calendar event into the activity matrix.

Appending is a two-phase protocol:

- ``plan_append`` reads the header row and the target column and returns a
  ``ReservedSlot``;
- ``commit_append`` writes the encoded value into that slot.

Nothing between the two phases stops another request from planning the same
slot. Callers must hold an external serialization token (see
``WriteGuard``) across both phases and pass it in; the writer refuses to plan
without one and takes no lock of its own.
"""

from __future__ import annotations

import datetime
import logging
from typing import Optional

from gspread.utils import rowcol_to_a1

from .cell_encoder import cell_has_event_id, encode_cell
from .column_resolver import column_letter, resolve_column
from .description_parser import DescriptionParser
from .matrix_datetime_utils import (
    DEFAULT_SHEET_PREFIX,
    format_display_date,
    format_time_label,
    get_zone,
    sheet_name_for,
    to_local_date,
)
from .matrix_exceptions import (
    CapacityExceededError,
    DateColumnNotFoundError,
    MatrixConfigurationError,
    MatrixNotFoundError,
    MissingTransactionTokenError,
    SheetNotFoundError,
)
from .matrix_protocols import MatrixSheetClient, WriteGuard
from .models import DEFAULT_LAYOUT, CalendarEvent, MatrixLayout, MatrixWriteResult, ReservedSlot
from .row_allocator import allocate_row_number, flatten_column

logger = logging.getLogger(__name__)


class MatrixWriter:
    """Allocates and writes activity-matrix cells for calendar events."""

    def __init__(
        self,
        client: MatrixSheetClient,
        layout: MatrixLayout = DEFAULT_LAYOUT,
        tz: Optional[datetime.tzinfo] = None,
        guard: Optional[WriteGuard] = None,
        sheet_prefix: str = DEFAULT_SHEET_PREFIX,
        parser: Optional[DescriptionParser] = None,
    ):
        """Initialize the writer.

        Args:
            client: Spreadsheet value access
            layout: Matrix geometry
            tz: Zone used to resolve event dates (Asia/Jakarta if None)
            guard: External serialization used by ``write_event`` when no
                token is passed
            sheet_prefix: Month sheet name prefix
            parser: Description parser used to extract dispositions
        """
        self.client = client
        self.layout = layout
        self.tz = tz or get_zone()
        self.guard = guard
        self.sheet_prefix = sheet_prefix
        self.parser = parser or DescriptionParser()

    def sheet_name_for(self, event: CalendarEvent) -> str:
        return sheet_name_for(self._event_start(event), self.tz, self.sheet_prefix)

    def _event_start(self, event: CalendarEvent) -> datetime.datetime:
        if event.start is None:
            raise MatrixConfigurationError(f"Event {event.id!r} has no start time")
        return event.start

    def _layout_for(self, section: Optional[str]) -> MatrixLayout:
        return self.layout.for_section(section) if section else self.layout

    def encode_event(self, event: CalendarEvent, disposition: Optional[str] = None) -> str:
        """Encode an event into its cell value.

        Args:
            event: Event to encode
            disposition: Explicit disposition; extracted from the description if None

        Returns:
            Cell value
        """
        if disposition is None:
            disposition = self.parser.extract_disposition(event.description)
        return encode_cell(
            event.summary,
            event.location,
            format_time_label(event.start, self.tz, event.is_all_day),
            disposition,
            event_id=event.id if self.layout.tag_event_ids else None,
        )

    def plan_append(
        self,
        event: CalendarEvent,
        *,
        token: Optional[str],
        sheet_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> ReservedSlot:
        """Phase one: find the cell the event would be appended to.

        Args:
            event: Event to place
            token: Transaction token from the caller's write guard
            sheet_name: Month sheet; derived from the event start if None
            section: Optional section whose row band limits the window

        Returns:
            ReservedSlot for ``commit_append``

        Raises:
            MissingTransactionTokenError: If no token is given
            SheetNotFoundError: If the month sheet does not exist
            DateColumnNotFoundError: If no header column matches the event date
            CapacityExceededError: If the column window is full
        """
        if not token:
            raise MissingTransactionTokenError(
                "plan_append requires a transaction token from an external write guard"
            )

        start = self._event_start(event)
        target_date = to_local_date(start, self.tz)
        sheet = sheet_name or sheet_name_for(start, self.tz, self.sheet_prefix)
        layout = self._layout_for(section)

        header_rows = self.client.get_values(layout.header_range(sheet), unformatted=True)
        header_values = header_rows[0] if header_rows else []
        column = resolve_column(header_values, target_date, layout, self.tz)
        if column is None:
            raise DateColumnNotFoundError(
                f"Date column for {format_display_date(target_date)} not found in sheet "
                f"'{sheet}'; check the date header in row {layout.header_row}",
                sheet_name=sheet,
                target_date=target_date,
            )

        column_values = flatten_column(self.client.get_values(layout.column_range(sheet, column)))
        row = allocate_row_number(column_values, layout)
        if row is None:
            where = f" for section '{section}'" if section else ""
            raise CapacityExceededError(
                f"Slots{where} on {format_display_date(target_date)} in sheet '{sheet}' are full",
                sheet_name=sheet,
                target_date=target_date,
            )

        slot = ReservedSlot(
            sheet_name=sheet,
            column_index=column,
            column_letter=column_letter(column),
            row=row,
            target_date=target_date,
            token=token,
            layout=layout,
        )
        logger.info("Planned matrix slot %s for event %s", slot.range_a1, event.id)
        return slot

    def commit_append(self, slot: ReservedSlot, value: str) -> MatrixWriteResult:
        """Phase two: write ``value`` into the planned slot.

        The slot is not re-validated; it is only as fresh as the guard that
        produced its token.
        """
        self.client.update_value(slot.range_a1, value)
        logger.info("Wrote matrix cell %s", slot.range_a1)
        return MatrixWriteResult(
            success=True,
            cell=slot.range_a1,
            sheet_name=slot.sheet_name,
            value=value,
            target_date=slot.target_date,
        )

    def write_event(
        self,
        event: CalendarEvent,
        *,
        token: Optional[str] = None,
        disposition: Optional[str] = None,
        sheet_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> MatrixWriteResult:
        """Plan and commit one event.

        Uses ``token`` if given, otherwise holds the injected guard around
        both phases. Missing columns, missing sheets and full columns come
        back as a failed MatrixWriteResult; they are not retried.

        Raises:
            MissingTransactionTokenError: If neither a token nor a guard is available
            UnknownSectionError: If ``section`` has no row band
        """
        sheet = sheet_name or self.sheet_name_for(event)
        value = self.encode_event(event, disposition)

        try:
            if token is not None:
                slot = self.plan_append(event, token=token, sheet_name=sheet, section=section)
                return self.commit_append(slot, value)

            if self.guard is None:
                raise MissingTransactionTokenError(
                    "write_event needs a token or a write guard", sheet_name=sheet
                )
            with self.guard.hold(sheet) as held_token:
                slot = self.plan_append(event, token=held_token, sheet_name=sheet, section=section)
                return self.commit_append(slot, value)

        except (MatrixNotFoundError, CapacityExceededError) as e:
            logger.warning("Matrix write for event %s failed: %s", event.id, e)
            return MatrixWriteResult(
                success=False,
                sheet_name=e.sheet_name or sheet,
                value=value,
                target_date=e.target_date,
                error_kind=e.kind,
                error_message=str(e),
            )

    def locate_entry(self, event_id: str) -> Optional[str]:
        """Find the cell tagged with ``event_id`` across all month sheets.

        Only finds entries written with ``tag_event_ids`` enabled.

        Returns:
            Sheet-qualified cell address, or None
        """
        prefix = f"{self.sheet_prefix}_"
        for title in self.client.list_sheet_titles():
            if not title.startswith(prefix):
                continue
            try:
                rows = self.client.get_values(self.layout.data_range(title))
            except SheetNotFoundError:
                logger.debug("Sheet %s disappeared while searching", title)
                continue

            for row_offset, row in enumerate(rows):
                for col_offset, value in enumerate(row):
                    if cell_has_event_id(value, event_id):
                        cell = rowcol_to_a1(
                            self.layout.first_data_row + row_offset,
                            self.layout.first_column + col_offset,
                        )
                        return f"{title}!{cell}"
        return None

    def clear_entry(self, event_id: str, *, token: Optional[str]) -> MatrixWriteResult:
        """Clear the cell holding ``event_id``.

        Clearing leaves a gap in the column; later appends still go after the
        last populated row.
        """
        if not token:
            raise MissingTransactionTokenError("clear_entry requires a transaction token")

        cell = self.locate_entry(event_id)
        if cell is None:
            return MatrixWriteResult(
                success=False,
                error_kind="entry_not_found",
                error_message=f"No matrix entry tagged with event {event_id}",
            )

        self.client.clear_value(cell)
        logger.info("Cleared matrix cell %s for event %s", cell, event_id)
        return MatrixWriteResult(success=True, cell=cell, sheet_name=cell.split("!", 1)[0])

    def replace_event(
        self,
        event: CalendarEvent,
        *,
        token: str,
        disposition: Optional[str] = None,
        section: Optional[str] = None,
    ) -> MatrixWriteResult:
        """Clear the event's existing entry (if any) and append it again.

        Used after an event is edited: its date, title or disposition may
        have changed.
        """
        if event.id:
            self.clear_entry(event.id, token=token)
        return self.write_event(event, token=token, disposition=disposition, section=section)
