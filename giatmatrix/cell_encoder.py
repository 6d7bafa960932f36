"""Encoding of one event into a single activity-matrix cell.

Wire format: ``summary|location|time|disposition``. Field values are written
as-is; a ``|`` inside a field shifts the fields that follow it when the cell
is decoded. Existing sheet readers split on the bare delimiter, so no escaping
is applied.
"""

from __future__ import annotations

from typing import Optional

from .models import MatrixEntry

FIELD_DELIMITER = "|"
SUMMARY_PLACEHOLDER = "Kegiatan"
EVENT_ID_PREFIX = "eventId:"


def event_id_tag(event_id: str) -> str:
    """Return the trailing field used to locate an entry later."""
    return f"{EVENT_ID_PREFIX}{event_id}"


def encode_cell(
    summary: Optional[str],
    location: Optional[str] = None,
    time_label: Optional[str] = None,
    disposition: Optional[str] = None,
    event_id: Optional[str] = None,
) -> str:
    """Join the event fields into one cell value.

    Args:
        summary: Event title; blank or missing becomes ``Kegiatan``
        location: Event location
        time_label: Pre-formatted time, e.g. ``Pukul 09.00``
        disposition: Disposition extracted from the description
        event_id: When given, appended as an ``eventId:<id>`` fifth field

    Returns:
        Pipe-delimited cell value
    """
    fields = [
        summary if summary and summary.strip() else SUMMARY_PLACEHOLDER,
        location or "",
        time_label or "",
        disposition or "",
    ]
    if event_id:
        fields.append(event_id_tag(event_id))
    return FIELD_DELIMITER.join(fields)


def decode_cell(value: Optional[str]) -> Optional[MatrixEntry]:
    """Split a cell value back into its fields.

    Missing trailing fields decode as empty strings. A trailing
    ``eventId:`` field is recognized whether or not the other four are
    present.

    Returns:
        MatrixEntry, or None for an empty cell
    """
    if value is None or str(value) == "":
        return None

    parts = str(value).split(FIELD_DELIMITER)
    event_id = None
    if len(parts) > 1 and parts[-1].startswith(EVENT_ID_PREFIX):
        event_id = parts.pop()[len(EVENT_ID_PREFIX) :] or None

    parts += [""] * (4 - len(parts))
    return MatrixEntry(
        summary=parts[0],
        location=parts[1],
        time_label=parts[2],
        disposition=FIELD_DELIMITER.join(parts[3:]),
        event_id=event_id,
    )


def cell_has_event_id(value: Optional[str], event_id: str) -> bool:
    """Return True when the cell carries the tag for ``event_id``."""
    if not isinstance(value, str) or not event_id:
        return False
    return event_id_tag(event_id) in value.split(FIELD_DELIMITER)
