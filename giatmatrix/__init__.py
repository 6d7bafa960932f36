"""giatmatrix - activity-matrix cell allocation and event-metadata extraction.

Write path: ``resolve_column`` -> ``allocate_row`` -> ``encode_cell``, driven by
``MatrixWriter``. Read path: ``DescriptionParser`` and ``AttachmentReconciler``,
composed by ``EventReader``.
"""

__version__ = "0.1.0"

from .attachment_reconciler import (
    AttachmentReconciler,
    extract_file_id,
    merge_api_attachments,
    reconcile_attachments,
)
from .cell_encoder import decode_cell, encode_cell
from .column_resolver import column_index, column_letter, resolve_column
from .description_parser import DescriptionParser, extract_disposition, parse_description
from .event_reader import EventReader, ReadEvent, search_events
from .matrix_datetime_utils import format_time_label, sheet_name_for
from .matrix_exceptions import (
    CapacityExceededError,
    ColumnFullError,
    DateColumnNotFoundError,
    MatrixError,
    MissingTransactionTokenError,
    SheetNotFoundError,
    UnknownSectionError,
)
from .matrix_writer import MatrixWriter
from .models import (
    DEFAULT_LAYOUT,
    Attachment,
    AttachmentSource,
    CalendarEvent,
    DescriptionAnnotations,
    MatrixEntry,
    MatrixLayout,
    MatrixWriteResult,
    ReservedSlot,
)
from .row_allocator import allocate_row, allocate_row_number
from .serial_dates import date_to_serial, matches_date, serial_to_date

__all__ = [
    "DEFAULT_LAYOUT",
    "Attachment",
    "AttachmentReconciler",
    "AttachmentSource",
    "CalendarEvent",
    "CapacityExceededError",
    "ColumnFullError",
    "DateColumnNotFoundError",
    "DescriptionAnnotations",
    "DescriptionParser",
    "EventReader",
    "MatrixEntry",
    "MatrixError",
    "MatrixLayout",
    "MatrixWriteResult",
    "MatrixWriter",
    "MissingTransactionTokenError",
    "ReadEvent",
    "ReservedSlot",
    "SheetNotFoundError",
    "UnknownSectionError",
    "allocate_row",
    "allocate_row_number",
    "column_index",
    "column_letter",
    "date_to_serial",
    "decode_cell",
    "encode_cell",
    "extract_disposition",
    "extract_file_id",
    "format_time_label",
    "matches_date",
    "merge_api_attachments",
    "parse_description",
    "reconcile_attachments",
    "resolve_column",
    "search_events",
    "serial_to_date",
    "sheet_name_for",
]
