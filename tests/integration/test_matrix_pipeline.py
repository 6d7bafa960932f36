"""Integration tests for the write and read paths working together.

This module drives calendar API resources through:
- CalendarEvent.from_api parsing
- MatrixWriter planning and committing against an in-memory sheet
- decode_cell on the written values
- EventReader annotation and search

Run with:
    pytest tests/integration/test_matrix_pipeline.py -v
"""

import pytest

from giatmatrix.cell_encoder import decode_cell
from giatmatrix.config_loader import Config
from giatmatrix.event_reader import EventReader, search_events
from giatmatrix.matrix_writer import MatrixWriter
from giatmatrix.models import CalendarEvent

pytestmark = pytest.mark.integration

RESOURCES = [
    {
        "id": "evt-rapat",
        "summary": "Rapat koordinasi",
        "location": "Aula Kecamatan",
        "description": (
            "Bahas anggaran<br>📍 Disposisi: Camat<br>"
            "Lampiran Surat Tugas/Undangan: https://drive.google.com/file/d/UND123/view<br>"
            "Disimpan pada: 1/8/2024"
        ),
        "start": {"dateTime": "2024-08-05T09:00:00+07:00"},
        "end": {"dateTime": "2024-08-05T11:00:00+07:00"},
    },
    {
        "id": "evt-apel",
        "summary": "Apel pagi",
        "location": "Lapangan",
        "start": {"dateTime": "2024-08-05T00:30:00Z"},
        "end": {"dateTime": "2024-08-05T01:00:00Z"},
        "attachments": [{"fileUrl": "https://drive.google.com/file/d/APL9/view", "title": "Daftar.pdf"}],
    },
    {
        "id": "evt-libur",
        "summary": "Cuti bersama",
        "description": "Disposisi: null",
        "start": {"date": "2024-08-05"},
        "end": {"date": "2024-08-06"},
    },
]


@pytest.fixture
def events(jakarta):
    return [CalendarEvent.from_api(resource, jakarta) for resource in RESOURCES]


class TestMatrixPipeline:
    """End-to-end behaviour over a fake spreadsheet."""

    def test_events_fill_column_in_order(self, events, sheet_client, write_guard, jakarta, august_2024_sheet):
        writer = MatrixWriter(sheet_client, tz=jakarta, guard=write_guard)
        results = [writer.write_event(event) for event in events]

        assert [r.cell for r in results] == [
            "Giat_Agustus_24!H18",
            "Giat_Agustus_24!H19",
            "Giat_Agustus_24!H20",
        ]
        entries = [decode_cell(august_2024_sheet[(row, 8)]) for row in (18, 19, 20)]
        assert [(e.summary, e.time_label, e.disposition) for e in entries] == [
            ("Rapat koordinasi", "Pukul 09.00", "Camat"),
            ("Apel pagi", "Pukul 07.30", ""),
            ("Cuti bersama", "", ""),
        ]
        assert write_guard.held == ["Giat_Agustus_24"] * 3

    def test_config_driven_writer_tags_entries(self, events, sheet_client, jakarta, august_2024_sheet):
        cfg = Config.from_dict({"tag_event_ids": True})
        writer = MatrixWriter(sheet_client, cfg.build_layout(), jakarta, sheet_prefix=cfg.sheet_prefix)

        writer.write_event(events[0], token="t1")
        writer.write_event(events[1], token="t1")

        assert writer.locate_entry("evt-apel") == "Giat_Agustus_24!H19"
        assert decode_cell(august_2024_sheet[(18, 8)]).event_id == "evt-rapat"

    def test_read_path_annotations(self, events):
        items = EventReader(reconciler=Config().build_reconciler()).read(events)

        rapat, apel, libur = items
        assert rapat.disposition == "Camat"
        assert rapat.annotations.cleaned_body == "Bahas anggaran"
        assert [a.file_id for a in rapat.attachments] == ["UND123"]
        assert rapat.attachments[0].title == "Lampiran Surat Tugas/Undangan"
        assert [a.source.value for a in apel.attachments] == ["api"]
        assert libur.disposition is None
        assert [i.event.id for i in search_events(items, "camat")] == ["evt-rapat"]
