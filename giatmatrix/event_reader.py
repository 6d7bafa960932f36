"""Read path: annotate fetched events for display and search."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Optional

from pydantic import BaseModel, Field

from .attachment_reconciler import AttachmentReconciler
from .description_parser import DescriptionParser
from .models import Attachment, CalendarEvent, DescriptionAnnotations

logger = logging.getLogger(__name__)


class ReadEvent(BaseModel):
    """An event with its derived annotations and reconciled attachments."""

    event: CalendarEvent
    annotations: DescriptionAnnotations = Field(default_factory=DescriptionAnnotations)
    attachments: list[Attachment] = Field(default_factory=list)
    section: Optional[str] = Field(default=None, description="Section (bagian) owning the entry")

    @property
    def disposition(self) -> Optional[str]:
        return self.annotations.disposition


class EventReader:
    """Applies DescriptionParser and AttachmentReconciler to each event."""

    def __init__(
        self,
        parser: Optional[DescriptionParser] = None,
        reconciler: Optional[AttachmentReconciler] = None,
    ):
        self.parser = parser or DescriptionParser()
        self.reconciler = reconciler or AttachmentReconciler()

    def read_event(self, event: CalendarEvent, section: Optional[str] = None) -> ReadEvent:
        return ReadEvent(
            event=event,
            annotations=self.parser.parse(event.description),
            attachments=self.reconciler.reconcile(event.attachments, event.description),
            section=section,
        )

    def read(
        self,
        events: Iterable[CalendarEvent],
        sections: Optional[Mapping[str, str]] = None,
    ) -> list[ReadEvent]:
        """Annotate events in input order.

        Args:
            events: Events fetched from the calendar service
            sections: Optional event id -> section name mapping

        Returns:
            ReadEvent per input event
        """
        sections = sections or {}
        items = [self.read_event(e, sections.get(e.id or "")) for e in events]
        logger.debug("Annotated %d events", len(items))
        return items


def matches_query(item: ReadEvent, query: str) -> bool:
    """Case-insensitive substring match on summary, location, disposition and section."""
    needle = query.strip().lower()
    if not needle:
        return True
    haystacks = (item.event.summary, item.event.location, item.disposition, item.section)
    return any(needle in value.lower() for value in haystacks if value)


def search_events(items: Iterable[ReadEvent], query: Optional[str]) -> list[ReadEvent]:
    """Keep events matching ``query``; an empty query keeps everything."""
    if not query or not query.strip():
        return list(items)
    return [item for item in items if matches_query(item, query)]
