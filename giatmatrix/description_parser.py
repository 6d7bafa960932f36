"""Annotation extraction from free-text/HTML event descriptions.

Descriptions written by the scheduling tool carry annotation lines
(``📍 Disposisi: ...``, ``🆔 Giat_...``), attachment link lines and a trailing
save-timestamp block (``Disimpan pada: ...`` or ``📅 5/8/2024, 9:00:00 AM``).
Parsing is an ordered pipeline of pure text transforms:

1. ``strip_saved_at_block``    -- drops ``Disimpan pada:`` and everything after it
2. ``strip_timestamp_block``   -- drops a ``📅`` timestamp and everything after it
3. ``find_disposition_candidate`` -- text after ``Disposisi:`` in what remains
4. ``clean_disposition``       -- tags stripped, trimmed, ``null`` -> None
5. first line of the cleaned disposition only
6. ``clean_body``              -- marker lines filtered, blank lines collapsed

Steps 1-2 always run before step 3, so a timestamp block can never leak into
the disposition. Every function here is total over arbitrary strings.
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Callable, Iterable
from typing import Optional

from .models import DescriptionAnnotations

logger = logging.getLogger(__name__)

TextTransform = Callable[[str], str]

_BR = r"<br\s*/?>"
_TIMESTAMP = r"\d{1,2}/\d{1,2}/\d{4}, \d{1,2}:\d{2}:\d{2} (?:AM|PM)"

SAVED_AT_BLOCK_RE = re.compile(rf"(?:{_BR}\s*)*Disimpan pada:[\s\S]*", re.IGNORECASE)
TIMESTAMP_BLOCK_RE = re.compile(rf"(?:{_BR}\s*)*📅\s*{_TIMESTAMP}[\s\S]*", re.IGNORECASE)
ATTACHMENT_SUMMARY_RE = re.compile(
    rf"(?:^|{_BR}|\n)\s*Lampiran \(\d+ file\)[\s\S]*", re.IGNORECASE
)
DISPOSITION_RE = re.compile(r"(?:📍\s*)?Disposisi:\s*([\s\S]*)", re.IGNORECASE)
SAVED_AT_TEXT_RE = re.compile(r"Disimpan pada:\s*(.*)", re.IGNORECASE)
TIMESTAMP_TEXT_RE = re.compile(rf"📅\s*({_TIMESTAMP})", re.IGNORECASE)

# Line breaks and block tags both end a visual line in HTML descriptions.
_BLOCK_BOUNDARY = rf"{_BR}|</?(?:p|div|li)\b[^>]*>"
BLOCK_BOUNDARY_RE = re.compile(_BLOCK_BOUNDARY, re.IGNORECASE)
LINE_BREAK_RE = re.compile(rf"{_BLOCK_BOUNDARY}|\r?\n", re.IGNORECASE)
BR_TAG_RE = re.compile(_BR, re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]*>")

# Lines the tool generates itself; hidden from the displayed body.
MARKER_LINE_RE = re.compile(
    r"^(?:"
    r"(?:📍\s*)?Disposisi:"
    r"|🆔\s*Giat_"
    r"|Lampiran Undangan"
    r"|Lampiran Surat Tugas/Undangan:"
    r"|Lampiran \(\d+ file\)"
    r")",
    re.IGNORECASE,
)


def strip_tags(text: str) -> str:
    """Remove inline HTML tags and unescape entities."""
    return html.unescape(TAG_RE.sub("", text)).replace("\xa0", " ")


def strip_saved_at_block(text: str) -> str:
    """Pre: any string. Post: no ``Disimpan pada:`` marker remains."""
    return SAVED_AT_BLOCK_RE.sub("", text, count=1)


def strip_timestamp_block(text: str) -> str:
    """Pre: saved-at block already removed. Post: no ``📅`` timestamp remains."""
    return TIMESTAMP_BLOCK_RE.sub("", text, count=1)


def strip_attachment_summary(text: str) -> str:
    """Drop a trailing ``Lampiran (N file)`` summary block left by attachment updates."""
    return ATTACHMENT_SUMMARY_RE.sub("", text, count=1)


SAVED_AT_PIPELINE: tuple[TextTransform, ...] = (strip_saved_at_block, strip_timestamp_block)
BODY_PIPELINE: tuple[TextTransform, ...] = SAVED_AT_PIPELINE + (strip_attachment_summary,)


def run_pipeline(text: str, steps: Iterable[TextTransform]) -> str:
    """Apply ``steps`` in order, each to the previous step's output."""
    for step in steps:
        text = step(text)
    return text


def find_disposition_candidate(text: str) -> Optional[str]:
    """Return the raw text after the first ``Disposisi:`` marker, or None."""
    match = DISPOSITION_RE.search(text)
    if not match:
        return None
    return match.group(1)


def _is_absent(text: str) -> bool:
    return text == "" or text.lower() == "null"


def clean_disposition(candidate: Optional[str]) -> Optional[str]:
    """Reduce a raw candidate to its first plain-text line.

    Line-break tags become newlines before tags are stripped, so text on the
    next HTML line never runs into the disposition.
    """
    if candidate is None:
        return None

    plain = strip_tags(BLOCK_BOUNDARY_RE.sub("\n", candidate)).strip()
    if _is_absent(plain):
        return None

    first_line = plain.split("\n")[0].strip()
    if _is_absent(first_line):
        return None
    return first_line


def extract_saved_at_text(text: str) -> Optional[str]:
    """Return the save timestamp text, preferring ``Disimpan pada:`` over ``📅``."""
    match = SAVED_AT_TEXT_RE.search(text)
    if match:
        first_line = BR_TAG_RE.split(match.group(1))[0]
        saved_at = strip_tags(first_line).strip()
        if saved_at:
            return saved_at

    match = TIMESTAMP_TEXT_RE.search(text)
    if match:
        return match.group(1)
    return None


def clean_body(text: str) -> str:
    """Return the displayable body.

    Saved-at and attachment summary blocks are removed, generated marker lines
    are dropped and blank lines collapse. ``<br>`` and ``<p>``/``<div>``/``<li>``
    tags end lines; output is joined with ``<br>`` when the input used such
    tags, newlines otherwise.
    """
    body = run_pipeline(text, BODY_PIPELINE)
    separator = "<br>" if BLOCK_BOUNDARY_RE.search(body) else "\n"

    kept: list[str] = []
    for line in LINE_BREAK_RE.split(body):
        stripped = line.strip()
        if not stripped:
            continue
        if MARKER_LINE_RE.match(strip_tags(stripped).strip()):
            continue
        kept.append(stripped)

    return separator.join(kept)


class DescriptionParser:
    """Parser for annotation markers in event descriptions."""

    def parse(self, description: Optional[str]) -> DescriptionAnnotations:
        """Derive annotations from a raw description.

        Args:
            description: Raw description; None or empty is allowed

        Returns:
            DescriptionAnnotations with absent fields as None / empty body
        """
        if not description:
            return DescriptionAnnotations()

        remainder = run_pipeline(description, SAVED_AT_PIPELINE)
        disposition = clean_disposition(find_disposition_candidate(remainder))
        annotations = DescriptionAnnotations(
            disposition=disposition,
            saved_at_text=extract_saved_at_text(description),
            cleaned_body=clean_body(description),
        )
        logger.debug(
            "Parsed description: disposition=%r saved_at=%r",
            annotations.disposition,
            annotations.saved_at_text,
        )
        return annotations

    def extract_disposition(self, description: Optional[str]) -> Optional[str]:
        """Shortcut for ``parse(description).disposition``."""
        if not description:
            return None
        return clean_disposition(
            find_disposition_candidate(run_pipeline(description, SAVED_AT_PIPELINE))
        )


_default_parser = DescriptionParser()


def parse_description(description: Optional[str]) -> DescriptionAnnotations:
    """Module-level convenience wrapper around :class:`DescriptionParser`."""
    return _default_parser.parse(description)


def extract_disposition(description: Optional[str]) -> Optional[str]:
    """Module-level shortcut for the disposition alone."""
    return _default_parser.extract_disposition(description)
