"""Attachment reconciliation between the calendar API and event descriptions.

Attachments reach an event two ways: declared through the calendar API's
``attachments`` field, or embedded as links in the description text (older
events, and files uploaded by the create flow). Both are merged into one
list; a URL is one attachment no matter how many times or where it appears.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from typing import Any, Optional, Union

from bs4 import BeautifulSoup

from .models import Attachment, AttachmentSource

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_HOST = "drive.google.com"
DEFAULT_ATTACHMENT_KEYWORD = "Lampiran Undangan"
DEFAULT_TITLE = "File"

BARE_URL_RE = re.compile(r"https?://[^\s<>\"']+")
_TRAILING_PUNCTUATION = ".,;:)]}"

BARE_FILE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{20,}$")
FILE_ID_PATTERNS = (
    re.compile(r"/file/d/([A-Za-z0-9_-]+)"),
    re.compile(r"/uc\?export=download&id=([A-Za-z0-9_-]+)"),
    re.compile(r"[?&]id=([A-Za-z0-9_-]+)"),
    re.compile(r"/folders/([A-Za-z0-9_-]+)"),
)

ApiAttachment = Union[Attachment, dict[str, Any]]


def extract_file_id(url_or_id: Optional[str]) -> Optional[str]:
    """Extract a Drive file id from a share URL, or accept a bare id.

    Recognizes ``/file/d/<id>``, ``open?id=<id>``, ``uc?export=download&id=<id>``
    and ``/folders/<id>``.

    Returns:
        The id, or None when nothing matches
    """
    if not url_or_id:
        return None
    value = url_or_id.strip()
    if not value.startswith("http") and BARE_FILE_ID_RE.match(value):
        return value
    for pattern in FILE_ID_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)
    return None


def _api_attachment(raw: ApiAttachment) -> Optional[Attachment]:
    if isinstance(raw, Attachment):
        return raw.model_copy(update={"source": AttachmentSource.API})

    file_url = raw.get("fileUrl") or raw.get("file_url")
    if not file_url:
        logger.debug("Skipping API attachment without fileUrl: %r", raw)
        return None
    return Attachment(
        file_url=str(file_url),
        title=str(raw.get("title") or DEFAULT_TITLE),
        file_id=raw.get("fileId") or raw.get("file_id") or extract_file_id(str(file_url)),
        source=AttachmentSource.API,
    )


def _description_attachment(url: str, title: str) -> Attachment:
    return Attachment(
        file_url=url,
        title=title or DEFAULT_TITLE,
        file_id=extract_file_id(url) or url,
        source=AttachmentSource.DESCRIPTION,
    )


class AttachmentReconciler:
    """Merges API-declared and description-embedded attachments."""

    def __init__(
        self,
        storage_host: str = DEFAULT_STORAGE_HOST,
        keyword: str = DEFAULT_ATTACHMENT_KEYWORD,
        include_bare_links: bool = True,
    ):
        """Initialize the reconciler.

        Args:
            storage_host: Host token marking a URL as a stored file
            keyword: Link text marking an anchor as an attachment
            include_bare_links: Also pick up storage URLs written as plain text
        """
        self.storage_host = storage_host.lower()
        self.keyword = keyword.lower()
        self.include_bare_links = include_bare_links

    def is_candidate(self, url: str, text: str) -> bool:
        """Return True when a link looks like an attachment."""
        return self.keyword in (text or "").lower() or self.storage_host in url.lower()

    def description_links(self, description: Optional[str]) -> list[tuple[str, str]]:
        """Return ``(url, title)`` pairs for attachment links in a description.

        Anchors come first in document order, then bare storage URLs. Malformed
        HTML yields whatever could be parsed, never an error.
        """
        if not description:
            return []

        try:
            soup = BeautifulSoup(description, "html.parser")
        except Exception:
            logger.debug("Could not parse description HTML", exc_info=True)
            return []

        links: list[tuple[str, str]] = []
        for anchor in soup.find_all("a", href=True):
            url = str(anchor["href"]).strip()
            text = anchor.get_text(" ", strip=True)
            if url and self.is_candidate(url, text):
                links.append((url, text))

        if self.include_bare_links:
            for fragment in soup.find_all(string=True):
                if fragment.find_parent("a") is not None:
                    continue
                links.extend(self._bare_links(str(fragment)))

        return links

    def _bare_links(self, text: str) -> list[tuple[str, str]]:
        found = []
        for match in BARE_URL_RE.finditer(text):
            url = match.group(0).rstrip(_TRAILING_PUNCTUATION)
            if self.storage_host not in url.lower():
                continue
            label = text[: match.start()].strip().splitlines()
            title = label[-1].strip().rstrip(":").strip() if label else ""
            found.append((url, title))
        return found

    def reconcile(
        self,
        api_attachments: Optional[Sequence[ApiAttachment]],
        description: Optional[str],
    ) -> list[Attachment]:
        """Merge attachments from both sources.

        Args:
            api_attachments: Attachments declared by the calendar API
            description: Raw event description

        Returns:
            API attachments in input order, followed by description links
            whose URL is not already present
        """
        result: list[Attachment] = []
        seen: set[str] = set()

        for raw in api_attachments or []:
            attachment = _api_attachment(raw)
            if attachment is None or attachment.file_url in seen:
                continue
            seen.add(attachment.file_url)
            result.append(attachment)

        skipped = 0
        for url, title in self.description_links(description):
            if url in seen:
                skipped += 1
                continue
            seen.add(url)
            result.append(_description_attachment(url, title))

        if skipped:
            logger.debug("Dropped %d description links already declared", skipped)
        return result


def reconcile_attachments(
    api_attachments: Optional[Sequence[ApiAttachment]],
    description: Optional[str],
    storage_host: str = DEFAULT_STORAGE_HOST,
    keyword: str = DEFAULT_ATTACHMENT_KEYWORD,
    include_bare_links: bool = True,
) -> list[Attachment]:
    """Functional wrapper around :meth:`AttachmentReconciler.reconcile`."""
    reconciler = AttachmentReconciler(storage_host, keyword, include_bare_links)
    return reconciler.reconcile(api_attachments, description)


def merge_api_attachments(
    existing: Iterable[dict[str, Any]], new: Iterable[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Append ``new`` attachment resources whose ``fileId`` is not in ``existing``.

    Used when patching an event's attachment list so re-uploading a file does
    not declare it twice.
    """
    combined = list(existing)
    known = {item.get("fileId") for item in combined if item.get("fileId")}
    for item in new:
        file_id = item.get("fileId")
        if file_id and file_id in known:
            continue
        if file_id:
            known.add(file_id)
        combined.append(item)
    return combined
