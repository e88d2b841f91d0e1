"""
In-memory ownership of the documents being edited.

The DocumentStore keeps one PyMuPDF document per document identifier and is
the only place that mutates them. Every public method takes the store lock,
so concurrent requests against the same document are applied one after the
other instead of racing.

Document lifecycle:
    absent -> created (ensure_exists) -> mutated (add/insert) -> absent (reset)

Nothing is persisted; restarting the process drops every document. At most
``max_documents`` are held at once; creating one more evicts the least
recently used.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from threading import Lock
from typing import Any, Optional

import fitz  # PyMuPDF

from .models import DocumentInfo, PageSize
from .pdf_operations import (
    DEFAULT_TITLE,
    LETTER_HEIGHT,
    LETTER_WIDTH,
    TITLE_FONT_SIZE,
    TITLE_TOP_OFFSET,
    InsertResult,
    TitlePageResult,
    add_title_page,
    insert_document,
    new_document,
    open_source_document,
)

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_ID = "default"
DEFAULT_MAX_DOCUMENTS = 64


class DocumentNotFound(LookupError):
    """No exportable document exists for the requested identifier."""


class DocumentStore:
    """
    Registry of in-memory documents keyed by identifier.

    Attributes:
        page_width: Width in points of pages created by add_title_page
        page_height: Height in points of pages created by add_title_page
        title_font_size: Font size used for titles
        title_top_offset: Distance of the title baseline from the top edge
        default_title: Title used when the caller sends none
        max_documents: Number of documents kept before the least recently used is evicted
    """

    def __init__(
        self,
        page_width: float = LETTER_WIDTH,
        page_height: float = LETTER_HEIGHT,
        title_font_size: float = TITLE_FONT_SIZE,
        title_top_offset: float = TITLE_TOP_OFFSET,
        default_title: str = DEFAULT_TITLE,
        max_documents: int = DEFAULT_MAX_DOCUMENTS,
    ) -> None:
        if max_documents < 1:
            raise ValueError(f"max_documents must be at least 1, got {max_documents}")
        self.page_width = page_width
        self.page_height = page_height
        self.title_font_size = title_font_size
        self.title_top_offset = title_top_offset
        self.default_title = default_title
        self.max_documents = max_documents
        self._documents: OrderedDict[str, fitz.Document] = OrderedDict()
        self._lock = Lock()

    def _ensure_locked(self, document_id: str) -> tuple[fitz.Document, bool]:
        document = self._documents.get(document_id)
        if document is not None:
            self._documents.move_to_end(document_id)
            return document, False
        while len(self._documents) >= self.max_documents:
            evicted_id, evicted = self._documents.popitem(last=False)
            evicted.close()
            logger.warning(f"Evicted document '{evicted_id}', store holds at most {self.max_documents}")
        document = new_document()
        self._documents[document_id] = document
        logger.info(f"Created empty document '{document_id}'")
        return document, True

    def ensure_exists(self, document_id: str = DEFAULT_DOCUMENT_ID) -> bool:
        """
        Create an empty document if none exists yet.

        Returns:
            True if a document was created, False if one already existed
        """
        with self._lock:
            _, created = self._ensure_locked(document_id)
            return created

    def reset(self, document_id: str = DEFAULT_DOCUMENT_ID) -> bool:
        """
        Discard the document, leaving it absent until the next mutation.

        Returns:
            True if a document was discarded
        """
        with self._lock:
            document = self._documents.pop(document_id, None)
        if document is None:
            return False
        document.close()
        logger.info(f"Discarded document '{document_id}'")
        return True

    def exists(self, document_id: str = DEFAULT_DOCUMENT_ID) -> bool:
        with self._lock:
            return document_id in self._documents

    def page_count(self, document_id: str = DEFAULT_DOCUMENT_ID) -> int:
        with self._lock:
            document = self._documents.get(document_id)
            return document.page_count if document is not None else 0

    def describe(self, document_id: str = DEFAULT_DOCUMENT_ID) -> DocumentInfo:
        with self._lock:
            document = self._documents.get(document_id)
            if document is None:
                return DocumentInfo(document_id=document_id, exists=False, page_count=0)
            pages = [PageSize(width=page.rect.width, height=page.rect.height) for page in document]
            return DocumentInfo(document_id=document_id, exists=True, page_count=document.page_count, pages=pages)

    def add_title_page(
        self,
        title: Optional[str] = None,
        position: Any = None,
        font: Any = None,
        document_id: str = DEFAULT_DOCUMENT_ID,
    ) -> tuple[TitlePageResult, int]:
        """
        Add a titled page, creating the document first if needed.

        Returns:
            The operation result and the page count afterwards
        """
        with self._lock:
            document, _ = self._ensure_locked(document_id)
            result = add_title_page(
                document,
                title,
                position,
                font,
                width=self.page_width,
                height=self.page_height,
                font_size=self.title_font_size,
                top_offset=self.title_top_offset,
                default_title=self.default_title,
            )
            return result, document.page_count

    def insert_document(
        self,
        data: bytes,
        position: Any = None,
        document_id: str = DEFAULT_DOCUMENT_ID,
    ) -> tuple[InsertResult, int]:
        """
        Insert all pages of an uploaded PDF, creating the document first if needed.

        The upload is parsed before anything else happens, so a rejected file
        leaves the store exactly as it was.

        Returns:
            The operation result and the page count afterwards

        Raises:
            DocumentRejected: If the bytes are not a usable PDF
        """
        source = open_source_document(data)
        try:
            with self._lock:
                document, _ = self._ensure_locked(document_id)
                result = insert_document(document, source, position)
                return result, document.page_count
        finally:
            source.close()

    def export(self, document_id: str = DEFAULT_DOCUMENT_ID) -> bytes:
        """
        Serialize the document to PDF bytes.

        Raises:
            DocumentNotFound: If the document is absent or has no pages
        """
        with self._lock:
            document = self._documents.get(document_id)
            if document is None:
                raise DocumentNotFound("No PDF available.")
            if document.page_count == 0:
                raise DocumentNotFound("The PDF has no pages yet.")
            self._documents.move_to_end(document_id)
            data = document.tobytes(garbage=3, deflate=True)
        logger.debug(f"Exported document '{document_id}' ({len(data)} bytes)")
        return data

    def clear(self) -> None:
        with self._lock:
            documents = list(self._documents.values())
            self._documents.clear()
        for document in documents:
            document.close()
