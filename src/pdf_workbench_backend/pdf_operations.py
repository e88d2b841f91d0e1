"""
Page-level PDF mutations built on PyMuPDF.

This module holds the only code that talks to the PDF library:
- Opening uploaded bytes as a source document
- Adding a letter-size page with a centred title
- Copying every page of a source document into a target as one block

Functions here operate on a ``fitz.Document`` they are given and never keep
state of their own; ownership of documents lives in ``document_store``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import fitz  # PyMuPDF

from .models import FontChoice
from .positions import ResolvedPosition, resolve_position

logger = logging.getLogger(__name__)

# Base-14 font names understood by PyMuPDF
BASE14_FONTS = {
    FontChoice.HELVETICA: "helv",
    FontChoice.TIMES_ROMAN: "tiro",
    FontChoice.COURIER: "cour",
    FontChoice.SYMBOL: "symb",
    FontChoice.ZAPF_DINGBATS: "zadb",
}

DEFAULT_FONT = FontChoice.HELVETICA

LETTER_WIDTH = 612
LETTER_HEIGHT = 792
TITLE_FONT_SIZE = 24
TITLE_TOP_OFFSET = 50
DEFAULT_TITLE = "Title"


class DocumentRejected(ValueError):
    """Uploaded bytes could not be used as a source document."""


@dataclass(frozen=True)
class TitlePageResult:
    title: str
    position: ResolvedPosition
    font: FontChoice


@dataclass(frozen=True)
class InsertResult:
    position: ResolvedPosition
    inserted_pages: int


def new_document() -> fitz.Document:
    return fitz.open()


def select_font(name: Any) -> FontChoice:
    """
    Map a client-supplied font name to a supported face.

    Matching is case-insensitive. Unknown, empty and non-string values select
    Helvetica.
    """
    if not isinstance(name, str) or not name.strip():
        if name not in (None, ""):
            logger.warning(f"Unusable font value {name!r}, using {DEFAULT_FONT.value}")
        return DEFAULT_FONT
    try:
        return FontChoice(name.strip().lower())
    except ValueError:
        logger.warning(f"Unknown font '{name}', using {DEFAULT_FONT.value}")
        return DEFAULT_FONT


def _library_index(document: fitz.Document, index: int) -> int:
    # PyMuPDF spells "append" as -1
    return -1 if index >= document.page_count else index


def _draw_centered_title(
    page: fitz.Page,
    title: str,
    font: FontChoice,
    font_size: float,
    top_offset: float,
) -> None:
    fontname = BASE14_FONTS[font]
    text_width = fitz.get_text_length(title, fontname=fontname, fontsize=font_size)
    x = (page.rect.width - text_width) / 2
    page.insert_text(
        fitz.Point(x, top_offset),
        title,
        fontname=fontname,
        fontsize=font_size,
        color=(0, 0, 0),
    )


def _draw_with_fallback(
    page: fitz.Page,
    title: str,
    font: FontChoice,
    font_size: float,
    top_offset: float,
) -> FontChoice:
    try:
        _draw_centered_title(page, title, font, font_size, top_offset)
        return font
    except (RuntimeError, ValueError) as exc:
        if font is DEFAULT_FONT:
            raise
        logger.warning(f"Failed to embed font {font.value}, falling back to {DEFAULT_FONT.value}: {exc}")
    _draw_centered_title(page, title, DEFAULT_FONT, font_size, top_offset)
    return DEFAULT_FONT


def add_title_page(
    document: fitz.Document,
    title: Optional[str] = None,
    position: Any = None,
    font: Any = None,
    *,
    width: float = LETTER_WIDTH,
    height: float = LETTER_HEIGHT,
    font_size: float = TITLE_FONT_SIZE,
    top_offset: float = TITLE_TOP_OFFSET,
    default_title: str = DEFAULT_TITLE,
) -> TitlePageResult:
    """
    Insert a new blank page carrying a horizontally centred title.

    The title baseline sits ``top_offset`` points below the top edge. If the
    chosen face cannot be used the title is drawn with Helvetica instead; this
    function does not raise for bad client input.

    Args:
        document: Target document, mutated in place
        title: Title text; empty or missing uses ``default_title``
        position: Raw requested insertion index
        font: Raw font name, see ``select_font``

    Returns:
        TitlePageResult describing what was actually inserted
    """
    effective_title = title or default_title
    resolved = resolve_position(position, document.page_count)
    choice = select_font(font)

    page = document.new_page(_library_index(document, resolved.index), width=width, height=height)
    try:
        choice = _draw_with_fallback(page, effective_title, choice, font_size, top_offset)
    except Exception:
        # no blank page is left behind when even Helvetica fails
        document.delete_page(page.number)
        raise

    logger.info(f"Added title page '{effective_title}' at {resolved.index} using {choice.value}")
    return TitlePageResult(title=effective_title, position=resolved, font=choice)


def open_source_document(data: bytes) -> fitz.Document:
    """
    Open uploaded bytes as a PDF to copy pages from.

    Raises:
        DocumentRejected: If the bytes are empty, not a PDF, encrypted, or
            contain no pages
    """
    if not data:
        raise DocumentRejected("Uploaded file is empty.")
    try:
        source = fitz.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise DocumentRejected(f"Uploaded file is not a readable PDF: {exc}") from exc

    if source.needs_pass:
        source.close()
        raise DocumentRejected("Uploaded PDF is password protected.")
    if source.page_count == 0:
        source.close()
        raise DocumentRejected("Uploaded PDF contains no pages.")
    return source


def insert_document(document: fitz.Document, source: fitz.Document, position: Any = None) -> InsertResult:
    """
    Copy every page of ``source`` into ``document`` as one contiguous block.

    The index is resolved against the target's page count before insertion.
    Source pages keep their order and their original dimensions.

    Args:
        document: Target document, mutated in place
        source: Already opened source document, see ``open_source_document``
        position: Raw requested insertion index

    Returns:
        InsertResult with the resolved index and number of pages copied
    """
    resolved = resolve_position(position, document.page_count)
    inserted = source.page_count
    document.insert_pdf(source, start_at=_library_index(document, resolved.index))
    logger.info(f"Inserted {inserted} page(s) at {resolved.index}")
    return InsertResult(position=resolved, inserted_pages=inserted)
