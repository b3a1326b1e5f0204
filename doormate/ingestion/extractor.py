"""Read product manuals (PDF) into page-ordered plain text."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, List, Union
from urllib.parse import unquote

import fitz

from doormate.errors import ParseError, RangeError
from doormate.models.document import ExtractedText, PageText, SourceDocument

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"

PathLike = Union[str, Path]


def decode_run(text: str) -> str:
    """Percent-decode an escaped text run."""
    return unquote(text, errors="replace")


def iter_text_runs(page: fitz.Page) -> Iterator[str]:
    """Yield the decoded text spans of a page in reading order."""
    layout = page.get_text("dict", sort=True)
    for block in layout.get("blocks", []):
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if text.strip():
                    yield decode_run(text)


def _open(path: PathLike) -> fitz.Document:
    resolved = Path(path).resolve()
    if not resolved.is_file():
        raise ParseError(resolved, "file does not exist or is not a regular file")
    try:
        doc = fitz.open(resolved)
    except (RuntimeError, ValueError) as exc:
        raise ParseError(resolved, str(exc)) from exc
    if doc.needs_pass:
        doc.close()
        raise ParseError(resolved, "document is encrypted")
    if doc.page_count == 0:
        doc.close()
        raise ParseError(resolved, "document has no pages")
    return doc


def extract_pages(path: PathLike) -> List[PageText]:
    """Return one PageText per page, numbered from 1."""
    doc = _open(path)
    pages: List[PageText] = []
    with doc:
        for page_index in range(doc.page_count):
            page_number = page_index + 1
            try:
                runs = list(iter_text_runs(doc[page_index]))
            except RuntimeError as exc:
                raise ParseError(path, f"page {page_number}: {exc}") from exc
            if not runs:
                logger.debug("No text runs on page %s of %s", page_number, path)
            pages.append(PageText(page_number=page_number, raw_text=" ".join(runs)))
    logger.debug("Extracted %s pages from %s", len(pages), path)
    return pages


def load_document(path: PathLike) -> SourceDocument:
    return SourceDocument(path=str(path), pages=extract_pages(path))


def extract_text(path: PathLike) -> ExtractedText:
    """Return the whole document as text, pages joined by a paragraph break."""
    pages = extract_pages(path)
    text = PAGE_SEPARATOR.join(page.raw_text for page in pages)
    if not text.strip():
        logger.warning("No text content extracted from %s", path)
    return ExtractedText(text=text, num_pages=len(pages))


def extract_section(path: PathLike, start_page: int, end_page: int) -> str:
    """Return the text of pages ``start_page`` to ``end_page`` inclusive."""
    if start_page > end_page:
        raise RangeError(start_page, end_page)
    pages = extract_pages(path)
    if start_page < 1 or end_page > len(pages):
        raise RangeError(start_page, end_page, len(pages))
    return PAGE_SEPARATOR.join(
        page.raw_text for page in pages if start_page <= page.page_number <= end_page
    )
