"""Split manual text into numbered sections with hyphen-delimited bullets."""

from __future__ import annotations

import re
from typing import List

from doormate.models.section import Section

WHITESPACE_PATTERN = re.compile(r"\s+")
# "12. " starts a section; the lookbehind keeps "12" from also splitting at "2".
SECTION_BOUNDARY = re.compile(r"(?<!\d)(?=\d+\. )")
BULLET_DELIMITER = "-"


def normalize_whitespace(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def split_chunks(text: str) -> List[str]:
    """Cut text at every section boundary, keeping any leading preamble."""
    chunks = [chunk.strip() for chunk in SECTION_BOUNDARY.split(text)]
    return [chunk for chunk in chunks if chunk]


def parse_chunk(chunk: str) -> Section:
    title, delimiter, remainder = chunk.partition(BULLET_DELIMITER)
    if not delimiter:
        return Section(title=chunk.strip())
    bullets = [part.strip() for part in remainder.split(BULLET_DELIMITER)]
    return Section(title=title.strip(), bullets=[bullet for bullet in bullets if bullet])


def segment_sections(text: str) -> List[Section]:
    """Return sections in source order.

    Input is expected to be whitespace-normalized already; it is normalized
    again here so callers passing raw page text get the same result.
    """
    return [parse_chunk(chunk) for chunk in split_chunks(normalize_whitespace(text))]
