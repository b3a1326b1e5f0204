"""Lexical relevance filter over segmented manual sections."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from doormate.models.section import RelevanceQuery, Section

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = "\n"


def build_query(text: Optional[str]) -> RelevanceQuery:
    if not text:
        return RelevanceQuery()
    return RelevanceQuery(terms=frozenset(text.lower().split()))


def section_matches(section: Section, query: RelevanceQuery) -> bool:
    haystack = section.flat_text().lower()
    return any(term in haystack for term in query.terms)


def select_sections(sections: Sequence[Section], query_text: Optional[str] = None) -> List[Section]:
    """Keep sections containing any query term, in their original order.

    An empty query keeps everything. When nothing matches the full list is
    returned so the assistant still gets manual context.
    """
    query = build_query(query_text)
    if query.is_empty:
        return list(sections)
    matched = [section for section in sections if section_matches(section, query)]
    if not matched:
        logger.debug(
            "No section matched %s terms; falling back to all %s sections",
            len(query.terms),
            len(sections),
        )
        return list(sections)
    return matched


def render_sections(sections: Sequence[Section]) -> str:
    return SECTION_SEPARATOR.join(section.render() for section in sections)
