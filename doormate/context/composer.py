"""Assemble the role-tagged message list sent to the completion service."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from doormate.context.collaborators import DocumentResolver, ProductCatalog
from doormate.errors import ParseError
from doormate.ingestion.extractor import extract_text
from doormate.ingestion.segmenter import normalize_whitespace, segment_sections
from doormate.llm.prompts import (
    SYSTEM_PROMPT,
    format_highlight,
    format_manual_context,
    format_product_context,
)
from doormate.models.chat import ChatRequest, ContextMessage, DocumentRef, Role
from doormate.models.section import Section
from doormate.retrieval.selector import render_sections, select_sections
from doormate.utils.tokenization import TokenCounter

logger = logging.getLogger(__name__)


def read_manual_sections(path: Path, query: Optional[str]) -> List[Section]:
    """Extract, segment and filter one manual. Blocking; run off the event loop."""
    extracted = extract_text(path)
    sections = segment_sections(normalize_whitespace(extracted.text))
    selected = select_sections(sections, query)
    logger.debug(
        "Selected %s of %s sections from %s (%s pages)",
        len(selected),
        len(sections),
        path,
        extracted.num_pages,
    )
    return selected


class ContextComposer:
    """Builds the per-request context.

    Product and manual lookups are best effort: a failing collaborator drops
    its message and composition carries on.
    """

    def __init__(
        self,
        catalog: ProductCatalog,
        resolver: DocumentResolver,
        token_counter: Optional[TokenCounter] = None,
        context_warn_tokens: Optional[int] = None,
    ) -> None:
        self.catalog = catalog
        self.resolver = resolver
        self.token_counter = token_counter
        self.context_warn_tokens = context_warn_tokens

    async def compose(self, request: ChatRequest) -> List[ContextMessage]:
        messages: List[ContextMessage] = [
            ContextMessage(role=Role.SYSTEM, content=SYSTEM_PROMPT)
        ]

        product_message = await self._product_message(request)
        if product_message:
            messages.append(product_message)

        for document in request.documents:
            manual_message = await self._manual_message(document, request.message)
            if manual_message:
                messages.append(manual_message)

        if request.highlighted_text and request.highlighted_text.strip():
            messages.append(
                ContextMessage(
                    role=Role.SYSTEM, content=format_highlight(request.highlighted_text)
                )
            )

        messages.extend(
            ContextMessage(role=turn.role, content=turn.text)
            for turn in request.previous_messages
        )
        messages.append(ContextMessage(role=Role.USER, content=request.message))

        await self._log_context_size(messages)
        return messages

    async def _product_message(self, request: ChatRequest) -> Optional[ContextMessage]:
        if not request.has_product_reference:
            return None
        try:
            product = await self.catalog.get_product(request.product_id, request.product_type)
        except Exception as exc:
            logger.error(
                "Product lookup failed for %s/%s: %s",
                request.product_type.value,
                request.product_id,
                exc,
                exc_info=True,
            )
            return None
        if product is None:
            logger.info(
                "Product %s/%s not found; continuing without product context",
                request.product_type.value,
                request.product_id,
            )
            return None
        return ContextMessage(role=Role.SYSTEM, content=format_product_context(product))

    async def _manual_message(
        self, document: DocumentRef, query: str
    ) -> Optional[ContextMessage]:
        try:
            path = self.resolver.resolve(document.url)
        except (OSError, ValueError) as exc:
            logger.warning("Could not resolve manual %s: %s", document.url, exc)
            return None
        if path is None:
            return None

        try:
            sections = await asyncio.to_thread(read_manual_sections, path, query)
        except (ParseError, OSError) as exc:
            logger.error("Skipping manual %s: %s", document.url, exc, exc_info=True)
            return None

        if not sections:
            return None
        content = format_manual_context(document.display_title, render_sections(sections))
        return ContextMessage(role=Role.SYSTEM, content=content)

    async def _log_context_size(self, messages: List[ContextMessage]) -> None:
        if self.token_counter is None:
            return
        total = await asyncio.to_thread(self._count_tokens, messages)
        logger.info("Composed %s messages (~%s tokens)", len(messages), total)
        if self.context_warn_tokens and total > self.context_warn_tokens:
            # Not enforced; see DESIGN.md on the context budget.
            logger.warning(
                "Composed context of ~%s tokens exceeds the %s token warning threshold",
                total,
                self.context_warn_tokens,
            )

    def _count_tokens(self, messages: List[ContextMessage]) -> int:
        return sum(self.token_counter(message.content) for message in messages)
