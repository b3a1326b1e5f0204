"""Helpers for loading tiktoken encodings with operator-controlled fallback."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import tiktoken

from doormate.config import Settings

logger = logging.getLogger(__name__)

TokenCounter = Callable[[str], int]


def get_cl100k_encoding(context: str, allow_fallback: bool) -> Optional[tiktoken.Encoding]:
    """Load the OpenAI tokenizer, or return None when fallback is allowed."""
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception as exc:
        if not allow_fallback:
            raise RuntimeError(
                f"Failed to load tiktoken 'cl100k_base' while {context}. Reason: {exc}. "
                "Set ALLOW_TIKTOKEN_FALLBACK=1 to allow whitespace fallback."
            ) from exc
        logger.warning(
            "Failed to load tiktoken 'cl100k_base' while %s (%s). "
            "Proceeding with whitespace token approximation.",
            context,
            exc,
        )
        return None


def count_tokens(text: str, encoding: Optional[tiktoken.Encoding]) -> int:
    """Count tokens using tiktoken if available, otherwise whitespace approximation."""
    if encoding:
        return len(encoding.encode(text))
    return len(text.split())


def build_token_counter(settings: Settings) -> TokenCounter:
    encoding = get_cl100k_encoding(
        "measuring composed chat context", settings.allow_tiktoken_fallback
    )
    return lambda text: count_tokens(text, encoding)
