"""Streaming wrapper around the OpenAI Chat Completions API."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional, Protocol, Sequence

import openai
from openai import AsyncOpenAI

from doormate.config import Settings
from doormate.models.chat import ContextMessage

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    # Only the delta-seconds form; HTTP dates fall back to exponential backoff.
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class CompletionClient(Protocol):
    def stream(self, messages: Sequence[ContextMessage]) -> AsyncIterator[str]:
        """Yield generated text fragments in order."""


class OpenAIChatClient:
    """Built once at startup and shared by all requests."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1000,
        max_retries: int = 1,
        timeout: float = 60.0,
        retry_backoff: float = 1.0,
        max_backoff: float = 10.0,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ValueError("OPENAI_API_KEY is not configured in the environment.")
            # Retries and backoff happen in _open_stream.
            client = AsyncOpenAI(
                api_key=api_key, base_url=base_url, max_retries=0, timeout=timeout
            )
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.max_backoff = max_backoff

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIChatClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model_chat,
            base_url=settings.openai_base_url,
            temperature=settings.chat_temperature,
            max_tokens=settings.chat_max_tokens,
            max_retries=settings.upstream_max_retries,
            timeout=settings.upstream_timeout_seconds,
            retry_backoff=settings.upstream_retry_backoff_seconds,
            max_backoff=settings.upstream_max_backoff_seconds,
        )

    def _retry_delay(self, exc: Exception, attempt: int) -> float:
        """Seconds to wait before retry ``attempt``, bounded by ``max_backoff``.

        A ``Retry-After`` header in seconds wins over the exponential default.
        """
        delay = self.retry_backoff * 2 ** (attempt - 1)
        response = getattr(exc, "response", None)
        if response is not None:
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            if retry_after is not None:
                delay = retry_after
        return min(max(delay, 0.0), self.max_backoff)

    async def _open_stream(self, payload: List[dict]):
        attempt = 0
        while True:
            try:
                return await self.client.chat.completions.create(
                    model=self.model,
                    messages=payload,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    stream=True,
                )
            except TRANSIENT_ERRORS as exc:
                if attempt >= self.max_retries:
                    raise
                attempt += 1
                delay = self._retry_delay(exc, attempt)
                logger.warning(
                    "Completion request failed (%s: %s); retry %s of %s in %.1fs",
                    type(exc).__name__,
                    exc,
                    attempt,
                    self.max_retries,
                    delay,
                )
                await asyncio.sleep(delay)

    async def stream(self, messages: Sequence[ContextMessage]) -> AsyncIterator[str]:
        payload = [message.to_openai() for message in messages]
        response = await self._open_stream(payload)
        try:
            async for chunk in response:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        finally:
            await response.close()
