"""Relay upstream completion fragments to the caller as server-sent events."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, AsyncIterator, Optional

from fastapi import Request
from fastapi.responses import JSONResponse, Response, StreamingResponse

from doormate.models.chat import ErrorResponse

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
STREAM_TERMINATOR = "\n"
GENERIC_ERROR = "Error processing request"


class ResponderState(str, Enum):
    OPEN = "open"
    STREAMING = "streaming"
    COMPLETE = "complete"
    FAILED = "failed"


def create_sse_event(data: Any, event_type: Optional[str] = None) -> str:
    """Format one SSE event; ``event_type`` is omitted for plain data frames."""
    prefix = f"event: {event_type}\n" if event_type else ""
    return f"{prefix}data: {json.dumps(data)}\n\n"


async def _close_upstream(iterator: AsyncIterator[str]) -> None:
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()


class StreamingResponder:
    """One-shot relay for a single request's fragment stream.

    A failure before the first fragment becomes a 502 JSON response. Once
    streaming has begun the status is committed, so a later failure just ends
    the stream unless ``emit_error_event`` asks for a trailing error frame.
    """

    def __init__(self, request: Optional[Request] = None, emit_error_event: bool = False) -> None:
        self.request = request
        self.emit_error_event = emit_error_event
        self.state = ResponderState.OPEN
        self.fragments_sent = 0

    async def respond(self, fragments: AsyncIterator[str]) -> Response:
        iterator = fragments.__aiter__()
        try:
            first = await self._first_fragment(iterator)
        except Exception as exc:
            self.state = ResponderState.FAILED
            logger.error(
                "Upstream completion failed before streaming (%s): %s",
                type(exc).__name__,
                exc,
                exc_info=True,
            )
            await _close_upstream(iterator)
            body = ErrorResponse(error=GENERIC_ERROR, status_code=502)
            return JSONResponse(body.model_dump(), status_code=502)

        return StreamingResponse(
            self.events(iterator, first),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    async def _first_fragment(self, iterator: AsyncIterator[str]) -> Optional[str]:
        while True:
            try:
                fragment = await iterator.__anext__()
            except StopAsyncIteration:
                return None
            if fragment:
                return fragment

    async def _client_gone(self) -> bool:
        if self.request is None:
            return False
        return await self.request.is_disconnected()

    def _emit(self, fragment: str) -> str:
        self.fragments_sent += 1
        return create_sse_event({"content": fragment})

    async def events(
        self, iterator: AsyncIterator[str], first: Optional[str] = None
    ) -> AsyncIterator[str]:
        self.state = ResponderState.STREAMING
        try:
            if first is not None:
                yield self._emit(first)
                while True:
                    if await self._client_gone():
                        self.state = ResponderState.FAILED
                        logger.info(
                            "Client disconnected after %s fragments; stopping upstream",
                            self.fragments_sent,
                        )
                        return
                    try:
                        fragment = await iterator.__anext__()
                    except StopAsyncIteration:
                        break
                    if fragment:
                        yield self._emit(fragment)
            yield STREAM_TERMINATOR
            self.state = ResponderState.COMPLETE
        except Exception as exc:
            self.state = ResponderState.FAILED
            logger.error(
                "Upstream completion failed after %s fragments (%s): %s",
                self.fragments_sent,
                type(exc).__name__,
                exc,
                exc_info=True,
            )
            if self.emit_error_event:
                yield create_sse_event({"error": GENERIC_ERROR}, event_type="error")
        finally:
            await _close_upstream(iterator)
