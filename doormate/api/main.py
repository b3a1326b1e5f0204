"""FastAPI application entry point."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response

from doormate.config import Settings, get_settings
from doormate.context.collaborators import (
    DocumentResolver,
    JsonProductCatalog,
    ManualPathResolver,
    ProductCatalog,
)
from doormate.context.composer import ContextComposer
from doormate.errors import ParseError, RangeError
from doormate.ingestion.extractor import extract_section
from doormate.llm.openai_client import CompletionClient, OpenAIChatClient
from doormate.models.chat import ChatRequest, ContextMessage, Role
from doormate.streaming.responder import StreamingResponder
from doormate.utils.tokenization import build_token_counter

logger = logging.getLogger(__name__)

CONNECTIVITY_PROMPT = "Say 'Connection successful!'"


def create_app(
    settings: Optional[Settings] = None,
    completion_client: Optional[CompletionClient] = None,
    catalog: Optional[ProductCatalog] = None,
    resolver: Optional[DocumentResolver] = None,
) -> FastAPI:
    """Wire the assistant pipeline from explicit dependencies."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    if completion_client is None:
        completion_client = OpenAIChatClient.from_settings(settings)
    if catalog is None:
        catalog_path = settings.product_catalog_path_obj
        catalog = (
            JsonProductCatalog.from_path(catalog_path)
            if catalog_path
            else JsonProductCatalog.empty()
        )
    if resolver is None:
        resolver = ManualPathResolver(settings.manuals_root_path)

    composer = ContextComposer(
        catalog=catalog,
        resolver=resolver,
        token_counter=(
            build_token_counter(settings) if settings.measure_context_tokens else None
        ),
        context_warn_tokens=settings.context_warn_tokens,
    )

    app = FastAPI(
        title="DoorMate",
        description="Product-support assistant for doors, gates, motors and control systems",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.composer = composer
    app.state.completion_client = completion_client
    app.state.resolver = resolver

    @app.get("/health")
    def health() -> dict[str, str]:
        """Simple readiness probe."""
        return {"status": "ok"}

    @app.get("/api/assistant/test")
    async def upstream_check() -> Response:
        """Send a one-line prompt upstream to confirm the completion service answers."""
        messages = [ContextMessage(role=Role.USER, content=CONNECTIVITY_PROMPT)]
        try:
            reply = "".join([fragment async for fragment in completion_client.stream(messages)])
        except Exception as exc:
            logger.error("Upstream connectivity check failed: %s", exc, exc_info=True)
            return JSONResponse(
                status_code=502,
                content={"success": False, "error": "Upstream completion service unavailable"},
            )
        return JSONResponse(content={"success": True, "message": reply})

    @app.post("/api/assistant/chat")
    async def chat(payload: ChatRequest, request: Request) -> Response:
        """Answer a technician question as a stream of SSE fragments."""
        logger.info(
            "Chat request: product=%s/%s documents=%s history=%s",
            payload.product_type.value if payload.product_type else None,
            payload.product_id,
            len(payload.documents),
            len(payload.previous_messages),
        )
        messages = await composer.compose(payload)
        responder = StreamingResponder(
            request, emit_error_event=settings.emit_stream_error_event
        )
        return await responder.respond(completion_client.stream(messages))

    @app.get("/api/manuals/{filename}/pages")
    async def manual_pages(
        filename: str,
        start: int = Query(..., ge=1),
        end: int = Query(..., ge=1),
    ) -> dict[str, str]:
        """Return the text of an inclusive page range of a manual."""
        path = resolver.resolve(filename)
        if path is None:
            raise HTTPException(status_code=404, detail="Manual not found.")
        try:
            text = await asyncio.to_thread(extract_section, path, start, end)
        except RangeError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ParseError as exc:
            logger.error("Failed to read manual %s: %s", filename, exc)
            raise HTTPException(status_code=422, detail="Manual could not be read.") from exc
        return {"text": text}

    return app


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "doormate.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
