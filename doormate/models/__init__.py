"""Typed models shared across the application."""

from .chat import (
    ChatRequest,
    ContextMessage,
    ConversationTurn,
    DocumentRef,
    ErrorResponse,
    ProductType,
    Role,
)
from .document import ExtractedText, PageText, SourceDocument
from .product import Brand, ManualInfo, ProductRecord, Specification
from .section import RelevanceQuery, Section

__all__ = [
    "Brand",
    "ChatRequest",
    "ContextMessage",
    "ConversationTurn",
    "DocumentRef",
    "ErrorResponse",
    "ExtractedText",
    "ManualInfo",
    "PageText",
    "ProductRecord",
    "ProductType",
    "RelevanceQuery",
    "Role",
    "Section",
    "SourceDocument",
    "Specification",
]
