"""Request and message models for the assistant chat endpoint."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ProductType(str, Enum):
    DOOR = "door"
    GATE = "gate"
    MOTOR = "motor"
    CONTROL_SYSTEM = "controlSystem"


ASSISTANT_SENDERS = {"assistant", "bot"}


class ContextMessage(BaseModel):
    """One role-tagged message handed to the completion service."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str

    def to_openai(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ConversationTurn(BaseModel):
    """A prior message supplied by the caller."""

    sender: str = "user"
    text: str

    @property
    def role(self) -> Role:
        if self.sender.strip().lower() in ASSISTANT_SENDERS:
            return Role.ASSISTANT
        return Role.USER


class DocumentRef(BaseModel):
    """A manual attached to the chat request."""

    url: str = Field(..., min_length=1)
    title: str = ""

    @property
    def display_title(self) -> str:
        return self.title.strip() or self.url.rsplit("/", 1)[-1]


def _decode_documents(value: Any) -> List[Any]:
    if value is None or value == "":
        return []
    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError:
            logger.warning("Ignoring malformed documents payload")
            return []
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        logger.warning("Ignoring documents payload of type %s", type(value).__name__)
        return []
    return value


class ChatRequest(BaseModel):
    """Inbound chat payload.

    ``documents`` may arrive JSON-encoded or as a list. Entries of
    ``documents`` and ``previousMessages`` that do not validate are skipped.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., min_length=1)
    product_id: Optional[str] = Field(default=None, alias="productId")
    product_type: Optional[ProductType] = Field(default=None, alias="productType")
    documents: List[DocumentRef] = Field(default_factory=list)
    highlighted_text: Optional[str] = Field(default=None, alias="highlightedText")
    previous_messages: List[ConversationTurn] = Field(
        default_factory=list, alias="previousMessages"
    )

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Message is required")
        return value

    @field_validator("product_type", mode="before")
    @classmethod
    def _known_product_type(cls, value: Any) -> Optional[str]:
        if value in (None, ""):
            return None
        if not isinstance(value, str) or value not in {member.value for member in ProductType}:
            logger.warning("Ignoring unknown product type %r", value)
            return None
        return value

    @field_validator("documents", mode="before")
    @classmethod
    def _parse_documents(cls, value: Any) -> List[DocumentRef]:
        refs: List[DocumentRef] = []
        for entry in _decode_documents(value):
            try:
                refs.append(DocumentRef.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed document entry: %r", entry)
        return refs

    @field_validator("previous_messages", mode="before")
    @classmethod
    def _parse_previous_messages(cls, value: Any) -> List[ConversationTurn]:
        if not isinstance(value, list):
            return []
        turns: List[ConversationTurn] = []
        for entry in value:
            if isinstance(entry, dict) and not isinstance(entry.get("sender", "user"), str):
                entry = {**entry, "sender": "user"}
            try:
                turns.append(ConversationTurn.model_validate(entry))
            except ValidationError:
                logger.warning("Skipping malformed conversation turn: %r", entry)
        return turns

    @property
    def has_product_reference(self) -> bool:
        return bool(self.product_id) and self.product_type is not None


class ErrorResponse(BaseModel):
    """Generic failure body returned to callers."""

    error: str
    status_code: int
