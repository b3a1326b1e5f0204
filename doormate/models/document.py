"""Document-level data models."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class PageText(BaseModel):
    """Plain text of a single manual page."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1)
    raw_text: str


class SourceDocument(BaseModel):
    """A manual read from disk for the duration of one request."""

    model_config = ConfigDict(frozen=True)

    path: str
    pages: List[PageText] = Field(default_factory=list)

    @property
    def num_pages(self) -> int:
        return len(self.pages)


class ExtractedText(BaseModel):
    """Whole-document text with pages joined by paragraph breaks."""

    text: str
    num_pages: int
