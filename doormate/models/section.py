"""Section-level models produced by segmentation and selection."""

from __future__ import annotations

from typing import FrozenSet, List

from pydantic import BaseModel, ConfigDict, Field


class Section(BaseModel):
    """A titled unit of manual text with its bullet points in source order."""

    model_config = ConfigDict(frozen=True)

    title: str
    bullets: List[str] = Field(default_factory=list)

    def flat_text(self) -> str:
        return " ".join([self.title, *self.bullets]).strip()

    def render(self) -> str:
        lines = [self.title]
        lines.extend(f"  - {bullet}" for bullet in self.bullets)
        return "\n".join(lines)


class RelevanceQuery(BaseModel):
    """Lowercase terms derived from a free-text question."""

    model_config = ConfigDict(frozen=True)

    terms: FrozenSet[str] = Field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.terms
