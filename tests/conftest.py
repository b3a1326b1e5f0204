"""Shared fixtures: generated PDF manuals and a scripted completion client."""

from pathlib import Path
from typing import Callable, List, Optional, Sequence

import fitz
import pytest

from doormate.models.chat import ContextMessage

MAINTENANCE_TEXT = "1. Maintenance - Check oil - Clean filter 2. Safety - Wear gloves"


def write_pdf(path: Path, pages: Sequence[Sequence[str]]) -> Path:
    """Write a PDF with one text line per entry, one list per page."""
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        for index, line in enumerate(lines):
            page.insert_text((72, 72 + index * 20), line, fontsize=10)
    doc.save(path)
    doc.close()
    return path


@pytest.fixture
def make_pdf(tmp_path) -> Callable[..., Path]:
    def _make(name: str, pages: Sequence[Sequence[str]]) -> Path:
        return write_pdf(tmp_path / name, pages)

    return _make


@pytest.fixture
def maintenance_pdf(make_pdf) -> Path:
    return make_pdf(
        "maintenance.pdf",
        [["1. Maintenance - Check oil - Clean filter", "2. Safety - Wear gloves"]],
    )


class ScriptedCompletionClient:
    """Yields the given fragments, optionally raising at a fixed position."""

    def __init__(
        self,
        fragments: Sequence[str],
        fail_at: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.fragments = list(fragments)
        self.fail_at = fail_at
        self.error = error or RuntimeError("upstream exploded")
        self.calls: List[List[ContextMessage]] = []
        self.pulled: List[str] = []
        self.closed = False

    async def stream(self, messages):
        self.calls.append(list(messages))
        try:
            for index, fragment in enumerate(self.fragments):
                if self.fail_at == index:
                    raise self.error
                self.pulled.append(fragment)
                yield fragment
            if self.fail_at is not None and self.fail_at >= len(self.fragments):
                raise self.error
        finally:
            self.closed = True


@pytest.fixture
def scripted_client() -> Callable[..., ScriptedCompletionClient]:
    return ScriptedCompletionClient
