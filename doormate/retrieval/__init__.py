"""Retrieval stack utilities."""

from .selector import build_query, render_sections, select_sections

__all__ = ["build_query", "render_sections", "select_sections"]
