"""LLM integration helpers."""

from .openai_client import CompletionClient, OpenAIChatClient

__all__ = ["CompletionClient", "OpenAIChatClient"]
