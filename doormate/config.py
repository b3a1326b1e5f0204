"""Application configuration loaded from environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    openai_api_key: Optional[str] = Field(
        default=None, description="Secret key for OpenAI APIs."
    )
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model_chat: str = "gpt-4"
    chat_temperature: float = 0.7
    chat_max_tokens: int = 1000
    upstream_max_retries: int = Field(default=1, ge=0, le=1)
    upstream_timeout_seconds: float = 60.0
    upstream_retry_backoff_seconds: float = Field(default=1.0, ge=0)
    upstream_max_backoff_seconds: float = Field(default=10.0, ge=0)

    manuals_root: str = "public/manuals"
    product_catalog_path: Optional[str] = None

    api_host: str = "0.0.0.0"
    api_port: int = 5000

    log_level: str = "INFO"
    measure_context_tokens: bool = True
    context_warn_tokens: int = 6000
    allow_tiktoken_fallback: bool = True
    emit_stream_error_event: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def manuals_root_path(self) -> Path:
        return Path(self.manuals_root)

    @property
    def product_catalog_path_obj(self) -> Optional[Path]:
        if not self.product_catalog_path:
            return None
        return Path(self.product_catalog_path)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, built on first use."""
    return Settings()
