"""Application configuration using pydantic-settings."""
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "research-paper-assistant"
    log_level: str = "INFO"

    # LLM provider ("anthropic" or "openrouter")
    llm_provider: str = "anthropic"
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 1024

    # API Keys
    anthropic_api_key: str = ""
    openrouter_api_key: str = ""

    # arXiv
    arxiv_pdf_base_url: str = "https://arxiv.org/pdf/"
    request_timeout_seconds: float = 60.0

    # Feature toggles for offline development
    use_mock_arxiv: bool = False
    use_mock_ai: bool = False
    mock_min_delay_ms: int = 500
    mock_max_delay_ms: int = 2000

    # Pipeline
    max_workers: int = 8
    analysis_ttl_days: int = 30

    # Extracted text and summary caches
    cache_ttl_days: int = 30
    cache_max_entries: int = 100

    # Finished-job purge (off by default, jobs live for the process lifetime)
    enable_scheduler: bool = False
    job_ttl_hours: int = 24
    job_purge_interval_minutes: int = 60

    cors_origins: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
