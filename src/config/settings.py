"""Configuration management for docqa."""

from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets injected through environment variables or secret managers may
    contain BOM characters that cause encoding errors in HTTP headers.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Google AI API (embeddings, generation, OCR)
    google_api_key: str = ""

    # Model settings
    llm_model: str = "gemini-2.0-flash"
    embedding_model: str = "gemini-embedding-001"
    embedding_dimension: int = 3072
    generation_temperature: float = 0.1

    # Storage
    database_path: Path = Path("./data/docqa.db")

    # Qdrant settings (optional vector index)
    qdrant_url: str = ""
    qdrant_api_key: str = ""
    qdrant_collection: str = "document_chunks"

    # API access
    api_key: str = ""

    @field_validator("google_api_key", "qdrant_api_key", "qdrant_url", "api_key", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    # Ingestion settings
    chunk_size: int = 1000
    chunk_overlap: int = 100
    embedding_retries: int = 3
    embedding_retry_delay: float = 1.0
    fetch_timeout: float = 30.0

    # Retrieval settings
    rrf_k: int = 60
    top_per_signal: int = 10
    top_fused: int = 10
    max_query_length: int = 1000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @model_validator(mode="after")
    def check_chunking(self) -> "Settings":
        """Reject chunking parameters that cannot make progress."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and less than chunk_size")
        if self.embedding_retries < 1:
            raise ValueError("embedding_retries must be at least 1")
        return self

    @property
    def use_qdrant(self) -> bool:
        """Whether Qdrant is configured as the vector index."""
        return bool(self.qdrant_url)

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
