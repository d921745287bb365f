"""
vecbridge/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; the deployment environment injects these at runtime.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    app_name: str = "vecbridge: Ollama embeddings & Milvus indexer"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    third_party_log_level: str = "WARNING"

    # ── Embedder (Ollama) ──────────────────────────────────────────────────────
    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "mxbai-embed-large"
    ollama_timeout: Optional[float] = None   # seconds; None = no timeout
    ollama_truncate: Optional[bool] = None   # None = let the daemon decide
    ollama_keep_alive: Optional[str] = "5m"

    # ── Vector store (Milvus) ──────────────────────────────────────────────────
    milvus_uri: str = "http://localhost:19530"
    milvus_token: str = ""
    milvus_db_name: str = ""
    milvus_collection: str = ""   # empty = DEFAULT_COLLECTION
    milvus_partition: str = ""
    milvus_dim: int = 1024        # mxbai-embed-large

    # ── Collection readiness ───────────────────────────────────────────────────
    load_poll_interval: float = 1.0              # seconds between progress checks
    load_poll_max_attempts: Optional[int] = None  # None = poll until loaded
    readiness_timeout: Optional[float] = None     # seconds; None = no deadline

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Single shared instance, import this everywhere.
settings = Settings()
