"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local vLLM)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Completion model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible completion API. "
            "Leave empty to use OpenAI cloud."
        ),
    )
    llm_temperature: float = 0.0

    # Embedding
    embedding_provider: str = Field(default="openai", description="'openai' or 'huggingface'")
    embedding_model: str = "text-embedding-ada-002"
    embedding_dimension: int = 1536

    # Vector store
    vector_store_backend: str = Field(default="pinecone", description="'pinecone' or 'chroma'")
    pinecone_api_key: str = ""
    pinecone_environment: str = Field(
        default="",
        description="Pod environment (e.g. 'us-west1-gcp'). Empty selects a serverless index.",
    )
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    collection_name: str = "firesafety-index"

    # Ingestion / query tunables
    chunk_size: int = 1000
    upsert_batch_size: int = 100
    top_k: int = 10
    prune_stale_records: bool = Field(
        default=False,
        description="Delete records of a re-ingested document beyond its new chunk count.",
    )
    documents_dir: str = "documents"

    # Collection readiness
    collection_settle_seconds: float = Field(
        default=10.0,
        description="Fixed wait after creation, for backends without a readiness probe.",
    )
    collection_ready_timeout: float = 300.0
    collection_ready_poll_interval: float = 1.0
    collection_ready_max_polls: int = 60

    # Retry policy for remote calls
    retry_max_attempts: int = 4
    retry_initial_wait: float = 1.0
    retry_max_wait: float = 20.0

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
