"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from company_knowledge.retrieval.models import CollectionConfig


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM / embeddings
    openai_api_key: str = Field(default="", description="OpenAI API key")
    openai_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible API. Leave empty to use OpenAI cloud, "
            "e.g. 'http://vllm.internal/v1' for a self-hosted endpoint."
        ),
    )
    openai_model: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    openai_embedding_model: str = "text-embedding-3-large"
    llm_temperature: float = 0.2

    embedding_provider: str = Field(default="openai", description="'openai' or 'huggingface'")
    huggingface_embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # Vector store
    vector_store_backend: str = Field(default="qdrant", description="'qdrant' or 'chroma'")
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str = ""
    qdrant_collection: str = "company_knowledge"
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    vector_size: int = Field(default=3072, description="Must match the embedding model output")
    distance: str = "Cosine"

    # Pipeline
    chunk_max_words: int = 350
    search_top_k: int = 5
    embedding_concurrency: int = 4

    # Network
    request_timeout: float = Field(default=60.0, description="Per-call deadline in seconds")
    provider_max_retries: int = 0
    index_max_retries: int = 0

    # Serving
    max_upload_bytes: int = 200_000_000
    cors_allow_origins: list[str] = ["*"]
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def collection_config(self) -> CollectionConfig:
        """Return the vector collection configuration these settings describe."""
        return CollectionConfig(
            name=self.qdrant_collection,
            vector_size=self.vector_size,
            distance=self.distance,
        )


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, read once."""
    return Settings()
