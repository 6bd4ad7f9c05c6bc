"""Embedding gateway — single text in, fixed-length vector out."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from company_knowledge.errors import EmbeddingProviderError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from company_knowledge.config import Settings

logger = logging.getLogger(__name__)


class EmbedderBase(ABC):
    """Provider-agnostic embedding interface."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*.

        Raises
        ------
        EmbeddingProviderError
            On any provider failure, or when the vector does not have the
            configured dimension.
        """
        ...


class LangChainEmbedder(EmbedderBase):
    """Adapter over any LangChain :class:`~langchain_core.embeddings.Embeddings`.

    Parameters
    ----------
    model:
        The LangChain embedding model to delegate to.
    dimension:
        Expected vector length; anything else is rejected.
    provider_name:
        Label used in error messages.
    """

    def __init__(self, model: Embeddings, *, dimension: int, provider_name: str = "openai") -> None:
        self._model = model
        self.dimension = dimension
        self.provider_name = provider_name

    def embed(self, text: str) -> list[float]:
        try:
            vector = self._model.embed_query(text)
        except Exception as exc:
            raise EmbeddingProviderError(f"Embedding request failed: {exc}", provider_name=self.provider_name) from exc

        if len(vector) != self.dimension:
            raise EmbeddingProviderError(
                f"Embedding has {len(vector)} dimensions, expected {self.dimension}",
                provider_name=self.provider_name,
            )
        return [float(v) for v in vector]


def get_embedding_function(settings: Settings) -> Embeddings:
    """Return the LangChain embedding model selected by ``settings.embedding_provider``."""
    provider = settings.embedding_provider.lower()
    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=settings.huggingface_embedding_model)
    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        kwargs: dict = {
            "model": settings.openai_embedding_model,
            "api_key": settings.openai_api_key,
            "timeout": settings.request_timeout,
            "max_retries": settings.provider_max_retries,
            # Send the raw text rather than pre-tokenised input.
            "check_embedding_ctx_length": False,
        }
        if settings.openai_base_url:
            logger.info("Using OpenAI-compatible embedding endpoint: %s", settings.openai_base_url)
            kwargs["base_url"] = settings.openai_base_url
        return OpenAIEmbeddings(**kwargs)
    raise ValueError(f"Unsupported embedding_provider: {settings.embedding_provider!r}")


def get_embedder(settings: Settings) -> LangChainEmbedder:
    """Build the embedding gateway described by *settings*."""
    return LangChainEmbedder(
        get_embedding_function(settings),
        dimension=settings.vector_size,
        provider_name=settings.embedding_provider.lower(),
    )
