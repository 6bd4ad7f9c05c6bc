"""Grounded question answering over the vector index.

This module is the **primary public interface** for querying.  It composes
the embedding gateway, a :class:`VectorStoreBase` and the generation
gateway; every collaborator is injected so tests can pass in-memory fakes.

Usage::

    from company_knowledge.retrieval.retriever import QueryService

    service = QueryService(embedder, store, generator, top_k=5)
    reply = service.answer("What is the refund window?")
    print(reply.answer, reply.sources)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from company_knowledge.errors import InvalidQuestionError
from company_knowledge.retrieval.models import ChatAnswer, SearchHit

if TYPE_CHECKING:
    from company_knowledge.config import Settings
    from company_knowledge.generation.llm import GeneratorBase
    from company_knowledge.ingestion.embedder import EmbedderBase
    from company_knowledge.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


def build_context(hits: list[SearchHit]) -> str:
    """Render *hits* as one ``- text`` bullet per line, in the given order."""
    return "".join(f"- {hit.text}\n" for hit in hits)


def collect_sources(hits: list[SearchHit]) -> list[str]:
    """Return distinct, non-blank sources in first-occurrence order."""
    sources: list[str] = []
    seen: set[str] = set()
    for hit in hits:
        source = hit.source
        if not source or not source.strip() or source in seen:
            continue
        seen.add(source)
        sources.append(source)
    return sources


class QueryService:
    """Answer questions from retrieved context only.

    Parameters
    ----------
    embedder:
        Embeds the question.
    store:
        Vector index to search.  Only read, never written.
    generator:
        Produces the grounded answer.
    top_k:
        Number of hits retrieved per question.
    """

    def __init__(
        self,
        embedder: EmbedderBase,
        store: VectorStoreBase,
        generator: GeneratorBase,
        *,
        top_k: int = DEFAULT_TOP_K,
    ) -> None:
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")
        self._embedder = embedder
        self._store = store
        self._generator = generator
        self.top_k = top_k

    def answer(self, question: str | None) -> ChatAnswer:
        """Run embed → search → context assembly → generation.

        With zero hits the context is empty and generation still runs; the
        prompt makes the model report that it lacks data.

        Raises
        ------
        InvalidQuestionError
            If *question* is blank.  No provider is called.
        """
        if not question or not question.strip():
            raise InvalidQuestionError("Question required")

        vector = self._embedder.embed(question)
        hits = self._store.search(vector, self.top_k)
        logger.info("Retrieved %d hits for question %.80r", len(hits), question)

        answer = self._generator.generate(build_context(hits), question)
        return ChatAnswer(answer=answer, sources=collect_sources(hits))


# ---------------------------------------------------------------------------
# Convenience factory
# ---------------------------------------------------------------------------


def get_vector_store(settings: Settings) -> VectorStoreBase:
    """Build the vector store selected by ``settings.vector_store_backend``."""
    backend = settings.vector_store_backend.lower()
    config = settings.collection_config()
    if backend == "qdrant":
        from company_knowledge.retrieval.qdrant_store import QdrantVectorStore

        return QdrantVectorStore(
            config,
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key,
            timeout=settings.request_timeout,
            max_retries=settings.index_max_retries,
        )
    if backend == "chroma":
        from company_knowledge.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore(config, host=settings.chroma_host, port=settings.chroma_port)
    raise ValueError(f"Unsupported vector_store_backend: {settings.vector_store_backend!r}")
