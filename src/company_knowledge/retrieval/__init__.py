"""
Retrieval — vector index access, context assembly and grounded answers.

This module wraps the vector store behind a clean interface so that the
orchestration never needs to know which DB is backing retrieval.

Public surface
--------------
- :class:`QueryService` — question → grounded answer with sources.
- :class:`VectorStoreBase` — abstract backend.
- :class:`QdrantVectorStore` — default Qdrant backend (REST).
- :class:`ChromaVectorStore` — Chroma backend.
- :class:`CollectionConfig`, :class:`IndexPoint`, :class:`SearchHit`,
  :class:`ChatAnswer` — data models.
- :func:`get_vector_store` — build the configured backend.
"""

from company_knowledge.retrieval.base import VectorStoreBase
from company_knowledge.retrieval.models import ChatAnswer, CollectionConfig, IndexPoint, PointPayload, SearchHit
from company_knowledge.retrieval.retriever import QueryService, build_context, collect_sources, get_vector_store

__all__ = [
    "ChatAnswer",
    "ChromaVectorStore",
    "CollectionConfig",
    "IndexPoint",
    "PointPayload",
    "QdrantVectorStore",
    "QueryService",
    "SearchHit",
    "VectorStoreBase",
    "build_context",
    "collect_sources",
    "get_vector_store",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import backends so their client libraries load only when used."""
    if name == "ChromaVectorStore":
        from company_knowledge.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    if name == "QdrantVectorStore":
        from company_knowledge.retrieval.qdrant_store import QdrantVectorStore

        return QdrantVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
