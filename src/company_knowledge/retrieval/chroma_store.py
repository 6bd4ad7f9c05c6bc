"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from typing import Any

import chromadb

from company_knowledge.errors import IndexUnavailableError
from company_knowledge.retrieval.base import VectorStoreBase
from company_knowledge.retrieval.models import CollectionConfig, IndexPoint, SearchHit

logger = logging.getLogger(__name__)

_SPACE_MAP = {
    "Cosine": "cosine",
    "Euclid": "l2",
    "Dot": "ip",
}


def _to_similarity(distance: float, space: str) -> float:
    """Convert a Chroma distance to a higher-is-better score."""
    if space == "l2":
        return 1.0 / (1.0 + distance)
    # cosine and ip distances are both ``1 - similarity``.
    return 1.0 - distance


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    config:
        Collection name, dimension and distance metric.  ``Manhattan`` has
        no Chroma equivalent.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Pre-built Chroma client (defaults to ``chromadb.HttpClient``).
    """

    provider_name = "chroma"

    def __init__(
        self,
        config: CollectionConfig,
        *,
        host: str = "localhost",
        port: int = 8000,
        client: Any = None,
    ) -> None:
        super().__init__(config)
        space = _SPACE_MAP.get(config.distance)
        if space is None:
            raise ValueError(f"Chroma does not support distance {config.distance!r}")
        self._space = space
        self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)
        self._collection: Any = None

    # -- VectorStoreBase overrides --------------------------------------------

    def ensure_collection(self) -> None:
        try:
            self._collection = self._client.get_or_create_collection(
                name=self.config.name,
                metadata={"hnsw:space": self._space},
            )
        except Exception as exc:
            raise IndexUnavailableError(f"Could not open collection: {exc}", provider_name=self.provider_name) from exc

    def _upsert(self, points: list[IndexPoint]) -> None:
        collection = self._get_collection()
        try:
            collection.upsert(
                ids=[p.id for p in points],
                embeddings=[p.vector for p in points],
                documents=[p.payload.text for p in points],
                metadatas=[{"source": p.payload.source} for p in points],
            )
        except Exception as exc:
            raise IndexUnavailableError(f"Upsert failed: {exc}", provider_name=self.provider_name) from exc
        logger.info("Upserted %d points into %r", len(points), self.config.name)

    def _search(self, query_vector: list[float], top_k: int) -> list[SearchHit]:
        collection = self._get_collection()
        try:
            results = collection.query(
                query_embeddings=[query_vector],
                n_results=top_k,
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise IndexUnavailableError(f"Query failed: {exc}", provider_name=self.provider_name) from exc

        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        return [
            SearchHit(
                id=str(doc_id),
                text=content or "",
                score=_to_similarity(dist, self._space),
                source=(meta or {}).get("source"),
            )
            for doc_id, content, meta, dist in zip(ids, docs, metas, distances)
        ]

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _get_collection(self) -> Any:
        if self._collection is None:
            self.ensure_collection()
        return self._collection
