"""Abstract base class for vector-store backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase` and
implementing the abstract hooks.  The public methods enforce the contract
every backend shares:

* vectors must match the collection dimension (checked before any I/O);
* ``top_k`` must be positive;
* hits come back in descending score order.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from company_knowledge.errors import VectorDimensionError
from company_knowledge.retrieval.models import CollectionConfig, IndexPoint, SearchHit


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    config:
        Name, dimension and distance metric of the collection.
    """

    provider_name: str = "vector-store"

    def __init__(self, config: CollectionConfig) -> None:
        self.config = config

    @property
    def collection_name(self) -> str:
        return self.config.name

    # -- public API -----------------------------------------------------------

    def upsert(self, points: list[IndexPoint]) -> None:
        """Write *points* in one batch.

        Either every point is stored and visible to the next search, or the
        call raises.  An empty list is a no-op.
        """
        if not points:
            return
        for point in points:
            self._check_dimension(point.vector)
        self._upsert(points)

    def search(self, query_vector: list[float], top_k: int) -> list[SearchHit]:
        """Return up to *top_k* hits ordered by descending similarity."""
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")
        self._check_dimension(query_vector)
        hits = self._search(query_vector, top_k)
        return sorted(hits, key=lambda h: h.score, reverse=True)[:top_k]

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def ensure_collection(self) -> None:
        """Create the collection unless it already exists.  Idempotent."""
        ...

    @abstractmethod
    def _upsert(self, points: list[IndexPoint]) -> None:
        """Write a validated, non-empty batch."""
        ...

    @abstractmethod
    def _search(self, query_vector: list[float], top_k: int) -> list[SearchHit]:
        """Run the nearest-neighbour query against the backend."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- optional overrides ---------------------------------------------------

    def close(self) -> None:
        """Release network resources.  No-op by default."""

    # -- internals ------------------------------------------------------------

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self.config.vector_size:
            raise VectorDimensionError(
                expected=self.config.vector_size,
                actual=len(vector),
                provider_name=self.provider_name,
            )
