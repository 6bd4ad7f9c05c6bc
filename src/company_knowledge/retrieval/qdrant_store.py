"""Qdrant implementation of the vector-store abstraction, over its REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from company_knowledge.errors import IndexUnavailableError
from company_knowledge.retrieval.base import VectorStoreBase
from company_knowledge.retrieval.models import CollectionConfig, IndexPoint, SearchHit

logger = logging.getLogger(__name__)


class QdrantVectorStore(VectorStoreBase):
    """Qdrant-backed vector store.

    Parameters
    ----------
    config:
        Collection name, dimension and distance metric.
    url:
        Qdrant server base URL, e.g. ``http://localhost:6333``.
    api_key:
        Optional API key sent as the ``api-key`` header.
    timeout:
        Per-request deadline in seconds.
    max_retries:
        Connection retries performed by the transport.
    client:
        Pre-built ``httpx.Client`` (tests pass one with a mock transport).
    """

    provider_name = "qdrant"

    def __init__(
        self,
        config: CollectionConfig,
        *,
        url: str = "http://localhost:6333",
        api_key: str = "",
        timeout: float = 60.0,
        max_retries: int = 0,
        client: httpx.Client | None = None,
    ) -> None:
        super().__init__(config)
        self._url = url.rstrip("/")
        if client is None:
            headers = {"api-key": api_key} if api_key else {}
            client = httpx.Client(
                timeout=timeout,
                headers=headers,
                transport=httpx.HTTPTransport(retries=max_retries),
            )
        self._client = client

    @property
    def collection_url(self) -> str:
        return f"{self._url}/collections/{self.config.name}"

    # -- VectorStoreBase overrides --------------------------------------------

    def ensure_collection(self) -> None:
        existing = self._request("GET", self.collection_url, check=False)
        if existing.is_success:
            try:
                self._warn_on_dimension_mismatch(existing.json())
            except ValueError:
                logger.warning("Collection %r info is not JSON; skipping the dimension check", self.config.name)
            return

        body = {"vectors": {"size": self.config.vector_size, "distance": self.config.distance}}
        created = self._request("PUT", self.collection_url, json=body, check=False)
        if created.status_code == 409:
            logger.warning("Collection %r was created concurrently; reusing it", self.config.name)
            return
        self._raise_for_status(created, "create collection")
        logger.info(
            "Created collection %r (size=%d, distance=%s)",
            self.config.name,
            self.config.vector_size,
            self.config.distance,
        )

    def _upsert(self, points: list[IndexPoint]) -> None:
        body = {"points": [p.model_dump() for p in points]}
        # wait=true: return only once the write is visible to searches.
        self._request("PUT", f"{self.collection_url}/points", params={"wait": "true"}, json=body)
        logger.info("Upserted %d points into %r", len(points), self.config.name)

    def _search(self, query_vector: list[float], top_k: int) -> list[SearchHit]:
        body = {"vector": query_vector, "limit": top_k, "with_payload": True}
        response = self._request("POST", f"{self.collection_url}/points/search", json=body)

        hits: list[SearchHit] = []
        for item in self._json(response, "search").get("result") or []:
            payload = item.get("payload") or {}
            hits.append(
                SearchHit(
                    id=str(item["id"]),
                    text=payload.get("text") or "",
                    score=float(item["score"]),
                    source=payload.get("source"),
                )
            )
        return hits

    def health_check(self) -> bool:
        try:
            return self._client.get(self.collection_url).is_success
        except httpx.HTTPError:
            logger.warning("Qdrant health-check failed", exc_info=True)
            return False

    def close(self) -> None:
        self._client.close()

    # -- internals ------------------------------------------------------------

    def _request(self, method: str, url: str, *, check: bool = True, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise IndexUnavailableError(
                f"{method} {url} failed: {exc}", provider_name=self.provider_name
            ) from exc
        if check:
            self._raise_for_status(response, f"{method} {url}")
        return response

    def _raise_for_status(self, response: httpx.Response, action: str) -> None:
        if not response.is_success:
            raise IndexUnavailableError(
                f"{action} returned HTTP {response.status_code}: {response.text[:200]}",
                provider_name=self.provider_name,
                status_code=response.status_code,
            )

    def _json(self, response: httpx.Response, action: str) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise IndexUnavailableError(
                f"{action} returned a non-JSON body: {response.text[:200]}",
                provider_name=self.provider_name,
                status_code=response.status_code,
            ) from exc
        return body if isinstance(body, dict) else {}

    def _warn_on_dimension_mismatch(self, body: Any) -> None:
        # Any level may be null or missing.
        node = body
        for key in ("result", "config", "params", "vectors"):
            node = node.get(key) if isinstance(node, dict) else None
        size = node.get("size") if isinstance(node, dict) else None
        if size is not None and size != self.config.vector_size:
            logger.warning(
                "Collection %r has vector size %s but %d is configured; upserts will fail",
                self.config.name,
                size,
                self.config.vector_size,
            )
