"""Shared pytest configuration and fixtures.

The fakes below implement the capability interfaces in memory so every
unit test runs without OpenAI, Qdrant or Chroma.
"""

from __future__ import annotations

import math
import re
import zlib

import pytest

from company_knowledge.errors import EmbeddingProviderError
from company_knowledge.generation.llm import GeneratorBase
from company_knowledge.ingestion.embedder import EmbedderBase
from company_knowledge.retrieval.base import VectorStoreBase
from company_knowledge.retrieval.models import CollectionConfig, IndexPoint, SearchHit

DIMENSION = 16


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class FakeEmbedder(EmbedderBase):
    """Bag-of-words hashing embedder: texts sharing words get similar vectors."""

    def __init__(self, dimension: int = DIMENSION, fail_on: str | None = None) -> None:
        self.dimension = dimension
        self.fail_on = fail_on
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail_on is not None and self.fail_on in text:
            raise EmbeddingProviderError("boom", provider_name="fake")
        vector = [0.0] * self.dimension
        for word in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(word.encode()) % self.dimension] += 1.0
        return vector


class InMemoryVectorStore(VectorStoreBase):
    """Cosine-similarity store keeping points in a dict."""

    provider_name = "memory"

    def __init__(self, dimension: int = DIMENSION) -> None:
        super().__init__(CollectionConfig(name="test-collection", vector_size=dimension))
        self.points: dict[str, IndexPoint] = {}
        self.upsert_calls: list[list[IndexPoint]] = []
        self.search_calls = 0
        self.ensure_calls = 0

    def ensure_collection(self) -> None:
        self.ensure_calls += 1

    def _upsert(self, points: list[IndexPoint]) -> None:
        self.upsert_calls.append(points)
        for point in points:
            self.points[point.id] = point

    def _search(self, query_vector: list[float], top_k: int) -> list[SearchHit]:
        self.search_calls += 1
        scored = [
            SearchHit(
                id=p.id,
                text=p.payload.text,
                score=_cosine(query_vector, p.vector),
                source=p.payload.source,
            )
            for p in self.points.values()
        ]
        return sorted(scored, key=lambda h: h.score, reverse=True)[:top_k]

    def health_check(self) -> bool:
        return True


class FakeGenerator(GeneratorBase):
    """Records every call and returns a canned reply."""

    def __init__(self, reply: str = "Grounded answer.") -> None:
        self.reply = reply
        self.calls: list[tuple[str, str]] = []

    def generate(self, context: str, question: str) -> str:
        self.calls.append((context, question))
        return self.reply


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


@pytest.fixture()
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def fake_generator() -> FakeGenerator:
    return FakeGenerator()
