"""Unit tests for the serving layer.

Services are swapped for in-memory fakes through
``app.dependency_overrides``.  The lifespan tests patch the service
factories so no real provider is contacted.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from company_knowledge.config import Settings
from company_knowledge.errors import EmbeddingProviderError, GenerationProviderError, IndexUnavailableError
from company_knowledge.ingestion.pipeline import IngestionPipeline
from company_knowledge.retrieval.retriever import QueryService
from company_knowledge.serving.app import (
    create_app,
    get_app_settings,
    get_ingestion_pipeline,
    get_query_service,
    get_store,
)


@pytest.fixture()
def settings() -> Settings:
    return Settings(max_upload_bytes=10_000)


@pytest.fixture()
def client(settings, fake_embedder, memory_store, fake_generator) -> Iterator[TestClient]:
    app = create_app(settings)
    pipeline = IngestionPipeline(fake_embedder, memory_store, max_words=350)
    service = QueryService(fake_embedder, memory_store, fake_generator)
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_ingestion_pipeline] = lambda: pipeline
    app.dependency_overrides[get_query_service] = lambda: service
    app.dependency_overrides[get_store] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _upload(client: TestClient, name: str, content: bytes):
    return client.post("/api/ingest", files={"file": (name, content, "application/octet-stream")})


# ── Health checks ─────────────────────────────────────────────────────


def test_health_endpoint(client: TestClient) -> None:
    """GET /health should return 200 with status ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ready_endpoint(client: TestClient) -> None:
    assert client.get("/ready").json() == {"status": "ready"}


def test_ready_reports_unreachable_index(client: TestClient) -> None:
    store = MagicMock()
    store.health_check.return_value = False
    client.app.dependency_overrides[get_store] = lambda: store
    assert client.get("/ready").status_code == 503


# ── /api/ingest ───────────────────────────────────────────────────────


class TestIngestEndpoint:
    def test_refunds_example(self, client: TestClient) -> None:
        content = " ".join(f"word{i}" for i in range(700)).encode()
        response = _upload(client, "refunds.txt", content)

        assert response.status_code == 200
        assert response.json() == {"chunksCreated": 2, "vectorsUpserted": 2, "fileName": "refunds.txt"}

    def test_blank_document_succeeds_with_zero_counts(self, client: TestClient) -> None:
        response = _upload(client, "blank.txt", b"   \n  ")
        assert response.status_code == 200
        assert response.json()["chunksCreated"] == 0
        assert response.json()["vectorsUpserted"] == 0

    def test_unsupported_extension_is_400_without_index_calls(self, client: TestClient, memory_store) -> None:
        response = _upload(client, "contract.docx", b"PK\x03\x04")
        assert response.status_code == 400
        assert ".docx" in response.json()["detail"]
        assert memory_store.upsert_calls == []

    def test_empty_file_is_400(self, client: TestClient) -> None:
        assert _upload(client, "empty.txt", b"").status_code == 400

    def test_missing_file_is_400(self, client: TestClient) -> None:
        assert client.post("/api/ingest", data={"note": "no file"}).status_code == 400

    def test_oversized_upload_is_413(self, client: TestClient) -> None:
        assert _upload(client, "big.txt", b"x" * 10_001).status_code == 413

    def test_upload_at_the_limit_is_accepted(self, client: TestClient, memory_store) -> None:
        response = _upload(client, "edge.txt", b"x" * 10_000)
        assert response.status_code == 200
        assert response.json()["chunksCreated"] == 1
        assert len(memory_store.upsert_calls) == 1

    def test_embedding_failure_is_502(self, client: TestClient, fake_embedder, memory_store) -> None:
        fake_embedder.fail_on = "hello"
        response = _upload(client, "doc.txt", b"hello world")
        assert response.status_code == 502
        assert memory_store.upsert_calls == []


# ── /api/chat ─────────────────────────────────────────────────────────


class TestChatEndpoint:
    def test_answer_with_sources(self, client: TestClient) -> None:
        _upload(client, "refunds.txt", b"Refunds are issued within thirty days.")
        _upload(client, "refunds-faq.txt", b"Refunds need a receipt.")
        _upload(client, "refunds.txt", b"Refunds go back to the original card.")

        response = client.post("/api/chat", json={"question": "How are refunds issued?"})
        body = response.json()
        assert response.status_code == 200
        assert body["answer"] == "Grounded answer."
        assert sorted(body["sources"]) == ["refunds-faq.txt", "refunds.txt"]

    @pytest.mark.parametrize("payload", [{"question": ""}, {"question": "   "}, {"question": None}, {}])
    def test_blank_question_is_400_without_provider_calls(
        self, client: TestClient, payload: dict, fake_embedder, memory_store, fake_generator
    ) -> None:
        response = client.post("/api/chat", json=payload)
        assert response.status_code == 400
        assert fake_embedder.calls == []
        assert memory_store.search_calls == 0
        assert fake_generator.calls == []

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (GenerationProviderError("down", provider_name="openai"), 502),
            (IndexUnavailableError("down", provider_name="qdrant", status_code=500), 503),
            (EmbeddingProviderError("down"), 502),
        ],
    )
    def test_downstream_failures_map_to_5xx(self, client: TestClient, error: Exception, status: int) -> None:
        service = MagicMock()
        service.answer.side_effect = error
        client.app.dependency_overrides[get_query_service] = lambda: service

        response = client.post("/api/chat", json={"question": "anything"})
        assert response.status_code == status
        assert "down" in response.json()["detail"]


# ── Lifespan ──────────────────────────────────────────────────────────


@pytest.fixture()
def factories() -> Iterator[dict[str, MagicMock]]:
    """Patch the service factories the lifespan calls."""
    store = MagicMock()
    store.collection_name = "kb"
    with patch("company_knowledge.serving.app.get_embedder") as get_embedder, patch(
        "company_knowledge.serving.app.get_generator"
    ) as get_generator, patch("company_knowledge.serving.app.get_vector_store", return_value=store):
        yield {"store": store, "embedder": get_embedder.return_value, "generator": get_generator.return_value}


class TestLifespan:
    def test_startup_wires_services_and_shutdown_closes_store(self, factories: dict[str, MagicMock]) -> None:
        app = create_app(Settings(_env_file=None))
        with TestClient(app) as started:
            assert started.get("/health").status_code == 200
            assert app.state.store is factories["store"]
            assert isinstance(app.state.ingestion, IngestionPipeline)
            assert isinstance(app.state.query, QueryService)
            factories["store"].ensure_collection.assert_called_once_with()
            factories["store"].close.assert_not_called()
        factories["store"].close.assert_called_once_with()

    def test_store_closed_when_ensure_collection_fails(self, factories: dict[str, MagicMock]) -> None:
        factories["store"].ensure_collection.side_effect = IndexUnavailableError(
            "connection refused", provider_name="qdrant"
        )
        with pytest.raises(IndexUnavailableError, match="connection refused"):
            with TestClient(create_app(Settings(_env_file=None))):
                pass
        factories["store"].close.assert_called_once_with()
