"""FastAPI application exposing ingestion and grounded chat as a REST API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from company_knowledge import __version__
from company_knowledge.config import Settings, get_settings
from company_knowledge.errors import (
    DocumentParseError,
    EmbeddingProviderError,
    EmptyUploadError,
    GenerationProviderError,
    IndexUnavailableError,
    InvalidQuestionError,
    KnowledgeBaseError,
    UnsupportedFormatError,
    VectorDimensionError,
)
from company_knowledge.generation.llm import get_generator
from company_knowledge.ingestion.embedder import get_embedder
from company_knowledge.ingestion.models import IngestionResult
from company_knowledge.ingestion.pipeline import IngestionPipeline
from company_knowledge.retrieval.base import VectorStoreBase
from company_knowledge.retrieval.models import ChatAnswer
from company_knowledge.retrieval.retriever import QueryService, get_vector_store

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[KnowledgeBaseError], int] = {
    UnsupportedFormatError: 400,
    DocumentParseError: 400,
    EmptyUploadError: 400,
    InvalidQuestionError: 400,
    EmbeddingProviderError: 502,
    GenerationProviderError: 502,
    IndexUnavailableError: 503,
    VectorDimensionError: 500,
}


# ── Request schemas ───────────────────────────────────────────────────
class ChatRequest(BaseModel):
    """Incoming question from the user."""

    question: str | None = None


# ── Dependencies ──────────────────────────────────────────────────────
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_ingestion_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.ingestion


def get_query_service(request: Request) -> QueryService:
    return request.app.state.query


def get_store(request: Request) -> VectorStoreBase:
    return request.app.state.store


# ── Lifecycle ─────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Wire one client per external service and make sure the collection exists."""
    settings: Settings = app.state.settings
    embedder = get_embedder(settings)
    store = get_vector_store(settings)
    generator = get_generator(settings)

    try:
        await run_in_threadpool(store.ensure_collection)

        app.state.store = store
        app.state.ingestion = IngestionPipeline(
            embedder,
            store,
            max_words=settings.chunk_max_words,
            max_workers=settings.embedding_concurrency,
        )
        app.state.query = QueryService(embedder, store, generator, top_k=settings.search_top_k)
        logger.info("Ready: backend=%s collection=%r", settings.vector_store_backend, store.collection_name)
        yield
    finally:
        store.close()


async def _knowledge_base_error_handler(request: Request, exc: KnowledgeBaseError) -> JSONResponse:
    status = next((code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)), 500)
    if status >= 500:
        logger.error("Request to %s failed: %s", request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API.  Services are created at startup, not at import."""
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="Company Knowledge API",
        version=__version__,
        description="Ingest documents and ask questions answered only from their content.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(KnowledgeBaseError, _knowledge_base_error_handler)

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/ready")
    async def ready(store: VectorStoreBase = Depends(get_store)) -> dict[str, str]:
        """Readiness probe — the vector index must be reachable."""
        if not await run_in_threadpool(store.health_check):
            raise HTTPException(status_code=503, detail="Vector index unavailable")
        return {"status": "ready"}

    @app.post("/api/ingest", response_model=IngestionResult)
    async def ingest(
        file: UploadFile | None = File(default=None),
        pipeline: IngestionPipeline = Depends(get_ingestion_pipeline),
        app_settings: Settings = Depends(get_app_settings),
    ) -> IngestionResult:
        """Index an uploaded PDF or text file."""
        if file is None or not file.filename:
            raise EmptyUploadError("No file uploaded")
        data = await file.read(app_settings.max_upload_bytes + 1)
        if len(data) > app_settings.max_upload_bytes:
            raise HTTPException(status_code=413, detail="Upload exceeds the size limit")
        return await run_in_threadpool(pipeline.ingest, data, file.filename)

    @app.post("/api/chat", response_model=ChatAnswer)
    async def chat(
        request: ChatRequest,
        service: QueryService = Depends(get_query_service),
    ) -> ChatAnswer:
        """Answer a question from the ingested documents."""
        return await run_in_threadpool(service.answer, request.question)

    return app


app = create_app()
