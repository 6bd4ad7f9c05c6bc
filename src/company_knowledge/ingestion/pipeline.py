"""Ingestion pipeline: extract → chunk → embed → upsert.

The single batch upsert is issued only after every chunk has been
embedded, so a failed embedding leaves the index untouched.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from company_knowledge.errors import EmptyUploadError
from company_knowledge.ingestion.chunker import DEFAULT_MAX_WORDS, chunk_text
from company_knowledge.ingestion.loader import extract_text
from company_knowledge.ingestion.models import Chunk, IngestionResult
from company_knowledge.retrieval.models import IndexPoint

if TYPE_CHECKING:
    from company_knowledge.ingestion.embedder import EmbedderBase
    from company_knowledge.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class IngestionPipeline:
    """Turns an uploaded file into indexed chunks.

    Parameters
    ----------
    embedder:
        Embedding gateway called once per chunk.
    store:
        Vector index receiving one batch per ingestion.
    max_words:
        Word budget per chunk.
    max_workers:
        Upper bound on concurrent embedding calls; ``1`` embeds
        sequentially in chunk order.
    """

    def __init__(
        self,
        embedder: EmbedderBase,
        store: VectorStoreBase,
        *,
        max_words: int = DEFAULT_MAX_WORDS,
        max_workers: int = 4,
    ) -> None:
        if max_words <= 0:
            raise ValueError(f"max_words must be positive, got {max_words}")
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self._embedder = embedder
        self._store = store
        self.max_words = max_words
        self.max_workers = max_workers

    def ingest(self, data: bytes, file_name: str, extension: str | None = None) -> IngestionResult:
        """Extract, chunk, embed and index one document.

        Parameters
        ----------
        data:
            Raw file content.
        file_name:
            Stored as every chunk's ``source``.
        extension:
            Declared type; defaults to the suffix of *file_name*.

        Returns
        -------
        IngestionResult
            ``chunks_created == vectors_upserted``.  A document without
            any words yields ``0 / 0`` and never touches the index.
        """
        if not data:
            raise EmptyUploadError("No file uploaded")
        if extension is None:
            extension = Path(file_name).suffix

        text = extract_text(data, extension)
        chunks = chunk_text(text, file_name, self.max_words)
        logger.info("Ingesting %r: %d chunks", file_name, len(chunks))
        if not chunks:
            return IngestionResult(chunks_created=0, vectors_upserted=0, file_name=file_name)

        t0 = time.monotonic()
        vectors = self._embed_all(chunks)
        points = [IndexPoint.from_chunk(chunk, vector) for chunk, vector in zip(chunks, vectors)]
        self._store.upsert(points)

        logger.info(
            "Ingested %r: %d vectors upserted in %.1fs",
            file_name,
            len(points),
            time.monotonic() - t0,
        )
        return IngestionResult(chunks_created=len(chunks), vectors_upserted=len(points), file_name=file_name)

    def _embed_all(self, chunks: list[Chunk]) -> list[list[float]]:
        """Embed every chunk; the result is aligned with *chunks*."""
        if self.max_workers == 1 or len(chunks) == 1:
            return [self._embedder.embed(chunk.text) for chunk in chunks]

        workers = min(self.max_workers, len(chunks))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as pool:
            futures = [pool.submit(self._embedder.embed, chunk.text) for chunk in chunks]
            try:
                return [future.result() for future in futures]
            except Exception:
                for future in futures:
                    future.cancel()
                raise
