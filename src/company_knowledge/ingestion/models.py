"""Records produced by the ingestion pipeline."""

from __future__ import annotations

from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Chunk(BaseModel):
    """A bounded, source-tagged segment of a document.

    Immutable once created; maps to exactly one index point.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    text: str = Field(min_length=1)
    source: str


class IngestionResult(BaseModel):
    """Counts reported after a successful ingestion.

    Serialised with camelCase keys (``chunksCreated`` ...) for the HTTP API.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    chunks_created: int
    vectors_upserted: int
    file_name: str
