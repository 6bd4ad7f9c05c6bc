"""Domain models for index records, search hits and answers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic.alias_generators import to_camel

from company_knowledge.ingestion.models import Chunk

# Qdrant's canonical spelling, keyed by lower-case name.
_DISTANCES = {
    "cosine": "Cosine",
    "euclid": "Euclid",
    "dot": "Dot",
    "manhattan": "Manhattan",
}


class CollectionConfig(BaseModel):
    """Name, dimension and distance metric of the vector collection.

    Attributes
    ----------
    name:
        Collection name in the index service.
    vector_size:
        Dimension every stored vector must have.  Has to match the
        embedding model output or every upsert fails.
    distance:
        Similarity metric, normalised to ``Cosine`` / ``Euclid`` / ``Dot`` /
        ``Manhattan``.
    """

    name: str = Field(min_length=1)
    vector_size: PositiveInt
    distance: str = "Cosine"

    @field_validator("distance")
    @classmethod
    def _normalise_distance(cls, value: str) -> str:
        canonical = _DISTANCES.get(value.strip().lower())
        if canonical is None:
            raise ValueError(f"Unsupported distance metric: {value!r}")
        return canonical


class PointPayload(BaseModel):
    """Payload stored next to every vector."""

    text: str = Field(min_length=1)
    source: str


class IndexPoint(BaseModel):
    """One chunk as written to the index: ``(id, vector, payload)``."""

    id: str
    vector: list[float]
    payload: PointPayload

    @classmethod
    def from_chunk(cls, chunk: Chunk, vector: list[float]) -> IndexPoint:
        return cls(id=chunk.id, vector=vector, payload=PointPayload(text=chunk.text, source=chunk.source))


class SearchHit(BaseModel):
    """A single nearest-neighbour result.

    ``score`` is the backend's similarity (higher = more relevant); it is
    not a probability and is not comparable across providers.
    """

    id: str
    text: str
    score: float
    source: str | None = None


class ChatAnswer(BaseModel):
    """Grounded answer plus the documents it was drawn from."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    answer: str
    sources: list[str] = Field(default_factory=list)
