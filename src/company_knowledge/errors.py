"""Exception hierarchy for the knowledge base.

All application exceptions inherit from :class:`KnowledgeBaseError`, which
carries an optional ``provider_name`` naming the external service
(``"openai"``, ``"qdrant"``, ``"chroma"`` ...) that caused the failure.

    KnowledgeBaseError
    +-- UnsupportedFormatError   (extractor rejects the file type)
    +-- DocumentParseError       (file type known, content unreadable)
    +-- EmptyUploadError         (zero-byte upload)
    +-- InvalidQuestionError     (blank question)
    +-- EmbeddingProviderError   (embedding call failed)
    +-- GenerationProviderError  (chat completion failed)
    +-- IndexUnavailableError    (vector index unreachable / non-2xx)
    +-- VectorDimensionError     (vector length != collection dimension)

The first four are caller mistakes and map to HTTP 400; the rest are
downstream failures and map to 5xx.
"""

from __future__ import annotations


class KnowledgeBaseError(Exception):
    """Base exception for all knowledge-base errors."""

    def __init__(self, message: str = "An unexpected error occurred", provider_name: str | None = None) -> None:
        self.message = message
        self.provider_name = provider_name
        super().__init__(message)

    def __str__(self) -> str:
        if self.provider_name:
            return f"[{self.provider_name}] {self.message}"
        return self.message


# -- input validation ---------------------------------------------------------


class UnsupportedFormatError(KnowledgeBaseError):
    """Raised when a file extension has no extractor."""


class DocumentParseError(KnowledgeBaseError):
    """Raised when a supported file cannot be parsed (e.g. a corrupt PDF)."""


class EmptyUploadError(KnowledgeBaseError):
    """Raised when an ingestion request carries no file content."""


class InvalidQuestionError(KnowledgeBaseError):
    """Raised when a chat question is empty or whitespace-only."""


# -- downstream failures ------------------------------------------------------


class EmbeddingProviderError(KnowledgeBaseError):
    """Raised when the embedding provider fails or returns a malformed vector."""


class GenerationProviderError(KnowledgeBaseError):
    """Raised when the generation provider fails."""


class IndexUnavailableError(KnowledgeBaseError):
    """Raised on any transport failure or non-2xx answer from the vector index."""

    def __init__(
        self,
        message: str = "Vector index unavailable",
        provider_name: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message=message, provider_name=provider_name)


class VectorDimensionError(KnowledgeBaseError):
    """Raised before writing or searching with a vector of the wrong length."""

    def __init__(self, expected: int, actual: int, provider_name: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            message=f"Vector has {actual} dimensions, collection expects {expected}",
            provider_name=provider_name,
        )
