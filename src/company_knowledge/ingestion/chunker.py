"""Word-count text chunking."""

from __future__ import annotations

import re

from company_knowledge.ingestion.models import Chunk

DEFAULT_MAX_WORDS = 350

_WHITESPACE = re.compile(r"[ \t\r\n]+")


def chunk_text(text: str, source: str, max_words: int = DEFAULT_MAX_WORDS) -> list[Chunk]:
    """Split *text* into ordered chunks of at most *max_words* words.

    Words are runs of characters between spaces, tabs, carriage returns and
    newlines.  Each chunk re-joins its words with single spaces, so the
    original layout is not preserved.  Every chunk but the last holds
    exactly *max_words* words.

    Parameters
    ----------
    text:
        Plain text produced by the extractor.
    source:
        Document identifier (usually the file name) stamped on every chunk.
    max_words:
        Word budget per chunk.  Must be positive.

    Returns
    -------
    list[Chunk]
        ``ceil(words / max_words)`` chunks in document order; empty for
        blank text.
    """
    if max_words <= 0:
        raise ValueError(f"max_words must be positive, got {max_words}")

    words = [w for w in _WHITESPACE.split(text) if w]
    return [
        Chunk(text=" ".join(words[start : start + max_words]), source=source)
        for start in range(0, len(words), max_words)
    ]
