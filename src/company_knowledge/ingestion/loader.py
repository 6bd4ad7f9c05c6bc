"""Document text extraction for uploaded files."""

from __future__ import annotations

import logging

from langchain_community.document_loaders.parsers import PyPDFParser
from langchain_core.documents.base import Blob

from company_knowledge.errors import DocumentParseError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".txt")


def normalise_extension(extension: str) -> str:
    """Return *extension* lower-cased with a leading dot."""
    ext = extension.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


def extract_text(data: bytes, extension: str) -> str:
    """Turn raw file bytes into plain text.

    Parameters
    ----------
    data:
        File content.  Not modified.
    extension:
        Declared file type, e.g. ``".pdf"`` or ``"txt"``.

    Returns
    -------
    str
        For PDFs, the text of every page in page order separated by a
        newline; for text files, the decoded content.

    Raises
    ------
    UnsupportedFormatError
        If *extension* is not one of :data:`SUPPORTED_EXTENSIONS`.
    DocumentParseError
        If a PDF cannot be read.
    """
    ext = normalise_extension(extension)
    if ext == ".pdf":
        return _extract_pdf(data)
    if ext == ".txt":
        return data.decode("utf-8-sig", errors="replace")
    raise UnsupportedFormatError(
        f"Unsupported file type {extension!r}; expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
    )


def _extract_pdf(data: bytes) -> str:
    blob = Blob.from_data(data, mime_type="application/pdf")
    try:
        pages = [page.page_content for page in PyPDFParser().lazy_parse(blob)]
    except Exception as exc:
        raise DocumentParseError(f"Could not read PDF: {exc}", provider_name="pypdf") from exc
    logger.info("Extracted %d pages from PDF (%d bytes)", len(pages), len(data))
    return "\n".join(pages)
