"""PDF text extraction using pymupdf (optional dependency)."""

import logging

from ats_analyzer.core.errors import TextExtractionError

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"


def looks_like_pdf(data: bytes) -> bool:
    """Return True if ``data`` starts with the PDF magic number."""
    return data[:4] == PDF_SIGNATURE


def extract_text(data: bytes) -> str:
    """Extract plain text from an in-memory PDF document.

    Args:
        data: Raw bytes of the uploaded PDF.

    Returns:
        Concatenated, stripped text from all pages.

    Raises:
        TextExtractionError: If the document cannot be opened or has no text.
        ImportError: If pymupdf is not installed.
    """
    if not data:
        msg = "No document content to extract text from"
        raise TextExtractionError(msg)

    try:
        import pymupdf
    except ImportError:
        msg = (
            "pymupdf is required for PDF extraction. "
            "Install with: pip install 'ats-analyzer[pdf]'"
        )
        raise ImportError(msg) from None

    try:
        doc = pymupdf.open(stream=data, filetype="pdf")
    except Exception as e:
        msg = f"Failed to extract text from PDF: {e}"
        raise TextExtractionError(msg) from e

    try:
        text_parts: list[str] = [page.get_text() for page in doc]
    finally:
        doc.close()

    text = "\n".join(text_parts).strip()
    if not text:
        msg = "No text content found in PDF"
        raise TextExtractionError(msg)

    logger.debug("Extracted %d characters from %d page(s)", len(text), len(text_parts))
    return text
