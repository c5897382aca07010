"""Tests for PDF text extractor."""

from unittest.mock import MagicMock, patch

import pytest

from ats_analyzer.analysis.extractor import extract_text, looks_like_pdf
from ats_analyzer.core.errors import TextExtractionError

FAKE_PDF = b"%PDF-1.4 fake"


def _mock_pymupdf(*page_texts: str) -> MagicMock:
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.get_text.return_value = text
        pages.append(page)

    mock_doc = MagicMock()
    mock_doc.__iter__ = MagicMock(return_value=iter(pages))

    mock_pymupdf = MagicMock()
    mock_pymupdf.open.return_value = mock_doc
    return mock_pymupdf


class TestLooksLikePdf:
    def test_pdf_signature(self) -> None:
        assert looks_like_pdf(FAKE_PDF)

    def test_other_bytes(self) -> None:
        assert not looks_like_pdf(b"PK\x03\x04 docx")
        assert not looks_like_pdf(b"")


class TestExtractText:
    def test_empty_input(self) -> None:
        with pytest.raises(TextExtractionError, match="No document content"):
            extract_text(b"")

    def test_missing_pymupdf_import(self) -> None:
        with (
            patch.dict("sys.modules", {"pymupdf": None}),
            pytest.raises(ImportError, match="pymupdf is required"),
        ):
            extract_text(FAKE_PDF)

    def test_successful_extraction(self) -> None:
        mock_pymupdf = _mock_pymupdf("Jane Doe\nSenior Python Engineer\n", "Experience\n")

        with patch.dict("sys.modules", {"pymupdf": mock_pymupdf}):
            result = extract_text(FAKE_PDF)

        assert result == "Jane Doe\nSenior Python Engineer\n\nExperience"
        mock_pymupdf.open.assert_called_once_with(stream=FAKE_PDF, filetype="pdf")
        mock_pymupdf.open.return_value.close.assert_called_once()

    def test_open_failure(self) -> None:
        mock_pymupdf = MagicMock()
        mock_pymupdf.open.side_effect = RuntimeError("cannot open broken document")

        with (
            patch.dict("sys.modules", {"pymupdf": mock_pymupdf}),
            pytest.raises(TextExtractionError, match="Failed to extract text from PDF"),
        ):
            extract_text(FAKE_PDF)

    def test_scanned_pdf_without_text(self) -> None:
        mock_pymupdf = _mock_pymupdf("  \n", "")

        with (
            patch.dict("sys.modules", {"pymupdf": mock_pymupdf}),
            pytest.raises(TextExtractionError, match="No text content found"),
        ):
            extract_text(FAKE_PDF)
