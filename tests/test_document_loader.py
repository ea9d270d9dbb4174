"""Unit tests for DocumentLoader."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import MagicMock, patch
from models.errors import InvalidInput
from services.document_loader import DocumentLoader, derive_document_id


def _fake_pdf(page_texts):
    pdf = MagicMock()
    pdf.__len__.return_value = len(page_texts)
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.get_text.return_value = text
        pages.append(page)
    pdf.__getitem__.side_effect = lambda i: pages[i]
    return pdf


class TestDocumentLoader:
    """Test suite for DocumentLoader."""

    @pytest.fixture
    def loader(self):
        return DocumentLoader()

    @pytest.fixture
    def pdf_path(self, tmp_path):
        path = tmp_path / "Annual Report.pdf"
        path.write_bytes(b"%PDF-1.4 placeholder")
        return path

    def test_derive_document_id(self):
        """Test that ids are lower-cased stems with dashes."""
        assert derive_document_id("/data/Annual Report 2024.pdf") == "annual-report-2024"
        assert derive_document_id("notes.PDF") == "notes"

    def test_validate_path_blank(self, loader):
        """Test that blank paths are rejected."""
        with pytest.raises(InvalidInput, match="No file path"):
            loader.validate_path("")

        with pytest.raises(InvalidInput):
            loader.validate_path(None)

    def test_validate_path_missing_file(self, loader, tmp_path):
        """Test that paths to missing files are rejected."""
        with pytest.raises(InvalidInput, match="File not found") as exc_info:
            loader.validate_path(str(tmp_path / "missing.pdf"))

        assert exc_info.value.error.code == "INVALID_INPUT"

    def test_validate_path_strips_quotes(self, loader, pdf_path):
        """Test that quoted paths pasted into the terminal are accepted."""
        assert loader.validate_path(f'  "{pdf_path}" ') == str(pdf_path)

    @patch('services.document_loader.fitz.open')
    def test_load_pdf(self, mock_open, loader, pdf_path):
        """Test page-by-page text extraction."""
        pdf = _fake_pdf(["First page text", "Second page has more text"])
        mock_open.return_value = pdf

        document = loader.load_pdf(str(pdf_path))

        assert document.filename == "Annual Report.pdf"
        assert document.document_id == "annual-report"
        assert document.total_pages == 2
        assert [p.page_number for p in document.pages] == [1, 2]
        assert document.pages[1].word_count == 5
        assert not document.is_empty
        pdf.close.assert_called_once()

    @patch('services.document_loader.fitz.open')
    def test_load_pdf_with_explicit_id(self, mock_open, loader, pdf_path):
        """Test that an explicit document id wins over the file name."""
        mock_open.return_value = _fake_pdf(["Text"])

        document = loader.load_pdf(str(pdf_path), document_id="custom-id")

        assert document.document_id == "custom-id"

    @patch('services.document_loader.fitz.open')
    def test_load_pdf_unreadable(self, mock_open, loader, pdf_path):
        """Test that files PyMuPDF cannot open are rejected."""
        mock_open.side_effect = RuntimeError("cannot open broken document")

        with pytest.raises(InvalidInput, match="Could not read"):
            loader.load_pdf(str(pdf_path))

    @patch('services.document_loader.fitz.open')
    def test_load_pdf_without_text(self, mock_open, loader, pdf_path):
        """Test that image-only PDFs load as empty documents."""
        mock_open.return_value = _fake_pdf(["", "  \n"])

        document = loader.load_pdf(str(pdf_path))

        assert document.is_empty
