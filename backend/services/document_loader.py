"""Document loading service for PDF processing."""
import logging
import os
from typing import Optional
import fitz  # PyMuPDF

from models.document import Document, Page
from models.errors import InvalidInput

logger = logging.getLogger(__name__)


def derive_document_id(file_path: str) -> str:
    """
    Build a document id from a file name.

    "Annual Report.pdf" becomes "annual-report".

    Args:
        file_path: Path to the document

    Returns:
        Lower-cased file stem with spaces replaced by dashes
    """
    stem = os.path.splitext(os.path.basename(file_path))[0]
    return stem.lower().replace(" ", "-")


class DocumentLoader:
    """Loads and extracts text from a single PDF file."""

    def validate_path(self, file_path: Optional[str]) -> str:
        """
        Check that a user supplied path points to an existing file.

        Args:
            file_path: Raw path as typed by the user

        Returns:
            The path with surrounding whitespace and quotes removed

        Raises:
            InvalidInput: If the path is blank or no file exists there
        """
        if file_path is None or not file_path.strip():
            raise InvalidInput("No file path given")

        # Paths dragged into a terminal often arrive quoted
        cleaned = file_path.strip().strip('"').strip("'")

        if not os.path.isfile(cleaned):
            raise InvalidInput(f"File not found: {cleaned}", {"file_path": cleaned})

        return cleaned

    def load_pdf(self, file_path: str, document_id: Optional[str] = None) -> Document:
        """
        Load a PDF file and extract text page-by-page.

        Args:
            file_path: Path to PDF file
            document_id: Optional id, derived from the file name if omitted

        Returns:
            Document object with extracted text

        Raises:
            InvalidInput: If the path is invalid or the file is not a readable PDF
        """
        file_path = self.validate_path(file_path)
        filename = os.path.basename(file_path)
        document_id = document_id or derive_document_id(file_path)

        try:
            # Open PDF with PyMuPDF
            pdf_document = fitz.open(file_path)
        except Exception as e:
            logger.error(f"Failed to open PDF {filename}: {str(e)}")
            raise InvalidInput(f"Could not read {filename} as PDF: {str(e)}", {"file_path": file_path})

        try:
            pages = []

            for page_num in range(len(pdf_document)):
                page = pdf_document[page_num]
                text = page.get_text()

                pages.append(Page(
                    page_number=page_num + 1,  # 1-indexed
                    text=text,
                    word_count=len(text.split())
                ))
        finally:
            pdf_document.close()

        logger.info(f"Loaded {filename}: {len(pages)} pages")

        return Document(
            filename=filename,
            pages=pages,
            total_pages=len(pages),
            source_path=file_path,
            document_id=document_id
        )
