"""Document loading service: picks an extractor by filename suffix."""
import logging
import os
from typing import List, Optional

from config import PDF_EXTRACTOR, PDF_UPLOADS_ENABLED
from models.document import ExtractedDocument
from services.office_extractor import DocxExtractor, XlsxExtractor
from services.pdf_extractor import PdfExtractor, get_pdf_extractor

logger = logging.getLogger(__name__)


class UnsupportedFormatError(Exception):
    """Raised when an upload's suffix has no extractor."""

    def __init__(self, filename: str, supported: List[str]):
        self.filename = filename
        self.supported = supported
        super().__init__(
            f"Unsupported file type: {filename}. Supported types: {', '.join(supported)}"
        )


def split_plain_text(data: bytes) -> List[str]:
    """Decode a text file as UTF-8 and keep its non-empty lines."""
    text = data.decode("utf-8-sig", errors="replace")
    return [line for line in text.split("\n") if line]


class DocumentLoader:
    """Loads uploaded files and extracts their text units."""

    def __init__(
        self,
        pdf_extractor: Optional[PdfExtractor] = None,
        pdf_enabled: bool = PDF_UPLOADS_ENABLED
    ):
        """
        Initialize DocumentLoader.

        Args:
            pdf_extractor: PDF strategy (defaults to the one named by PDF_EXTRACTOR)
            pdf_enabled: Whether .pdf uploads are accepted
        """
        self.docx_extractor = DocxExtractor()
        self.xlsx_extractor = XlsxExtractor()
        self.pdf_extractor = pdf_extractor or get_pdf_extractor(PDF_EXTRACTOR)
        self.pdf_enabled = pdf_enabled

    @property
    def supported_suffixes(self) -> List[str]:
        suffixes = [".docx", ".xlsx", ".xls", ".txt"]
        if self.pdf_enabled:
            suffixes.append(".pdf")
        return suffixes

    def detect_type(self, filename: str) -> str:
        """
        Map a filename to its document type, case-insensitively.

        Raises:
            UnsupportedFormatError: If the suffix is not handled
        """
        name = (filename or "").lower()
        if name.endswith(".docx"):
            return "docx"
        if name.endswith(".xlsx") or name.endswith(".xls"):
            return "xlsx"
        if name.endswith(".txt"):
            return "txt"
        if name.endswith(".pdf") and self.pdf_enabled:
            return "pdf"
        raise UnsupportedFormatError(filename, self.supported_suffixes)

    def load_bytes(self, filename: str, data: bytes) -> ExtractedDocument:
        """
        Extract text units from an uploaded file.

        Args:
            filename: Original filename, used only for type dispatch
            data: Raw file bytes

        Returns:
            ExtractedDocument with units in document order

        Raises:
            UnsupportedFormatError: Before any parsing, for unknown suffixes
            ContainerError: If a DOCX/XLSX/PDF container cannot be opened
            FormatError: If a required container entry is missing
        """
        file_type = self.detect_type(filename)

        if file_type == "docx":
            units = self.docx_extractor.extract(data)
        elif file_type == "xlsx":
            units = self.xlsx_extractor.extract(data)
        elif file_type == "pdf":
            units = self.pdf_extractor.extract(data)
        else:
            units = split_plain_text(data)

        logger.info(f"Extracted {len(units)} text units from {filename} ({file_type})")
        return ExtractedDocument(filename=filename, file_type=file_type, units=units)

    def load_file(self, filepath: str) -> ExtractedDocument:
        """Read a file from disk and extract it."""
        with open(filepath, "rb") as f:
            data = f.read()
        return self.load_bytes(os.path.basename(filepath), data)
