"""PDF text extraction.

Two interchangeable strategies share the ``PdfExtractor`` contract
(``bytes -> ordered text units``, raising only ``ContainerError``):

- ``PdfRawExtractor`` scans the file for content streams, inflates them,
  and tokenizes the text-show operators (Tj, TJ, ' and ").
- ``PyMuPDFExtractor`` delegates to PyMuPDF's page text.
"""
import logging
import re
import zlib
from abc import ABC, abstractmethod
from typing import Iterator, List, Tuple

import fitz  # PyMuPDF

from config import PDF_MAX_STREAM_BYTES
from services.container_reader import ContainerError

logger = logging.getLogger(__name__)

UNPARSEABLE_PDF_MESSAGE = (
    "(The PDF content could not be parsed; it may be a scanned or image-only document.)"
)

_STREAM_KEYWORD = "stream"
_END_STREAM_KEYWORD = "endstream"
MAX_INFLATED_STREAM_BYTES = PDF_MAX_STREAM_BYTES

# Literal string body with backslash escapes, e.g. (a\)b). Unescaped
# parentheses end the body, so each match is bounded by the next "(".
_LITERAL_BODY = r"(?:\\.|[^\\()])*"
_LITERAL = r"\((" + _LITERAL_BODY + r")\)"
_SHOW_OPERATOR = re.compile(
    r"\[((?:\\.|\(" + _LITERAL_BODY + r"\)|[^\\\[\]()])*)\]\s*TJ"   # [(A) -20 (B)] TJ
    r"|" + _LITERAL + r"\s*(Tj|'|\")",                               # (A) Tj  /  (A) '  /  aw ac (A) "
    re.DOTALL,
)
_ARRAY_STRING = re.compile(_LITERAL, re.DOTALL)
_ESCAPE = re.compile(r"\\(?:([0-7]{1,3})|(\r\n|\r|\n)|(.))", re.DOTALL)
_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f"}

_FALLBACK_STRING = re.compile(r"\(([^()]{2,})\)")

# ASCII word characters only: latin-1 decoding turns arbitrary binary bytes
# into accented letters that \w would accept.
_WORDLIKE_RUN = re.compile(r"[A-Za-z0-9_\u4e00-\u9fff]{2,}")
_CONTROL_ONLY = re.compile(r"^[\x00-\x1f]+$")


class PdfExtractor(ABC):
    """Turns PDF bytes into ordered text units."""

    @abstractmethod
    def extract(self, data: bytes) -> List[str]:
        """Raises ContainerError only when the buffer cannot be read at all."""


def unescape_pdf_string(value: str) -> str:
    """Resolve backslash escapes of a PDF literal string."""

    def replace(match: re.Match) -> str:
        octal, line_break, char = match.groups()
        if octal is not None:
            return chr(int(octal, 8) & 0xFF)
        if line_break is not None:
            # Backslash-newline continues the string on the next line
            return ""
        return _SIMPLE_ESCAPES.get(char, char)

    return _ESCAPE.sub(replace, value)


def parse_text_operators(content: str) -> List[str]:
    """
    Tokenize decoded content-stream text for text-show operators.

    Strings are concatenated in the order the operators appear. TJ arrays
    contribute only their strings (kerning numbers are dropped); the ' and "
    operators start a new line after their string.

    Args:
        content: Content stream decoded one byte per character

    Returns:
        Trimmed, non-empty lines
    """
    parts = []
    for match in _SHOW_OPERATOR.finditer(content):
        array_body, literal, operator = match.groups()
        if array_body is not None:
            parts.extend(unescape_pdf_string(s) for s in _ARRAY_STRING.findall(array_body))
        elif operator == "Tj":
            parts.append(unescape_pdf_string(literal))
        else:
            parts.append(unescape_pdf_string(literal) + "\n")

    text = "".join(parts)
    return [line.strip() for line in text.split("\n") if line.strip()]


def extract_plain_strings(raw: str) -> List[str]:
    """Last-resort scan of the whole file for parenthesized, word-like strings."""
    texts = []
    for match in _FALLBACK_STRING.finditer(raw):
        candidate = match.group(1)
        if _CONTROL_ONLY.match(candidate) or not _WORDLIKE_RUN.search(candidate):
            continue
        candidate = candidate.strip()
        if candidate:
            texts.append(candidate)
    return texts


def iter_stream_spans(raw: str) -> Iterator[Tuple[int, int]]:
    """
    Yield (start, end) offsets of each stream body in file order.

    A body starts after ``stream`` and its line break (CRLF or LF) and ends
    at the line break before the next ``endstream``. A stream with no
    ``endstream`` ends the scan.
    """
    position = 0
    while True:
        keyword = raw.find(_STREAM_KEYWORD, position)
        if keyword == -1:
            return
        start = keyword + len(_STREAM_KEYWORD)
        if raw.startswith("\r\n", start):
            start += 2
        elif raw.startswith("\n", start):
            start += 1
        else:
            position = start
            continue

        end = raw.find(_END_STREAM_KEYWORD, start)
        if end == -1:
            return
        position = end + len(_END_STREAM_KEYWORD)

        # The end-of-line marker before endstream is not stream data
        if raw.startswith("\r\n", end - 2) and end - 2 >= start:
            end -= 2
        elif end > start and raw[end - 1] in "\r\n":
            end -= 1
        yield start, end


class PdfRawExtractor(PdfExtractor):
    """Hand-rolled content-stream scanner; tolerates corrupt or partial files."""

    def extract(self, data: bytes) -> List[str]:
        """
        Extract text units from a PDF buffer.

        Never raises on malformed streams: an undecodable stream is read as
        raw bytes, and a document without any text yields a single
        explanatory unit instead of an error.

        Args:
            data: PDF file bytes

        Returns:
            Text lines in stream order, or [UNPARSEABLE_PDF_MESSAGE]

        Raises:
            ContainerError: If data is not a byte buffer
        """
        try:
            buffer = bytes(data)
        except TypeError as e:
            raise ContainerError("Invalid file: PDF bytes could not be read") from e

        # latin-1 maps every byte to exactly one character, so string offsets
        # are byte offsets into the original buffer.
        raw = buffer.decode("latin-1")

        units: List[str] = []
        stream_count = 0
        for start, end in iter_stream_spans(raw):
            stream_count += 1
            span = buffer[start:end]
            content = self._inflate(span)
            units.extend(parse_text_operators(content))

        logger.debug(f"Scanned {stream_count} streams, {len(units)} lines from operators")

        if not units:
            units = extract_plain_strings(raw)
            if units:
                logger.info(f"No operator text in streams, fallback scan found {len(units)} strings")

        if not units:
            logger.warning("No extractable text found in PDF")
            return [UNPARSEABLE_PDF_MESSAGE]

        return units

    @staticmethod
    def _inflate(span: bytes) -> str:
        """
        Deflate-decompress a stream, falling back to the raw bytes.

        Output is capped at MAX_INFLATED_STREAM_BYTES; a truncated deflate
        stream yields whatever inflated before the cut.
        """
        try:
            decompressor = zlib.decompressobj()
            inflated = decompressor.decompress(span, MAX_INFLATED_STREAM_BYTES)
            if not decompressor.eof and len(inflated) >= MAX_INFLATED_STREAM_BYTES:
                logger.warning(
                    f"Inflated stream exceeds {MAX_INFLATED_STREAM_BYTES} bytes, truncating"
                )
        except zlib.error as e:
            logger.debug(f"Stream is not deflate data ({e}), reading raw bytes")
            return span.decode("latin-1")
        return inflated.decode("latin-1")


class PyMuPDFExtractor(PdfExtractor):
    """Delegates text extraction to PyMuPDF."""

    def extract(self, data: bytes) -> List[str]:
        try:
            pdf_document = fitz.open(stream=bytes(data), filetype="pdf")
        except Exception as e:
            logger.warning(f"PyMuPDF could not open PDF: {e}")
            raise ContainerError("Invalid file: PDF could not be opened") from e

        units = []
        try:
            for page in pdf_document:
                text = page.get_text()
                units.extend(line.strip() for line in text.split("\n") if line.strip())
        finally:
            pdf_document.close()

        logger.debug(f"PyMuPDF extracted {len(units)} lines")
        return units or [UNPARSEABLE_PDF_MESSAGE]


def get_pdf_extractor(name: str = "raw") -> PdfExtractor:
    """Select the PDF strategy by name ("raw" or "pymupdf")."""
    if name == "pymupdf":
        return PyMuPDFExtractor()
    if name != "raw":
        logger.warning(f"Unknown PDF extractor '{name}', using raw extractor")
    return PdfRawExtractor()
