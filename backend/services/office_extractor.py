"""Text extraction for Office Open XML containers (DOCX and XLSX).

Both extractors segment the part XML on boundary markers (paragraph, row and
cell end tags) instead of building a tree, so slightly malformed parts still
yield whatever text they carry.
"""
import html
import logging
import re
from typing import Dict, List, Optional

from services.container_reader import ContainerReader, FormatError

logger = logging.getLogger(__name__)

DOCX_BODY_ENTRY = "word/document.xml"
XLSX_SHARED_STRINGS_ENTRY = "xl/sharedStrings.xml"
XLSX_CELL_DELIMITER = " | "

_PARAGRAPH_END = re.compile(r"</w:p>")
# <w:t> and <w:t xml:space="preserve">, but not <w:tab/>, <w:tbl> or <w:tc>
_RUN_TEXT = re.compile(r"<w:t(?:\s[^>]*)?(?<!/)>(.*?)</w:t>", re.DOTALL)

_WORKSHEET_ENTRY = re.compile(r"^xl/worksheets/sheet(\d+)\.xml$")
_SHARED_ITEM = re.compile(r"<si(?:\s[^>]*)?>(.*?)</si>", re.DOTALL)
_PHONETIC_RUN = re.compile(r"<rPh(?:\s[^>]*)?>.*?</rPh>", re.DOTALL)
_STRING_TEXT = re.compile(r"<t(?:\s[^>]*)?(?<!/)>(.*?)</t>", re.DOTALL)
_ROW_END = re.compile(r"</row>")
_CELL_END = re.compile(r"</c>")
_CELL_OPEN = re.compile(r"<c(?:\s[^>]*)?>")
_CELL_VALUE = re.compile(r"<v>(.*?)</v>", re.DOTALL)
_INLINE_STRING = re.compile(r"<is>(.*?)</is>", re.DOTALL)
_SHARED_FLAG = re.compile(r"""\bt\s*=\s*["']s["']""")


class DocxExtractor:
    """Emits one text unit per non-empty paragraph of a DOCX body."""

    def extract(self, data: bytes) -> List[str]:
        """
        Extract paragraph text from DOCX bytes.

        Args:
            data: DOCX container bytes

        Returns:
            Paragraph strings in document order, trimmed, empty ones skipped

        Raises:
            ContainerError: If the bytes are not a ZIP archive
            FormatError: If the main document body is missing
        """
        with ContainerReader(data) as reader:
            xml = reader.entry(DOCX_BODY_ENTRY)

        if xml is None:
            raise FormatError("Invalid docx file: word/document.xml is missing")

        return self.extract_from_xml(xml)

    def extract_from_xml(self, xml: str) -> List[str]:
        units = []
        for paragraph in _PARAGRAPH_END.split(xml):
            # Adjacent runs are joined without a separator ("Hel" + "lo")
            text = "".join(_RUN_TEXT.findall(paragraph))
            text = html.unescape(text).strip()
            if text:
                units.append(text)

        logger.debug(f"Extracted {len(units)} paragraphs from docx body")
        return units


class XlsxExtractor:
    """Emits one text unit per non-empty worksheet row, cells joined with " | "."""

    def extract(self, data: bytes) -> List[str]:
        """
        Extract row text from every worksheet of an XLSX container.

        Args:
            data: XLSX container bytes

        Returns:
            Row strings, sheet by sheet in sheet-number order

        Raises:
            ContainerError: If the bytes are not a ZIP archive
        """
        with ContainerReader(data) as reader:
            shared = self.parse_shared_strings(reader.entry(XLSX_SHARED_STRINGS_ENTRY) or "")

            sheets = []
            for name in reader.names():
                match = _WORKSHEET_ENTRY.match(name)
                if match:
                    sheets.append((int(match.group(1)), name))

            units: List[str] = []
            for _, name in sorted(sheets):
                sheet_xml = reader.entry(name)
                if not sheet_xml:
                    continue
                rows = self.extract_rows(sheet_xml, shared)
                logger.debug(f"Extracted {len(rows)} rows from {name}")
                units.extend(rows)

        logger.debug(f"Extracted {len(units)} rows from {len(sheets)} worksheets")
        return units

    @staticmethod
    def parse_shared_strings(xml: str) -> Dict[int, str]:
        """
        Build the shared-string lookup.

        Rich-text items split their value across several <t> runs; those are
        joined back into one string. Phonetic hints (<rPh>) are not part of
        the value and are dropped.
        """
        table = {}
        for index, item in enumerate(_SHARED_ITEM.findall(xml)):
            item = _PHONETIC_RUN.sub("", item)
            table[index] = html.unescape("".join(_STRING_TEXT.findall(item)))
        return table

    def extract_rows(self, sheet_xml: str, shared: Dict[int, str]) -> List[str]:
        rows = []
        for row in _ROW_END.split(sheet_xml):
            values = []
            for cell in _CELL_END.split(row):
                value = self._cell_value(cell, shared)
                if value:
                    values.append(value)
            if values:
                rows.append(XLSX_CELL_DELIMITER.join(values))
        return rows

    @staticmethod
    def _cell_value(cell: str, shared: Dict[int, str]) -> Optional[str]:
        # A segment may start with self-closed empty cells; the value
        # belongs to the last opening <c> tag.
        openings = _CELL_OPEN.findall(cell)
        if not openings:
            return None
        tag = openings[-1]
        body = cell[cell.rfind(tag) + len(tag):]

        value_match = _CELL_VALUE.search(body)
        if value_match:
            raw = value_match.group(1)
            if _SHARED_FLAG.search(tag):
                try:
                    return shared.get(int(raw.strip()), "")
                except ValueError:
                    return ""
            return html.unescape(raw)

        inline = _INLINE_STRING.search(body)
        if inline:
            return html.unescape("".join(_STRING_TEXT.findall(inline.group(1))))

        return None
