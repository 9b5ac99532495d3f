"""Read named entries out of ZIP-based document containers (DOCX/XLSX)."""
import io
import logging
import zipfile
import zlib
from typing import List, Optional

logger = logging.getLogger(__name__)


class ContainerError(Exception):
    """Raised when the uploaded bytes are not a readable archive."""

    def __init__(self, message: str = "Invalid file: the document container could not be opened"):
        super().__init__(message)


class FormatError(Exception):
    """Raised when the archive opens but a required internal entry is missing."""

    def __init__(self, message: str = "Invalid file: required document part is missing"):
        super().__init__(message)


class ContainerReader:
    """Opens a ZIP container and exposes its entries as text, decompressing on demand."""

    def __init__(self, data: bytes):
        """
        Open container bytes as an archive.

        Args:
            data: Raw bytes of the uploaded file

        Raises:
            ContainerError: If the bytes are not a valid ZIP archive
        """
        try:
            self._archive = zipfile.ZipFile(io.BytesIO(data))
        except (zipfile.BadZipFile, TypeError, ValueError) as e:
            logger.warning(f"Could not open container: {e}")
            raise ContainerError() from e

        self._names = [info.filename for info in self._archive.infolist()]
        logger.debug(f"Opened container with {len(self._names)} entries")

    def names(self) -> List[str]:
        """Entry names in the order they appear in the archive."""
        return list(self._names)

    def entry(self, name: str) -> Optional[str]:
        """
        Read one entry as UTF-8 text.

        Args:
            name: Entry path inside the archive, e.g. "word/document.xml"

        Returns:
            Entry content, or None if the entry does not exist

        Raises:
            ContainerError: If the entry exists but cannot be decompressed
        """
        if name not in self._names:
            return None

        try:
            raw = self._archive.read(name)
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
            logger.warning(f"Could not read container entry {name}: {e}")
            raise ContainerError() from e

        return raw.decode("utf-8", errors="replace")

    def close(self) -> None:
        self._archive.close()

    def __enter__(self) -> "ContainerReader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
