"""Chunking engine: greedy packing of text units into bounded chunks."""
import logging
from typing import Iterable, List

from config import CHUNK_MAX_LENGTH

logger = logging.getLogger(__name__)


class ChunkingEngine:
    """Packs consecutive text units into chunks of at most max_length characters."""

    def __init__(self, max_length: int = CHUNK_MAX_LENGTH):
        """
        Initialize ChunkingEngine.

        Args:
            max_length: Soft upper bound on chunk length in characters
        """
        if max_length <= 0:
            raise ValueError("max_length must be positive")
        self.max_length = max_length

    def chunk(self, units: Iterable[str]) -> List[str]:
        """
        Pack text units greedily, each followed by a line break.

        A unit is never split. When adding the next unit (with its line
        break) would push a non-empty chunk past max_length, the chunk is
        closed first. A unit longer than max_length therefore becomes a chunk
        of its own.

        Args:
            units: Text units in document order

        Returns:
            Chunks in document order
        """
        chunks = []
        buffer = ""

        for unit in units:
            # Every unit keeps its line break, so a lone unit longer than
            # max_length becomes a chunk of len(unit) + 1.
            piece = unit + "\n"
            if buffer and len(buffer) + len(piece) > self.max_length:
                chunks.append(buffer)
                buffer = ""
            buffer += piece

        if buffer:
            chunks.append(buffer)

        oversized = sum(1 for c in chunks if len(c) > self.max_length)
        if oversized:
            logger.debug(f"{oversized} chunks hold a single unit longer than {self.max_length}")

        logger.info(f"Created {len(chunks)} chunks (max_length={self.max_length})")
        return chunks
