"""Retrieval engine: lexical keyword scoring over stored chunks."""
import logging
from typing import List, Optional, Sequence

from config import TOP_K
from models.chunk import Chunk, ScoredChunk

logger = logging.getLogger(__name__)


def keyword_score(text: str, keywords: Sequence[str]) -> float:
    """
    Score lower-cased text against lower-cased keywords.

    Each keyword present adds 1, plus 0.5 for every further occurrence.
    Occurrences are non-overlapping substring matches. Repeated keywords
    count once per repetition.
    """
    score = 0.0
    for keyword in keywords:
        occurrences = text.count(keyword)
        if occurrences:
            score += 1 + 0.5 * (occurrences - 1)
    return score


class RetrievalEngine:
    """Rank stored chunks against a query by keyword overlap."""

    def __init__(self, top_k: int = TOP_K):
        """
        Initialize the retrieval engine.

        Args:
            top_k: Default maximum number of chunks to return
        """
        self.top_k = top_k
        logger.info("Initialized RetrievalEngine")

    def score(self, chunks: Sequence[str], query: str) -> List[ScoredChunk]:
        """
        Score every chunk and keep the ones with a positive score.

        Returns:
            Scored chunks sorted by score descending, then original index
        """
        keywords = query.lower().split()
        if not keywords:
            return []

        scored = []
        for index, text in enumerate(chunks):
            value = keyword_score(text.lower(), keywords)
            if value > 0:
                scored.append(ScoredChunk(chunk=Chunk(index=index, text=text), relevance_score=value))

        scored.sort(key=lambda s: (-s.relevance_score, s.chunk.index))
        return scored

    def rank(self, chunks: Sequence[str], query: str, top_k: Optional[int] = None) -> List[str]:
        """
        Return the best matching chunk texts for a query.

        Chunks that contain none of the keywords are never returned, even if
        fewer than top_k chunks match.

        Args:
            chunks: All stored chunk texts in storage order
            query: Free-text query
            top_k: Maximum number of chunks (default: engine's top_k)

        Returns:
            Chunk texts, best first; empty if nothing matches or query is blank
        """
        if top_k is None:
            top_k = self.top_k

        if not query or not query.strip():
            logger.warning("Empty query string provided, returning empty results")
            return []

        scored = self.score(chunks, query)[:max(top_k, 0)]

        if scored:
            logger.info(
                f"Retrieved {len(scored)} of {len(chunks)} chunks "
                f"(top score: {scored[0].relevance_score:.1f})"
            )
        else:
            logger.info(f"No chunks matched query among {len(chunks)} chunks")

        return [s.chunk.text for s in scored]
