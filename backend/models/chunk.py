"""Chunk data models."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Chunk:
    """Represents a stored knowledge-base chunk."""
    index: int  # Position in the knowledge base
    text: str


@dataclass
class ScoredChunk:
    """Chunk with lexical relevance score from retrieval."""
    chunk: Chunk
    relevance_score: float  # >= 0.0, unbounded above
