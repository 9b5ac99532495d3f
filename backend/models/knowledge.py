"""Knowledge-base metadata models."""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class FileRecord:
    """Metadata kept for every uploaded file."""
    name: str
    chunk_count: int
    uploaded_at: datetime
