"""Document data models."""
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class ExtractedDocument:
    """Ordered text units pulled out of one uploaded file."""
    filename: str
    file_type: str  # "docx", "xlsx", "pdf" or "txt"
    units: List[str] = field(default_factory=list)

    @property
    def character_count(self) -> int:
        return sum(len(unit) for unit in self.units)
