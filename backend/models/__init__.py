"""Data models for the document knowledge-base service."""
from .document import ExtractedDocument
from .chunk import Chunk, ScoredChunk
from .knowledge import FileRecord
from .api import AskRequest, AskResponse, UploadResponse, FileInfo, FilesResponse, ClearResponse

__all__ = [
    "ExtractedDocument",
    "Chunk",
    "ScoredChunk",
    "FileRecord",
    "AskRequest",
    "AskResponse",
    "UploadResponse",
    "FileInfo",
    "FilesResponse",
    "ClearResponse",
]
