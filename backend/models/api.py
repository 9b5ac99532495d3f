"""Request and response models for the HTTP API."""
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class AskRequest(BaseModel):
    question: str = Field(default="", description="Free-text question from the end user")


class AskResponse(BaseModel):
    answer: str
    chunks_used: int = 0


class UploadResponse(BaseModel):
    ok: bool = True
    new_chunks: int
    total_chunks: int


class FileInfo(BaseModel):
    name: str
    chunk_count: int
    uploaded_at: datetime


class FilesResponse(BaseModel):
    files: List[FileInfo]
    total_chunks: int


class ClearResponse(BaseModel):
    ok: bool = True
