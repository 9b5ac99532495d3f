"""Knowledge-base persistence using Supabase tables."""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from supabase import create_client, Client

from config import SUPABASE_URL, SUPABASE_KEY, CHUNKS_TABLE, FILES_TABLE
from models.knowledge import FileRecord

logger = logging.getLogger(__name__)


class KnowledgeStoreError(RuntimeError):
    """Raised when the knowledge base cannot be read or written."""


class KnowledgeStore:
    """Append-only store of chunk texts and uploaded-file metadata."""

    # PostgREST caps a single response; read in pages of this size
    PAGE_SIZE = 1000

    def __init__(
        self,
        supabase_url: Optional[str] = SUPABASE_URL,
        supabase_key: Optional[str] = SUPABASE_KEY,
        chunks_table: str = CHUNKS_TABLE,
        files_table: str = FILES_TABLE
    ):
        """
        Initialize the store with a Supabase client.

        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            chunks_table: Table holding (position, text) rows
            files_table: Table holding (name, chunk_count, uploaded_at) rows

        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY environment variables are required")

        self.chunks_table = chunks_table
        self.files_table = files_table
        self.client: Client = create_client(supabase_url, supabase_key)

        logger.info(f"Initialized KnowledgeStore with tables: {chunks_table}, {files_table}")

    def count(self) -> int:
        """Number of stored chunks."""
        try:
            response = self.client.table(self.chunks_table).select("position", count="exact").execute()
            return response.count if response.count is not None else 0
        except Exception as e:
            error_msg = f"Failed to count chunks in knowledge base: {str(e)}"
            logger.error(error_msg)
            raise KnowledgeStoreError(error_msg) from e

    def read_all(self) -> List[str]:
        """
        Read every chunk text in storage order.

        Raises:
            KnowledgeStoreError: If the database operation fails
        """
        texts: List[str] = []
        start = 0
        try:
            while True:
                response = (
                    self.client.table(self.chunks_table)
                    .select("text")
                    .order("position")
                    .range(start, start + self.PAGE_SIZE - 1)
                    .execute()
                )
                rows = response.data or []
                texts.extend(row["text"] for row in rows)
                if len(rows) < self.PAGE_SIZE:
                    break
                start += self.PAGE_SIZE
        except Exception as e:
            error_msg = f"Failed to read knowledge base: {str(e)}"
            logger.error(error_msg)
            raise KnowledgeStoreError(error_msg) from e

        logger.debug(f"Read {len(texts)} chunks from knowledge base")
        return texts

    def append_chunks(self, chunks: List[str]) -> int:
        """
        Append chunks after the existing ones.

        Args:
            chunks: Chunk texts in document order

        Returns:
            Total number of chunks after the append

        Raises:
            KnowledgeStoreError: If the database operation fails
        """
        start = self.count()
        if not chunks:
            return start

        records = [
            {"position": start + offset, "text": text}
            for offset, text in enumerate(chunks)
        ]
        try:
            self.client.table(self.chunks_table).insert(records).execute()
        except Exception as e:
            error_msg = f"Failed to append chunks to knowledge base: {str(e)}"
            logger.error(error_msg)
            raise KnowledgeStoreError(error_msg) from e

        total = start + len(chunks)
        logger.info(f"Appended {len(chunks)} chunks (total: {total})")
        return total

    def append_file(self, name: str, chunk_count: int, uploaded_at: Optional[datetime] = None) -> FileRecord:
        """Record metadata for an uploaded file."""
        record = FileRecord(
            name=name,
            chunk_count=chunk_count,
            uploaded_at=uploaded_at or datetime.now(timezone.utc)
        )
        try:
            self.client.table(self.files_table).insert({
                "name": record.name,
                "chunk_count": record.chunk_count,
                "uploaded_at": record.uploaded_at.isoformat()
            }).execute()
        except Exception as e:
            error_msg = f"Failed to record file {name}: {str(e)}"
            logger.error(error_msg)
            raise KnowledgeStoreError(error_msg) from e

        logger.info(f"Recorded file {name} with {chunk_count} chunks")
        return record

    def list_files(self) -> List[FileRecord]:
        """Uploaded files in upload order."""
        try:
            response = self.client.table(self.files_table).select("*").order("uploaded_at").execute()
        except Exception as e:
            error_msg = f"Failed to list files: {str(e)}"
            logger.error(error_msg)
            raise KnowledgeStoreError(error_msg) from e

        return [
            FileRecord(
                name=row["name"],
                chunk_count=row["chunk_count"],
                uploaded_at=datetime.fromisoformat(row["uploaded_at"].replace("Z", "+00:00"))
            )
            for row in (response.data or [])
        ]

    def clear(self) -> None:
        """
        Remove all chunks and file records.

        Raises:
            KnowledgeStoreError: If the database operation fails
        """
        try:
            self.client.table(self.chunks_table).delete().gte("position", 0).execute()
            self.client.table(self.files_table).delete().neq("name", "").execute()
            logger.info("Cleared knowledge base")
        except Exception as e:
            error_msg = f"Failed to clear knowledge base: {str(e)}"
            logger.error(error_msg)
            raise KnowledgeStoreError(error_msg) from e
