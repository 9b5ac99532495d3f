"""Upload and question-answering flows over the knowledge base."""
import logging
from dataclasses import dataclass
from typing import Optional

from models.document import ExtractedDocument
from services.chunking_engine import ChunkingEngine
from services.document_loader import DocumentLoader
from services.knowledge_store import KnowledgeStore, KnowledgeStoreError
from services.llm_client import LLMClient
from services.retrieval_engine import RetrievalEngine

logger = logging.getLogger(__name__)

EMPTY_KNOWLEDGE_BASE_ANSWER = "The knowledge base is empty. Please upload documents first."
NO_RELEVANT_CONTENT_ANSWER = (
    "Sorry, nothing relevant was found in the knowledge base. Please try rephrasing your question."
)


@dataclass
class UploadResult:
    document: ExtractedDocument
    new_chunks: int
    total_chunks: int


@dataclass
class Answer:
    text: str
    chunks_used: int


class QAService:
    """Wires extraction, chunking, storage, retrieval and answer generation."""

    def __init__(
        self,
        store: KnowledgeStore,
        llm_client: Optional[LLMClient] = None,
        loader: Optional[DocumentLoader] = None,
        chunking_engine: Optional[ChunkingEngine] = None,
        retrieval_engine: Optional[RetrievalEngine] = None
    ):
        self.store = store
        self.llm_client = llm_client
        self.loader = loader or DocumentLoader()
        self.chunking_engine = chunking_engine or ChunkingEngine()
        self.retrieval_engine = retrieval_engine or RetrievalEngine()

    def ingest(self, filename: str, data: bytes) -> UploadResult:
        """
        Extract, chunk and append one uploaded file.

        Extraction and chunking finish before anything is written, so a
        failing file leaves the knowledge base untouched.

        Raises:
            UnsupportedFormatError, ContainerError, FormatError: From extraction
            KnowledgeStoreError: If persistence fails
        """
        document = self.loader.load_bytes(filename, data)
        chunks = self.chunking_engine.chunk(document.units)

        total = self.store.append_chunks(chunks)
        try:
            self.store.append_file(filename, len(chunks))
        except KnowledgeStoreError as e:
            logger.error(
                f"Stored {len(chunks)} chunks for {filename} but its file record failed: {e}",
                extra={"upload_name": filename, "orphaned_chunks": len(chunks)}
            )
            raise

        logger.info(f"Ingested {filename}: {len(chunks)} new chunks, {total} total")
        return UploadResult(document=document, new_chunks=len(chunks), total_chunks=total)

    def answer(self, question: str) -> Answer:
        """
        Answer a question from the knowledge base.

        Short-circuits without calling the LLM when the knowledge base is
        empty or no chunk matches the question.

        Raises:
            LLMClientError: If answer generation fails
        """
        chunks = self.store.read_all()
        if not chunks:
            return Answer(text=EMPTY_KNOWLEDGE_BASE_ANSWER, chunks_used=0)

        relevant = self.retrieval_engine.rank(chunks, question)
        if not relevant:
            logger.info("No relevant chunks, returning fixed answer")
            return Answer(text=NO_RELEVANT_CONTENT_ANSWER, chunks_used=0)

        if self.llm_client is None:
            raise RuntimeError("No LLM client configured for answer generation")

        response = self.llm_client.answer(relevant, question)
        return Answer(text=response.text, chunks_used=len(relevant))
