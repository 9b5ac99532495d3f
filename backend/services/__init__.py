"""Services for the document knowledge-base."""
from .container_reader import ContainerReader, ContainerError, FormatError
from .office_extractor import DocxExtractor, XlsxExtractor
from .pdf_extractor import PdfExtractor, PdfRawExtractor, PyMuPDFExtractor, get_pdf_extractor
from .document_loader import DocumentLoader, UnsupportedFormatError
from .chunking_engine import ChunkingEngine
from .retrieval_engine import RetrievalEngine
from .knowledge_store import KnowledgeStore, KnowledgeStoreError
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .qa_service import QAService

__all__ = [
    'ContainerReader', 'ContainerError', 'FormatError', 'DocxExtractor', 'XlsxExtractor',
    'PdfExtractor', 'PdfRawExtractor', 'PyMuPDFExtractor', 'get_pdf_extractor',
    'DocumentLoader', 'UnsupportedFormatError', 'ChunkingEngine', 'RetrievalEngine',
    'KnowledgeStore', 'KnowledgeStoreError', 'LLMClient', 'LLMResponse', 'LLMError',
    'LLMClientError', 'QAService'
]
