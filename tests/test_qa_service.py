"""Unit tests for QAService upload and answer flows."""
import logging
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock
from services.chunking_engine import ChunkingEngine
from services.container_reader import ContainerError
from services.document_loader import DocumentLoader, UnsupportedFormatError
from services.knowledge_store import KnowledgeStore, KnowledgeStoreError
from services.llm_client import LLMClient, LLMResponse
from services.pdf_extractor import PdfRawExtractor
from services.qa_service import QAService, EMPTY_KNOWLEDGE_BASE_ANSWER, NO_RELEVANT_CONTENT_ANSWER


class TestQAService:
    """Test suite for QAService."""

    @pytest.fixture
    def store(self):
        store = Mock(spec=KnowledgeStore)
        store.append_chunks.return_value = 10
        return store

    @pytest.fixture
    def llm_client(self):
        client = Mock(spec=LLMClient)
        client.answer.return_value = LLMResponse(
            text="Refunds are accepted within 30 days.",
            tokens_input=120,
            tokens_output=9,
            latency_ms=300,
            model_used="test-model"
        )
        return client

    @pytest.fixture
    def service(self, store, llm_client):
        return QAService(
            store=store,
            llm_client=llm_client,
            loader=DocumentLoader(pdf_extractor=PdfRawExtractor(), pdf_enabled=True),
            chunking_engine=ChunkingEngine(max_length=20)
        )

    def test_ingest_text_file(self, service, store):
        result = service.ingest("faq.txt", b"first line\nsecond line\nthird")

        assert result.new_chunks == 2
        assert result.total_chunks == 10
        store.append_chunks.assert_called_once_with(["first line\n", "second line\nthird\n"])
        store.append_file.assert_called_once_with("faq.txt", 2)

    def test_failed_file_record_is_logged_and_raised(self, service, store, caplog):
        store.append_file.side_effect = KnowledgeStoreError("insert failed")

        with caplog.at_level(logging.ERROR, logger="services.qa_service"):
            with pytest.raises(KnowledgeStoreError):
                service.ingest("faq.txt", b"first line\nsecond line\nthird")

        store.append_chunks.assert_called_once()
        record = caplog.records[-1]
        assert "faq.txt" in record.getMessage()
        assert record.orphaned_chunks == 2

    def test_unsupported_file_writes_nothing(self, service, store):
        with pytest.raises(UnsupportedFormatError):
            service.ingest("slides.pptx", b"...")

        store.append_chunks.assert_not_called()
        store.append_file.assert_not_called()

    def test_invalid_container_writes_nothing(self, service, store):
        with pytest.raises(ContainerError):
            service.ingest("report.xlsx", b"not a zip")

        store.append_chunks.assert_not_called()

    def test_answer_empty_knowledge_base(self, service, store, llm_client):
        store.read_all.return_value = []

        answer = service.answer("anything?")

        assert answer.text == EMPTY_KNOWLEDGE_BASE_ANSWER
        llm_client.answer.assert_not_called()

    def test_answer_without_relevant_chunks(self, service, store, llm_client):
        store.read_all.return_value = ["shipping takes two days\n"]

        answer = service.answer("refund")

        assert answer.text == NO_RELEVANT_CONTENT_ANSWER
        assert answer.chunks_used == 0
        llm_client.answer.assert_not_called()

    def test_answer_passes_ranked_chunks(self, service, store, llm_client):
        store.read_all.return_value = [
            "refund policy\n",
            "shipping\n",
            "refund refund form\n",
        ]

        answer = service.answer("refund")

        assert answer.text == "Refunds are accepted within 30 days."
        assert answer.chunks_used == 2
        llm_client.answer.assert_called_once_with(
            ["refund refund form\n", "refund policy\n"], "refund"
        )
