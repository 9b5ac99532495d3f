"""Integration tests for the HTTP API."""
import os
import sys
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock, patch

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

ADMIN_HEADERS = {"Authorization": "Bearer secret-token"}


@pytest.fixture
def client():
    """Create a test client with mocked services."""
    import main
    from models.document import ExtractedDocument
    from models.knowledge import FileRecord
    from services.qa_service import Answer, UploadResult

    # TestClient without a context manager does not run startup events
    client = TestClient(main.app)

    main.knowledge_store = Mock()
    main.qa_service = Mock()

    main.qa_service.ingest.return_value = UploadResult(
        document=ExtractedDocument(filename="faq.txt", file_type="txt", units=["a", "b"]),
        new_chunks=1,
        total_chunks=6
    )
    main.qa_service.answer.return_value = Answer(text="Open 9 to 5.", chunks_used=2)
    main.knowledge_store.list_files.return_value = [
        FileRecord(name="faq.txt", chunk_count=1, uploaded_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    ]
    main.knowledge_store.count.return_value = 6

    with patch('main.ADMIN_TOKEN', "secret-token"):
        yield client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_upload_requires_token(client):
    response = client.post("/api/upload", files={"file": ("faq.txt", b"a\nb")})
    assert response.status_code == 401

    response = client.post(
        "/api/upload",
        files={"file": ("faq.txt", b"a\nb")},
        headers={"Authorization": "Bearer wrong"}
    )
    assert response.status_code == 401


def test_bearer_prefix_only_stripped_at_start(client):
    response = client.get("/api/files", headers={"Authorization": "secretBearer -token"})
    assert response.status_code == 401

    response = client.get("/api/files", headers={"Authorization": "Bearer secret-token"})
    assert response.status_code == 200


def test_upload_success(client):
    import main

    response = client.post("/api/upload", files={"file": ("faq.txt", b"a\nb")}, headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"ok": True, "new_chunks": 1, "total_chunks": 6}
    main.qa_service.ingest.assert_called_once_with("faq.txt", b"a\nb")


def test_upload_without_file(client):
    response = client.post("/api/upload", headers=ADMIN_HEADERS)
    assert response.status_code == 400


def test_upload_unsupported_type(client):
    import main
    from services.document_loader import UnsupportedFormatError

    main.qa_service.ingest.side_effect = UnsupportedFormatError("slides.pptx", [".docx", ".txt"])

    response = client.post("/api/upload", files={"file": ("slides.pptx", b"x")}, headers=ADMIN_HEADERS)

    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["detail"]


def test_upload_invalid_container(client):
    import main
    from services.container_reader import ContainerError

    main.qa_service.ingest.side_effect = ContainerError()

    response = client.post("/api/upload", files={"file": ("bad.docx", b"x")}, headers=ADMIN_HEADERS)

    assert response.status_code == 400
    assert "Invalid file" in response.json()["detail"]


def test_list_files(client):
    response = client.get("/api/files", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["total_chunks"] == 6
    assert data["files"][0]["name"] == "faq.txt"
    assert data["files"][0]["chunk_count"] == 1


def test_clear(client):
    import main

    response = client.delete("/api/clear", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    main.knowledge_store.clear.assert_called_once()


def test_ask(client):
    import main

    response = client.post("/api/ask", json={"question": "When are you open?"})

    assert response.status_code == 200
    assert response.json() == {"answer": "Open 9 to 5.", "chunks_used": 2}
    main.qa_service.answer.assert_called_once_with("When are you open?")


def test_ask_empty_question(client):
    response = client.post("/api/ask", json={"question": "   "})
    assert response.status_code == 400


def test_ask_llm_failure(client):
    import main
    from services.llm_client import LLMClientError, LLMError

    main.qa_service.answer.side_effect = LLMClientError(
        LLMError(code="RATE_LIMIT_ERROR", message="Rate limit exceeded.", details={"retry_after": 60})
    )

    response = client.post("/api/ask", json={"question": "hours?"})

    assert response.status_code == 503
    assert response.json()["detail"]["error"]["code"] == "RATE_LIMIT_ERROR"
