"""Main entry point for the document knowledge-base API."""
import logging
import secrets
from typing import Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from config import ADMIN_TOKEN, CORS_ORIGINS, LOG_FORMAT, LOG_LEVEL, PORT
from logger import setup_logging
from models.api import AskRequest, AskResponse, ClearResponse, FileInfo, FilesResponse, UploadResponse
from services.container_reader import ContainerError, FormatError
from services.document_loader import UnsupportedFormatError
from services.knowledge_store import KnowledgeStore, KnowledgeStoreError
from services.llm_client import LLMClient, LLMClientError
from services.qa_service import QAService

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Document Knowledge Base",
    description="Upload office documents and answer questions from their content",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
knowledge_store: KnowledgeStore = None
qa_service: QAService = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global knowledge_store, qa_service

    setup_logging(LOG_LEVEL, LOG_FORMAT)
    logger.info("Initializing knowledge-base services...")

    try:
        knowledge_store = KnowledgeStore()
        logger.info("Initialized KnowledgeStore")

        llm_client = LLMClient()
        logger.info("Initialized LLMClient")

        qa_service = QAService(store=knowledge_store, llm_client=llm_client)
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


def require_admin(authorization: Optional[str] = Header(default=None)) -> None:
    """Reject requests without the admin bearer token."""
    token = (authorization or "").removeprefix("Bearer ").strip()
    if not ADMIN_TOKEN or not secrets.compare_digest(token.encode(), ADMIN_TOKEN.encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "document-knowledge-base",
        "version": "1.0.0"
    }


@app.post("/api/upload", response_model=UploadResponse, dependencies=[Depends(require_admin)])
async def upload_endpoint(file: Optional[UploadFile] = File(default=None)) -> UploadResponse:
    """
    Upload a document, extract its text, and append its chunks.

    Raises:
        HTTPException: 400 for missing, unsupported or invalid files
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="Please upload a file")

    data = await file.read()

    try:
        # Extraction is CPU-bound; keep it off the event loop
        result = await run_in_threadpool(qa_service.ingest, file.filename, data)
    except (UnsupportedFormatError, ContainerError, FormatError) as e:
        logger.warning(f"Rejected upload {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except KnowledgeStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error processing upload: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return UploadResponse(new_chunks=result.new_chunks, total_chunks=result.total_chunks)


@app.get("/api/files", response_model=FilesResponse, dependencies=[Depends(require_admin)])
async def files_endpoint() -> FilesResponse:
    """List uploaded files and the total chunk count."""
    try:
        files = knowledge_store.list_files()
        total = knowledge_store.count()
    except KnowledgeStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return FilesResponse(
        files=[
            FileInfo(name=f.name, chunk_count=f.chunk_count, uploaded_at=f.uploaded_at)
            for f in files
        ],
        total_chunks=total
    )


@app.delete("/api/clear", response_model=ClearResponse, dependencies=[Depends(require_admin)])
async def clear_endpoint() -> ClearResponse:
    """Empty the knowledge base."""
    try:
        knowledge_store.clear()
    except KnowledgeStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return ClearResponse()


@app.post("/api/ask", response_model=AskResponse)
async def ask_endpoint(request: AskRequest) -> AskResponse:
    """
    Answer an end-user question from the knowledge base.

    Raises:
        HTTPException: 400 for an empty question, 503 when the LLM or
            store is unavailable
    """
    if not request.question or not request.question.strip():
        raise HTTPException(status_code=400, detail="Please enter a question")

    logger.info(f"Processing question: {request.question[:100]}...")

    try:
        answer = qa_service.answer(request.question)
    except LLMClientError as e:
        logger.error(f"LLM client error: {e.error.message}")
        raise HTTPException(
            status_code=503,
            detail={
                "error": {
                    "code": e.error.code,
                    "message": e.error.message,
                    "details": e.error.details
                }
            }
        )
    except KnowledgeStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error processing question: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Internal server error: {str(e)}")

    return AskResponse(answer=answer.text, chunks_used=answer.chunks_used)


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting knowledge-base API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
