"""Configuration management for the document knowledge-base service."""
import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Admin gate
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN")

# API Keys
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

# Server Configuration
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")  # "json" or "text"

# CORS Configuration
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

# Answer generation
LLM_API_KEY = os.getenv("LLM_API_KEY")  # falls back to GROQ_API_KEY
LLM_BASE_URL = os.getenv("LLM_BASE_URL") or None
LLM_MODEL = os.getenv("LLM_MODEL", "llama-3.1-8b-instant")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.3"))
LLM_MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1024"))

# Chunking Configuration
CHUNK_MAX_LENGTH = int(os.getenv("CHUNK_MAX_LENGTH", "500"))  # characters

# Retrieval Configuration
TOP_K = int(os.getenv("TOP_K", "5"))

# PDF Configuration
PDF_EXTRACTOR = os.getenv("PDF_EXTRACTOR", "raw")  # "raw" or "pymupdf"
PDF_UPLOADS_ENABLED = os.getenv("PDF_UPLOADS_ENABLED", "true").lower() in ("1", "true", "yes")
PDF_MAX_STREAM_BYTES = int(os.getenv("PDF_MAX_STREAM_BYTES", str(16 * 1024 * 1024)))  # inflated size per stream

# Supabase tables
CHUNKS_TABLE = os.getenv("CHUNKS_TABLE", "kb_chunks")
FILES_TABLE = os.getenv("FILES_TABLE", "kb_files")

# Logging Configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
