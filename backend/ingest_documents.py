"""
Document Ingestion Script for the knowledge base.

This script:
1. Optionally clears the existing knowledge base
2. Finds every supported file in a folder (name order)
3. Extracts text units and chunks them
4. Appends the chunks and file records to Supabase

Usage:
    python ingest_documents.py <folder> [--clear]
"""
import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from services.container_reader import ContainerError, FormatError
from services.document_loader import DocumentLoader, UnsupportedFormatError
from services.knowledge_store import KnowledgeStore
from services.qa_service import QAService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def find_documents(folder: Path, loader: DocumentLoader) -> List[Path]:
    """Supported files directly inside folder, sorted by name."""
    suffixes = tuple(loader.supported_suffixes)
    return sorted(
        p for p in folder.iterdir()
        if p.is_file() and p.name.lower().endswith(suffixes)
    )


def ingest_folder(service: QAService, folder: Path) -> int:
    """
    Ingest every supported file in folder, skipping files that fail.

    Returns:
        Number of files ingested
    """
    files = find_documents(folder, service.loader)
    logger.info(f"Found {len(files)} supported files in {folder}")

    ingested = 0
    for path in files:
        try:
            result = service.ingest(path.name, path.read_bytes())
        except (UnsupportedFormatError, ContainerError, FormatError) as e:
            logger.error(f"Skipping {path.name}: {e}")
            continue
        ingested += 1
        logger.info(f"  ✓ {path.name}: {result.new_chunks} chunks ({len(result.document.units)} units)")

    return ingested


def main(argv: Optional[List[str]] = None) -> None:
    """Main ingestion process."""
    parser = argparse.ArgumentParser(description="Load a folder of documents into the knowledge base")
    parser.add_argument("folder", type=Path, help="Folder containing docx/xlsx/txt/pdf files")
    parser.add_argument("--clear", action="store_true", help="Clear the knowledge base first")
    args = parser.parse_args(argv)

    if not args.folder.is_dir():
        logger.error(f"Documents directory not found: {args.folder}")
        sys.exit(1)

    try:
        store = KnowledgeStore()
        service = QAService(store=store)

        if args.clear:
            logger.info("Clearing existing knowledge base...")
            store.clear()

        ingested = ingest_folder(service, args.folder)
        logger.info("=" * 60)
        logger.info(f"Files ingested: {ingested}")
        logger.info(f"Chunks in knowledge base: {store.count()}")
        logger.info("=" * 60)

    except KeyboardInterrupt:
        logger.warning("\nIngestion interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"\nIngestion failed: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
