from __future__ import annotations

import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from langchain_text_splitters import RecursiveCharacterTextSplitter

from doc_analyzer.exception.custom_exception import DocumentAnalyzerException
from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.models.documents import DocumentChunk, ExtractedDocument, UploadedFile
from doc_analyzer.utils.document_ops import load_documents
from doc_analyzer.utils.file_io import save_uploaded_files
from doc_analyzer.utils.thread_pool import run_sync


# Function to generate a unique session ID:
def generate_session_id() -> str:
    """Generate a unique session ID with timestamp."""
    now = datetime.now()

    day = now.strftime("%d")  # 18
    month = now.strftime("%b").lower()  # nov
    year = now.strftime("%Y")  # 2025
    time_part = now.strftime("%I:%M_%p")  # 03:13_PM

    # Clean time format (remove leading 0, lowercase am/pm)
    time_part = time_part.lstrip("0").lower()

    unique_id = uuid.uuid4().hex[:4]
    return f"session_{day}_{month}_{year}_{time_part}_{unique_id}"


class DataIngestor:
    """
    Turn uploaded files into retrieval-sized chunks.

    - stage uploaded bytes in a per-session temp dir (loaders read from paths)
    - extract text per format, one task per file
    - split each document into overlapping windows with chunk metadata
    """

    def __init__(
        self,
        temp_base: str = "data",
        use_session_dirs: bool = True,
        session_id: Optional[str] = None,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
    ):
        try:
            self.use_session = use_session_dirs
            self.session_id = session_id or generate_session_id()

            self.temp_base = Path(temp_base)
            self.temp_base.mkdir(parents=True, exist_ok=True)
            self.temp_dir = self._resolve_dir(self.temp_base)

            self.text_splitter = RecursiveCharacterTextSplitter(
                chunk_size=chunk_size,
                chunk_overlap=chunk_overlap,
            )

            log.info(
                "DataIngestor initialized | session_id=%s | chunk_size=%d | chunk_overlap=%d",
                self.session_id,
                chunk_size,
                chunk_overlap,
            )

        except Exception as e:
            log.error("Failed to initialize DataIngestor | error=%s", str(e))
            raise DocumentAnalyzerException("Initialization error in DataIngestor", e) from e

    def _resolve_dir(self, base_path: Path) -> Path:
        """Resolve directory path, optionally adding session ID."""
        if self.use_session:
            dir_path = base_path / self.session_id
        else:
            dir_path = base_path
        dir_path.mkdir(parents=True, exist_ok=True)
        return dir_path

    def split_document(self, document: ExtractedDocument) -> List[DocumentChunk]:
        parts = self.text_splitter.split_text(document.text)
        total = len(parts)
        return [
            DocumentChunk(
                content=part,
                file_name=document.file_name,
                file_id=document.file_id,
                chunk_index=index,
                total_chunks=total,
            )
            for index, part in enumerate(parts)
        ]

    def split_documents(self, documents: Sequence[ExtractedDocument]) -> List[DocumentChunk]:
        chunks: List[DocumentChunk] = []
        for document in documents:
            chunks.extend(self.split_document(document))

        log.info(
            "Split complete | documents=%d | chunks=%d | session_id=%s",
            len(documents),
            len(chunks),
            self.session_id,
        )
        return chunks

    async def ingest(
        self, files: Sequence[UploadedFile]
    ) -> Tuple[List[ExtractedDocument], List[DocumentChunk]]:
        log.info("Starting ingestion | count=%d | session_id=%s", len(files), self.session_id)

        # Step 1: stage files in the temp dir
        paths = await run_sync(save_uploaded_files, files, self.temp_dir)

        try:
            # Step 2: extract text, failures become placeholders
            documents = await load_documents(files, paths)
        finally:
            # staged copies are only needed by the loaders
            for path in paths.values():
                path.unlink(missing_ok=True)

        # Step 3: chunking
        chunks = self.split_documents(documents)
        return documents, chunks

    def cleanup(self) -> None:
        """Remove the session temp dir."""
        if self.use_session and self.temp_dir.exists():
            shutil.rmtree(self.temp_dir, ignore_errors=True)
            log.info("Temp dir removed | session_id=%s", self.session_id)
