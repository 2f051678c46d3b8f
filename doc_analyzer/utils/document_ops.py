from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Mapping

from langchain_community.document_loaders import Docx2txtLoader, PyPDFLoader, TextLoader
from pptx import Presentation

from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.models.documents import ExtractedDocument, UploadedFile
from doc_analyzer.utils.thread_pool import run_sync

FAILED_EXTRACTION_TEMPLATE = "[File: {name} - Content could not be extracted]"
EMPTY_EXTRACTION_TEMPLATE = "[File: {name} - No extractable text found]"


def _join_pages(docs) -> str:
    return "\n\n".join(d.page_content for d in docs if d.page_content)


def _load_pdf(path: Path) -> str:
    return _join_pages(PyPDFLoader(str(path)).load())


def _load_docx(path: Path) -> str:
    return _join_pages(Docx2txtLoader(str(path)).load())


def _load_pptx(path: Path) -> str:
    presentation = Presentation(str(path))
    slides: List[str] = []
    for slide in presentation.slides:
        parts = [
            shape.text_frame.text
            for shape in slide.shapes
            if shape.has_text_frame and shape.text_frame.text.strip()
        ]
        if parts:
            slides.append("\n".join(parts))
    return "\n\n".join(slides)


def _load_text(path: Path) -> str:
    return _join_pages(TextLoader(str(path), encoding="utf-8").load())


LOADERS: Dict[str, Callable[[Path], str]] = {
    ".pdf": _load_pdf,
    ".docx": _load_docx,
    ".pptx": _load_pptx,
    ".py": _load_text,
    ".txt": _load_text,
}


async def extract_document(uploaded: UploadedFile, path: Path) -> ExtractedDocument:
    """
    Extract plain text from one staged file.

    Never raises: a loader failure degrades to a placeholder string so that one
    broken file does not abort the whole batch.
    """
    extension = uploaded.extension
    loader = LOADERS.get(extension)

    if loader is None:
        log.warning("No loader for extension | file=%s | extension=%s", uploaded.name, extension)
        text = FAILED_EXTRACTION_TEMPLATE.format(name=uploaded.name)
    else:
        try:
            text = await run_sync(loader, path)
        except Exception as e:
            log.error("Failed processing file | file=%s | error=%s", uploaded.name, str(e))
            text = FAILED_EXTRACTION_TEMPLATE.format(name=uploaded.name)

    if not text or not text.strip():
        log.warning("Extraction produced no text | file=%s", uploaded.name)
        text = EMPTY_EXTRACTION_TEMPLATE.format(name=uploaded.name)

    return ExtractedDocument(file_id=uploaded.id, file_name=uploaded.name, text=text)


async def load_documents(
    files: Iterable[UploadedFile], paths: Mapping[str, Path]
) -> List[ExtractedDocument]:
    """Extract all files concurrently (one task per file) and keep the upload order."""
    tasks = [extract_document(f, paths[f.id]) for f in files]
    documents = list(await asyncio.gather(*tasks))
    log.info(
        "Documents extracted | count=%d | chars=%d",
        len(documents),
        sum(len(d.text) for d in documents),
    )
    return documents
