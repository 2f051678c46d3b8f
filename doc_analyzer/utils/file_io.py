from __future__ import annotations

import re
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Tuple

from doc_analyzer.exception.custom_exception import DocumentAnalyzerException
from doc_analyzer.logger.custom_logger import CustomLogger
from doc_analyzer.models.documents import UploadedFile

DEFAULT_ACCEPTED_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".py": "text/x-python",
    ".txt": "text/plain",
}
DEFAULT_MAX_FILE_SIZE_MB = 10

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]

# Local logger instance
log = CustomLogger().get_logger(__name__)


def _read_bytes(uf) -> bytes:
    """Pull the raw bytes out of whatever upload object we were handed."""
    # Prefer underlying file buffer when available (e.g., Starlette UploadFile.file)
    if hasattr(uf, "file") and hasattr(uf.file, "read"):
        if hasattr(uf.file, "seek"):
            uf.file.seek(0)
        data = uf.file.read()
    elif hasattr(uf, "read"):
        data = uf.read()
    else:
        # Fallback for objects exposing getbuffer():
        buffer = getattr(uf, "getbuffer", None)
        if not callable(buffer):
            raise ValueError("Unsupported uploaded file object; no readable interface")
        data = buffer()

    if isinstance(data, memoryview):
        data = data.tobytes()
    if isinstance(data, str):
        data = data.encode("utf-8")
    return bytes(data)


def build_uploaded_files(
    uploads: Iterable,
    accepted_types: Mapping[str, str] | None = None,
    max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_MB,
) -> Tuple[List[UploadedFile], List[Dict[str, str]]]:
    """
    Turn raw upload objects into UploadedFile models.

    Files with an unsupported extension or above the size cap are skipped and
    returned in the second list as {"name", "reason"} entries.
    """
    accepted_types = accepted_types or DEFAULT_ACCEPTED_TYPES
    max_bytes = int(max_file_size_mb * 1024 * 1024)

    accepted: List[UploadedFile] = []
    rejected: List[Dict[str, str]] = []

    for uf in uploads:
        # getting the file name
        name = getattr(uf, "filename", None) or getattr(uf, "name", None) or "file"
        name = Path(str(name)).name
        # getting the file extension
        extension = Path(name).suffix.lower()

        if extension not in accepted_types:
            log.warning("Unsupported file type skipped | file=%s | extension=%s", name, extension)
            rejected.append({"name": name, "reason": f"Unsupported file type: {extension or 'none'}"})
            continue

        try:
            data = _read_bytes(uf)
        except Exception as e:
            log.error("Failed to read uploaded file | file=%s | error=%s", name, str(e))
            raise DocumentAnalyzerException(f"Failed to read uploaded file {name}", e) from e

        if len(data) > max_bytes:
            log.warning(
                "File too large skipped | file=%s | size=%s | limit=%s",
                name,
                format_file_size(len(data)),
                format_file_size(max_bytes),
            )
            rejected.append(
                {"name": name, "reason": f"File exceeds {format_file_size(max_bytes)} limit"}
            )
            continue

        accepted.append(
            UploadedFile(
                name=name,
                size=len(data),
                mime_type=accepted_types[extension],
                content=data,
            )
        )

    log.info("Uploads accepted | accepted=%d | rejected=%d", len(accepted), len(rejected))
    return accepted, rejected


def save_uploaded_files(files: Iterable[UploadedFile], target_dir: Path) -> Dict[str, Path]:
    """Stage uploaded bytes on disk so path-based loaders can read them. Returns {file_id: path}."""
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        saved: Dict[str, Path] = {}
        for uf in files:
            extension = Path(uf.name).suffix.lower()

            # Clean file name (only alphanum, dash, underscore)
            safe_name = re.sub(r"[^a-zA-Z0-9_\-]", "_", Path(uf.name).stem).lower()
            file_name = f"{safe_name}_{uuid.uuid4().hex[:5]}{extension}"
            output_path = target_dir / file_name

            with open(output_path, "wb") as f:
                f.write(uf.content)

            saved[uf.id] = output_path
            log.info("File saved for ingestion | uploaded=%s | saved_as=%s", uf.name, str(output_path))
        return saved
    except Exception as e:
        log.error("Failed to save uploaded files | error=%s | dir=%s", str(e), str(target_dir))
        raise DocumentAnalyzerException("Failed to save uploaded files", e) from e


def format_file_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    return f"{round(value, 2):g} {SIZE_UNITS[i]}"
