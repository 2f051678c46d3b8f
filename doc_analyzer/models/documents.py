import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadedFile(BaseModel):
    """A file accepted for upload, kept with its raw bytes until it is removed."""

    id: str = Field(default_factory=_new_id)
    name: str
    size: int = Field(..., ge=0)
    mime_type: str
    content: bytes = Field(default=b"", repr=False)

    @property
    def extension(self) -> str:
        dot = self.name.rfind(".")
        return self.name[dot:].lower() if dot != -1 else ""


class ExtractedDocument(BaseModel):
    """Full plain text of one uploaded file."""

    model_config = ConfigDict(frozen=True)

    file_id: str
    file_name: str
    text: str


class DocumentChunk(BaseModel):
    """One overlapping window of an ExtractedDocument, as stored in the index."""

    content: str
    file_name: str
    chunk_index: int = Field(..., ge=0)
    total_chunks: int = Field(..., ge=1)
    file_id: str | None = None


class IngestionResult(BaseModel):
    accepted: list[UploadedFile] = Field(default_factory=list)
    rejected: list[dict[str, str]] = Field(default_factory=list)
    chunks: list[DocumentChunk] = Field(default_factory=list)


class ChatMessage(BaseModel):
    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=_utcnow)
