"""Shared pytest fixtures for all test suites."""

import copy
import io
import zipfile
from pathlib import Path

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models import FakeListChatModel

from doc_analyzer.exception.custom_exception import ClientNotInitializedError
from doc_analyzer.utils.config_loader import load_config
from doc_analyzer.utils.credential_store import CredentialStore


class FakeModelLoader:
    """Offline stand-in for ModelLoader: hashed embeddings and canned chat replies."""

    responses = ["This is a fake answer."]

    def __init__(self, api_key, config=None):
        if not api_key or not api_key.strip():
            raise ClientNotInitializedError("OpenAI client not initialized: missing API key")
        self.api_key = api_key

    def load_embeddings(self):
        return DeterministicFakeEmbedding(size=64)

    def load_llm(self, role="chat"):
        return FakeListChatModel(responses=list(self.responses))


@pytest.fixture
def fake_loader():
    return FakeModelLoader


@pytest.fixture
def test_config(tmp_path: Path) -> dict:
    """The shipped config with temp and credential paths moved under tmp_path."""
    config = copy.deepcopy(load_config())
    config["upload"]["temp_dir"] = str(tmp_path / "data")
    config["credentials"]["path"] = str(tmp_path / "credentials.json")
    return config


@pytest.fixture
def credential_store(tmp_path: Path) -> CredentialStore:
    return CredentialStore(path=str(tmp_path / "credentials.json"))


class NamedBytes(io.BytesIO):
    """In-memory upload object with a file name, like a browser File."""

    def __init__(self, name: str, data: bytes):
        super().__init__(data)
        self.name = name


@pytest.fixture
def make_upload():
    def _make(name: str, data: bytes | str):
        if isinstance(data, str):
            data = data.encode("utf-8")
        return NamedBytes(name, data)

    return _make


def build_pdf(text: str) -> bytes:
    """Single-page PDF with one line of Helvetica text and a valid xref table."""
    stream = f"BT /F1 18 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length " + str(len(stream)).encode() + b" >>\nstream\n" + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(f"{number} 0 obj\n".encode() + body + b"\nendobj\n")

    xref_at = out.tell()
    out.write(f"xref\n0 {len(objects) + 1}\n".encode())
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(f"{offset:010d} 00000 n \n".encode())
    out.write(
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    )
    return out.getvalue()


def build_docx(paragraphs: list[str]) -> bytes:
    """Bare-bones .docx: just enough of the package for a text extractor."""
    body = "".join(f"<w:p><w:r><w:t>{p}</w:t></w:r></w:p>" for p in paragraphs)
    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
        f"<w:body>{body}</w:body></w:document>"
    )
    content_types = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
        '<Default Extension="xml" ContentType="application/xml"/>'
        '<Override PartName="/word/document.xml" '
        'ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>'
        "</Types>"
    )
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("[Content_Types].xml", content_types)
        zf.writestr("word/document.xml", document)
    return buffer.getvalue()


def build_pptx(slides: list[str]) -> bytes:
    from pptx import Presentation
    from pptx.util import Inches

    presentation = Presentation()
    for text in slides:
        slide = presentation.slides.add_slide(presentation.slide_layouts[6])
        box = slide.shapes.add_textbox(Inches(1), Inches(1), Inches(6), Inches(1))
        box.text_frame.text = text
    buffer = io.BytesIO()
    presentation.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def sample_files():
    """Builders for binary fixtures, by extension."""
    return {".pdf": build_pdf, ".docx": build_docx, ".pptx": build_pptx}


@pytest.fixture
def workspace_manager(test_config, credential_store, monkeypatch):
    """Registry wired to fake models, a temp credential file and no env key."""
    from orchestrator.workspace_manager import WorkspaceManager

    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr("doc_analyzer.utils.model_loader.load_dotenv", lambda *a, **kw: False)
    manager = WorkspaceManager(
        config=test_config,
        credential_store=credential_store,
        model_loader_factory=FakeModelLoader,
    )
    yield manager
    for workspace in manager.list():
        workspace.close()
