from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from doc_analyzer.exception.custom_exception import ClientNotInitializedError, NoDocumentsError
from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.models.documents import ChatMessage, DocumentChunk, IngestionResult, UploadedFile
from doc_analyzer.src.document_chat.chat_service import (
    CLIENT_NOT_INITIALIZED_MESSAGE,
    NO_FILES_MESSAGE,
    DocumentChatService,
    ModelLoaderFactory,
)
from doc_analyzer.src.document_chat.conversation import Conversation
from doc_analyzer.src.document_ingestion.data_ingestion import generate_session_id
from doc_analyzer.utils.config_loader import load_config
from doc_analyzer.utils.file_io import DEFAULT_MAX_FILE_SIZE_MB, build_uploaded_files
from doc_analyzer.utils.model_loader import ModelLoader


class Workspace:
    """
    Everything one user session works with:
      - the uploaded file list
      - the chat service (index + models)
      - the conversation log
      - the system instructions
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        config: Optional[dict] = None,
        model_loader_factory: ModelLoaderFactory = ModelLoader,
    ):
        self.session_id = session_id or generate_session_id()
        self.config = config if config is not None else load_config()
        self.created_at = datetime.now(timezone.utc)

        upload_cfg = self.config.get("upload", {})
        self.accepted_types = upload_cfg.get("accepted_types") or None
        self.max_file_size_mb = upload_cfg.get("max_file_size_mb", DEFAULT_MAX_FILE_SIZE_MB)

        self.files: Dict[str, UploadedFile] = {}
        self.chat_service = DocumentChatService(
            config=self.config,
            session_id=self.session_id,
            model_loader_factory=model_loader_factory,
        )
        self.conversation = Conversation()

        log.info("Workspace created | session_id=%s", self.session_id)

    @property
    def default_instructions(self) -> str:
        return self.config.get("chat", {}).get("default_instructions", "")

    @property
    def instructions(self) -> str:
        return self.chat_service.system_instructions

    @property
    def has_api_key(self) -> bool:
        return self.chat_service.llm is not None

    async def set_api_key(self, api_key: str) -> None:
        await self.chat_service.set_api_key(api_key)
        log.info("API key applied | session_id=%s", self.session_id)

    def clear_api_key(self) -> None:
        self.chat_service.clear_api_key()
        log.info("API key removed | session_id=%s", self.session_id)

    async def add_files(self, uploads: Iterable) -> IngestionResult:
        accepted, rejected = build_uploaded_files(
            uploads,
            accepted_types=self.accepted_types,
            max_file_size_mb=self.max_file_size_mb,
        )
        if not accepted:
            return IngestionResult(rejected=rejected)

        chunks: List[DocumentChunk] = await self.chat_service.upload_files(accepted)
        for f in accepted:
            self.files[f.id] = f

        log.info(
            "Files processed | session_id=%s | files=%d | chunks=%d",
            self.session_id,
            len(accepted),
            len(chunks),
        )
        return IngestionResult(accepted=accepted, rejected=rejected, chunks=chunks)

    def remove_file(self, file_id: str) -> bool:
        uploaded = self.files.pop(file_id, None)
        if uploaded is None:
            return False
        self.chat_service.remove_file(file_id)
        log.info("File removed | session_id=%s | file=%s", self.session_id, uploaded.name)
        return True

    def list_files(self) -> List[UploadedFile]:
        return list(self.files.values())

    def update_instructions(self, instructions: str) -> str:
        self.chat_service.update_system_instructions(instructions)
        log.info("Instructions updated | session_id=%s | chars=%d", self.session_id, len(instructions))
        return instructions

    def reset_instructions(self) -> str:
        return self.update_instructions(self.default_instructions)

    async def ask(self, message: str) -> ChatMessage:
        if not self.has_api_key:
            raise ClientNotInitializedError(CLIENT_NOT_INITIALIZED_MESSAGE)
        if not self.chat_service.has_files():
            raise NoDocumentsError(NO_FILES_MESSAGE)
        return await self.conversation.ask(message, self.chat_service.send_message)

    def is_ready(self) -> bool:
        return self.chat_service.is_ready()

    def close(self) -> None:
        self.chat_service.close()
        log.info("Workspace closed | session_id=%s", self.session_id)
