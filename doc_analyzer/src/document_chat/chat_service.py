from typing import Any, Callable, Dict, List, Optional, Sequence

from langchain_core.messages import BaseMessage
from langchain_core.output_parsers import StrOutputParser

from doc_analyzer.exception.custom_exception import (
    ClientNotInitializedError,
    DocumentAnalyzerException,
    NoDocumentsError,
)
from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.models.documents import DocumentChunk, ExtractedDocument, UploadedFile
from doc_analyzer.prompts.prompt_library import CONTEXT_SEPARATOR, NO_CONTEXT_TEXT, PROMPT_REGISTRY
from doc_analyzer.src.document_chat.retrieval import VectorStoreService
from doc_analyzer.src.document_ingestion.data_ingestion import DataIngestor
from doc_analyzer.utils.config_loader import load_config
from doc_analyzer.utils.model_loader import ModelLoader

UNABLE_TO_RESPOND = "I apologize, but I was unable to generate a response."
NO_FILES_MESSAGE = "No files uploaded. Please upload documents first."
CLIENT_NOT_INITIALIZED_MESSAGE = "OpenAI client not initialized"

# (api_key, config) -> object exposing load_embeddings() and load_llm(role)
ModelLoaderFactory = Callable[[str, dict], Any]


def format_context(chunks: Sequence[DocumentChunk]) -> str:
    """Render retrieved chunks for the system prompt, each labelled with its source."""
    if not chunks:
        return NO_CONTEXT_TEXT
    return CONTEXT_SEPARATOR.join(
        f"[Source: {c.file_name} | chunk {c.chunk_index + 1} of {c.total_chunks}]\n{c.content}"
        for c in chunks
    )


class DocumentChatService:
    """
    Retrieval-augmented chat over the files of one workspace.

    upload:  stage -> extract -> chunk -> embed -> store
    message: embed query -> top-k chunks -> compose prompt -> chat model -> text
    """

    def __init__(
        self,
        config: Optional[dict] = None,
        session_id: Optional[str] = None,
        model_loader_factory: ModelLoaderFactory = ModelLoader,
        ingestor: Optional[DataIngestor] = None,
    ):
        self.config = config if config is not None else load_config()
        self.model_loader_factory = model_loader_factory

        splitter_cfg = self.config.get("text_splitter", {})
        upload_cfg = self.config.get("upload", {})
        self.ingestor = ingestor or DataIngestor(
            temp_base=upload_cfg.get("temp_dir", "data"),
            session_id=session_id,
            chunk_size=splitter_cfg.get("chunk_size", 1000),
            chunk_overlap=splitter_cfg.get("chunk_overlap", 200),
        )

        self.top_k = self.config.get("retriever", {}).get("top_k", 4)
        self.system_instructions = self.config.get("chat", {}).get("default_instructions", "")
        self.qa_prompt = PROMPT_REGISTRY["document_qa"]

        self.vector_store = VectorStoreService()
        self.llm = None
        self.documents: Dict[str, ExtractedDocument] = {}

    async def set_api_key(self, api_key: str) -> None:
        """
        (Re)build the hosted models and re-index any documents already extracted.

        The new index is filled before it replaces the current one, so a failing
        re-index leaves the previous models and chunks in place.
        """
        loader = self.model_loader_factory(api_key, self.config)
        embeddings = loader.load_embeddings()
        llm = loader.load_llm("chat")

        vector_store = VectorStoreService()
        vector_store.initialize(embeddings)

        if self.documents:
            chunks = self.ingestor.split_documents(list(self.documents.values()))
            try:
                await vector_store.add_chunks(chunks)
            except Exception as e:
                log.error("Re-index with new key failed | documents=%d | error=%s", len(self.documents), str(e))
                raise DocumentAnalyzerException("Failed to re-index documents with the new API key", e) from e
            log.info("Re-indexed documents with new key | documents=%d", len(self.documents))

        self.vector_store = vector_store
        self.llm = llm

    def clear_api_key(self) -> None:
        """Drop the models. Extracted documents stay and are re-indexed by the next key."""
        self.llm = None
        self.vector_store = VectorStoreService()
        log.info("Models released, waiting for a new API key | documents=%d", len(self.documents))

    def _require_client(self) -> None:
        if self.llm is None or not self.vector_store.is_initialized():
            raise ClientNotInitializedError(CLIENT_NOT_INITIALIZED_MESSAGE)

    async def upload_files(self, files: Sequence[UploadedFile]) -> List[DocumentChunk]:
        self._require_client()

        try:
            documents, chunks = await self.ingestor.ingest(files)
            await self.vector_store.add_chunks(chunks)
        except DocumentAnalyzerException:
            log.error("Error reading files | count=%d", len(files))
            raise
        except Exception as e:
            log.error("Error indexing files | count=%d | error=%s", len(files), str(e))
            raise DocumentAnalyzerException("Failed to index uploaded files", e) from e

        for document in documents:
            self.documents[document.file_id] = document
        return chunks

    def remove_file(self, file_id: str) -> bool:
        if file_id not in self.documents:
            return False
        self.documents.pop(file_id)
        if self.vector_store.is_initialized():
            self.vector_store.remove_file(file_id)
        return True

    def update_system_instructions(self, instructions: str) -> None:
        self.system_instructions = instructions

    async def retrieve(self, query: str, k: Optional[int] = None) -> List[DocumentChunk]:
        self._require_client()
        return await self.vector_store.search_similar(query, k=self.top_k if k is None else k)

    def build_messages(self, message: str, chunks: Sequence[DocumentChunk]) -> List[BaseMessage]:
        return self.qa_prompt.format_messages(
            instructions=self.system_instructions,
            context=format_context(chunks),
            input=message,
        )

    async def send_message(self, message: str) -> str:
        self._require_client()
        if not self.has_files():
            raise NoDocumentsError(NO_FILES_MESSAGE)

        try:
            chunks = await self.retrieve(message)

            qa_chain = self.qa_prompt | self.llm | StrOutputParser()
            answer = await qa_chain.ainvoke(
                {
                    "instructions": self.system_instructions,
                    "context": format_context(chunks),
                    "input": message,
                }
            )
        except Exception as e:
            log.error("Error sending message | error=%s", str(e))
            raise DocumentAnalyzerException("Failed to generate a response", e) from e

        answer = (answer or "").strip()
        if not answer:
            log.warning("Chat model returned an empty completion")
            return UNABLE_TO_RESPOND

        log.info("Answer generated | context_chunks=%d | answer_chars=%d", len(chunks), len(answer))
        return answer

    def is_ready(self) -> bool:
        return self.llm is not None and self.has_files()

    def has_files(self) -> bool:
        return len(self.documents) > 0

    def close(self) -> None:
        self.ingestor.cleanup()
