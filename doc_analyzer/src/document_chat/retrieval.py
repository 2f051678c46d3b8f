import uuid
from typing import Dict, List, Optional, Sequence

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_core.vectorstores import InMemoryVectorStore

from doc_analyzer.exception.custom_exception import VectorStoreNotInitializedError
from doc_analyzer.logger import GLOBAL_LOGGER as log
from doc_analyzer.models.documents import DocumentChunk


class VectorStoreService:
    """
    Thin wrapper over LangChain's InMemoryVectorStore.

    - initialize() binds an embeddings model and starts from an empty index
    - chunks are stored with their file metadata and tracked per file id,
      so removing an uploaded file also drops its chunks
    - search_similar() embeds the query once and returns at most k chunks,
      best match first
    """

    def __init__(self):
        self.vector_store: Optional[InMemoryVectorStore] = None
        self.embeddings: Optional[Embeddings] = None
        self._file_chunk_ids: Dict[str, List[str]] = {}

    def initialize(self, embeddings: Embeddings) -> None:
        self.embeddings = embeddings
        self.vector_store = InMemoryVectorStore(embedding=embeddings)
        self._file_chunk_ids = {}
        log.info("Vector store initialized | embeddings=%s", type(embeddings).__name__)

    def is_initialized(self) -> bool:
        return self.vector_store is not None and self.embeddings is not None

    @property
    def chunk_count(self) -> int:
        if self.vector_store is None:
            return 0
        return len(self.vector_store.store)

    def _require_store(self) -> InMemoryVectorStore:
        if not self.is_initialized():
            raise VectorStoreNotInitializedError("Vector store not initialized")
        return self.vector_store

    @staticmethod
    def _chunk_id(chunk: DocumentChunk) -> str:
        if chunk.file_id:
            return f"{chunk.file_id}__{chunk.chunk_index}"
        return f"chunk_{uuid.uuid4().hex[:8]}__{chunk.chunk_index}"

    @staticmethod
    def _to_chunk(doc: Document) -> DocumentChunk:
        md = doc.metadata or {}
        return DocumentChunk(
            content=doc.page_content,
            file_name=md.get("file_name", "unknown"),
            file_id=md.get("file_id"),
            chunk_index=md.get("chunk_index", 0),
            total_chunks=md.get("total_chunks", 1),
        )

    async def add_chunks(self, chunks: Sequence[DocumentChunk]) -> int:
        store = self._require_store()
        if not chunks:
            return 0

        ids: List[str] = []
        docs: List[Document] = []
        for chunk in chunks:
            chunk_id = self._chunk_id(chunk)
            ids.append(chunk_id)
            docs.append(
                Document(
                    page_content=chunk.content,
                    metadata={
                        "id": chunk_id,
                        "file_id": chunk.file_id,
                        "file_name": chunk.file_name,
                        "chunk_index": chunk.chunk_index,
                        "total_chunks": chunk.total_chunks,
                    },
                )
            )

        await store.aadd_documents(docs, ids=ids)

        for chunk, chunk_id in zip(chunks, ids):
            key = chunk.file_id or chunk.file_name
            self._file_chunk_ids.setdefault(key, []).append(chunk_id)

        log.info("Added document chunks to vector store | count=%d | total=%d", len(docs), self.chunk_count)
        return len(docs)

    async def search_similar(self, query: str, k: int = 4) -> List[DocumentChunk]:
        if k < 1:
            raise ValueError("k must be at least 1")
        store = self._require_store()

        if not store.store:
            log.info("Similarity search on empty index | k=%d", k)
            return []

        embedding = await self.embeddings.aembed_query(query)
        results = store.similarity_search_with_score_by_vector(embedding, k=k)

        chunks = [self._to_chunk(doc) for doc, _score in results[:k]]
        log.info(
            "Similarity search | k=%d | returned=%d | scores=%s",
            k,
            len(chunks),
            [round(float(score), 4) for _doc, score in results[:k]],
        )
        return chunks

    def remove_file(self, file_id: str) -> int:
        ids = self._file_chunk_ids.pop(file_id, [])
        if ids and self.vector_store is not None:
            self.vector_store.delete(ids)
        log.info("Removed file chunks | file_id=%s | count=%d", file_id, len(ids))
        return len(ids)

    def clear(self) -> None:
        self.vector_store = None
        self._file_chunk_ids = {}
        if self.embeddings is not None:
            self.vector_store = InMemoryVectorStore(embedding=self.embeddings)
        log.info("Vector store cleared")
