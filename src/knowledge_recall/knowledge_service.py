from datetime import datetime
from typing import List, Optional, Tuple
import logging

from knowledge_recall.config import MAX_RESULT_LIMIT, MIN_RESULT_LIMIT, RecallSettings, clamp
from knowledge_recall.embeddings import EmbeddingProvider, SerializedEmbeddingProvider
from knowledge_recall.errors import DocumentNotFoundError, EmbeddingError
from knowledge_recall.ingestion import (
    DocumentIngestionPipeline,
    IngestionResult,
    ProcessingStatusTracker,
)
from knowledge_recall.models import Chunk, Document
from knowledge_recall.search import find_similar
from knowledge_recall.storage import DocumentStore

logger = logging.getLogger(__name__)


class KnowledgeBaseService:
    """
    Knowledge documents and retrieval-augmented generation over their chunks.

    Creating or editing a document runs the ingestion pipeline when RAG is
    enabled; editing rebuilds all chunks. Search is global across every
    document in the store.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        embedding: EmbeddingProvider,
        settings: Optional[RecallSettings] = None,
        status: Optional[ProcessingStatusTracker] = None,
        pipeline: Optional[DocumentIngestionPipeline] = None,
    ):
        """
        Args:
            document_store: Where documents and chunks are kept
            embedding: Provider for chunk and query vectors
            settings: Defaults to RecallSettings() read from the environment
            status: Tracker for the pipeline built here
            pipeline: Prebuilt pipeline; it already owns its status tracker

        Raises:
            ValueError: If both status and pipeline are given
        """
        if pipeline is not None and status is not None:
            raise ValueError("Pass status to the pipeline, not alongside it")

        self.document_store = document_store
        self.embedding = SerializedEmbeddingProvider.wrap(embedding)
        self.settings = settings or RecallSettings()
        self.pipeline = pipeline or DocumentIngestionPipeline(
            document_store,
            self.embedding,
            status=status,
            batch_size=self.settings.ingestion_batch_size,
        )

    @property
    def status(self) -> ProcessingStatusTracker:
        """Status tracker of the ingestion pipeline."""
        return self.pipeline.status

    async def _ingest(self, document: Document, reprocess: bool) -> Optional[IngestionResult]:
        if not self.settings.rag_enabled:
            logger.debug(f"RAG disabled, skipping ingestion of {document.name}")
            return None

        run = self.pipeline.reprocess_document if reprocess else self.pipeline.process_document
        return await run(
            document.id,
            document.name,
            document.content,
            self.settings.chunk_size,
            self.settings.chunk_overlap,
        )

    async def create_document(self, name: str, content: str) -> Document:
        """Store a new document and ingest it for RAG."""
        document = Document.from_content(name, content)
        self.document_store.add_document(document)
        logger.info(f"Document created: {document.id} ({document.size_bytes} bytes)")

        await self._ingest(document, reprocess=False)
        return self.document_store.get_document(document.id) or document

    async def update_document(
        self,
        document_id: str,
        name: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Document:
        """
        Rename and/or edit a document, then rebuild its chunks.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        document = self.document_store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        updates = {"updated_at": datetime.now()}
        if name is not None:
            updates["name"] = name
        if content is not None:
            updates["content"] = content
            updates["size_bytes"] = len(content.encode("utf-8"))

        document = document.model_copy(update=updates)
        self.document_store.update_document(document)
        logger.info(f"Document updated: {document.id}")

        await self._ingest(document, reprocess=True)
        return self.document_store.get_document(document.id) or document

    async def delete_document(self, document_id: str) -> bool:
        """Delete a document; its chunks are removed first with progress reporting."""
        document = self.document_store.get_document(document_id)
        if document is None:
            return False

        await self.pipeline.delete_document_chunks(document.id, document.name)
        return self.document_store.delete_document(document.id)

    def get_document(self, document_id: str) -> Optional[Document]:
        return self.document_store.get_document(document_id)

    def list_documents(self) -> List[Document]:
        return self.document_store.list_documents()

    def get_document_chunks(self, document_id: str) -> List[Chunk]:
        return self.document_store.get_chunks(document_id)

    async def search_similar_chunks(
        self, query: str, top_k: Optional[int] = None
    ) -> List[Tuple[Chunk, float]]:
        """
        Find the chunks most relevant to a message across all documents.

        Args:
            query: The user's current message
            top_k: Maximum number of chunks (clamped to 1-10)

        Returns:
            (chunk, score) pairs, best first. Empty when the query cannot be
            embedded or nothing is searchable.
        """
        top_k = clamp(
            self.settings.rag_chunk_limit if top_k is None else top_k,
            MIN_RESULT_LIMIT,
            MAX_RESULT_LIMIT,
        )

        if not self.settings.rag_enabled or not query or not query.strip():
            return []

        try:
            query_vector = await self.embedding.generate_embedding(query)
        except EmbeddingError as e:
            logger.warning(f"Failed to generate query embedding for RAG search: {e}")
            return []

        try:
            chunks = self.document_store.get_chunks_with_embeddings()
        except Exception as e:
            logger.error(f"Error loading chunks for RAG search: {e}")
            return []

        if not chunks:
            logger.debug("No chunks available for RAG search")
            return []

        results = find_similar(
            query=query,
            query_embedding=query_vector,
            candidates=chunks,
            k=top_k,
            get_text=lambda chunk: chunk.content,
            get_embedding=lambda chunk: chunk.embedding,
            weights=self.settings.scoring,
        )

        logger.info(f"Found {len(results)} similar chunks for RAG")
        return [(result.item, result.score) for result in results]
