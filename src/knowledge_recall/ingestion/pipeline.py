"""
Document ingestion pipeline.

Turns raw document text into persisted, embedded chunks:

1. chunk the text with a sliding window
2. embed each chunk through the serialized embedding provider
3. persist chunks in fixed-size batches, in chunk_index order
4. mark the document processed with its chunk count

A failed embedding never aborts the run: the chunk is stored without a
vector and stays readable, but is never returned by similarity search.
"""

import logging
from typing import List, Optional

from knowledge_recall.embeddings.guard import SerializedEmbeddingProvider
from knowledge_recall.embeddings.protocol import EmbeddingProvider
from knowledge_recall.errors import EmbeddingError, IngestionError
from knowledge_recall.ingestion.chunker import iter_chunk_spans, validate_chunking
from knowledge_recall.ingestion.models import Deleting, IngestionResult, Processing
from knowledge_recall.ingestion.status import ProcessingStatusTracker
from knowledge_recall.models import Chunk
from knowledge_recall.storage.protocols import DocumentStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
EMPTY_DOCUMENT_REASON = "document is empty or too short"


def _progress(index: int, total: int) -> int:
    """Percentage after finishing chunk ``index``, rounded up."""
    return ((index + 1) * 100 + total - 1) // total


class DocumentIngestionPipeline:
    """
    Chunks, embeds and persists documents with observable progress.

    Status changes go to the injected ProcessingStatusTracker. Share the
    embedding provider instance with the retrieval services so that all
    embedding calls are serialized together.
    """

    def __init__(
        self,
        document_store: DocumentStore,
        embedding: EmbeddingProvider,
        status: Optional[ProcessingStatusTracker] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        """
        Initialize the pipeline.

        Args:
            document_store: Store for documents and chunks
            embedding: Embedding provider (wrapped in SerializedEmbeddingProvider
                if it is not already)
            status: Status tracker to publish progress to
            batch_size: Number of chunks persisted per write
        """
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self.document_store = document_store
        self.embedding = SerializedEmbeddingProvider.wrap(embedding)
        self.status = status or ProcessingStatusTracker()
        self.batch_size = batch_size

        logger.info(f"DocumentIngestionPipeline initialized (batch_size={batch_size})")

    async def process_document(
        self,
        document_id: str,
        document_name: str,
        content: str,
        chunk_size: int,
        chunk_overlap: int,
    ) -> IngestionResult:
        """
        Chunk, embed and persist one document.

        Args:
            document_id: ID of the stored document
            document_name: Display name used in status updates
            content: Document text
            chunk_size: Chunk window in characters (128-2048)
            chunk_overlap: Overlap between chunks (0-256, below chunk_size)

        Returns:
            IngestionResult; unsuccessful (without raising) for an empty document

        Raises:
            ConfigurationError: If the chunking parameters are invalid
            IngestionError: If persisting chunks or the document fails
        """
        validate_chunking(chunk_size, chunk_overlap)

        logger.info(f"Starting document processing: {document_name}")
        self.status.publish(
            Processing(
                document_id=document_id,
                document_name=document_name,
                progress=0,
                step="Chunking document...",
            )
        )

        spans = list(iter_chunk_spans(content, chunk_size, chunk_overlap))
        logger.info(f"Created {len(spans)} chunks for {document_name}")

        if not spans:
            self.status.fail(document_id, EMPTY_DOCUMENT_REASON)
            return IngestionResult(document_id=document_id, error=EMPTY_DOCUMENT_REASON)

        result = IngestionResult(document_id=document_id)
        total = len(spans)
        batch: List[Chunk] = []

        try:
            for index, span in enumerate(spans):
                self.status.publish(
                    Processing(
                        document_id=document_id,
                        document_name=document_name,
                        progress=_progress(index, total),
                        step=f"Embedding chunk {index + 1}/{total}...",
                    )
                )

                try:
                    vector = await self.embedding.generate_embedding(span.text)
                except EmbeddingError as e:
                    logger.warning(f"Failed to embed chunk {index} of {document_name}: {e}")
                    vector = None
                    result.failed_indices.append(index)

                batch.append(
                    Chunk(
                        document_id=document_id,
                        content=span.text,
                        chunk_index=index,
                        embedding=vector,
                        metadata={"start_offset": span.start, "end_offset": span.end},
                    )
                )

                if len(batch) == self.batch_size or index == total - 1:
                    self.document_store.insert_chunks(batch)
                    logger.debug(f"Saved batch of {len(batch)} chunks")
                    result.chunk_count += len(batch)
                    batch = []

            if not self.document_store.mark_document_processed(document_id, total):
                logger.warning(f"Document {document_id} disappeared during processing")

        except Exception as e:
            logger.error(f"Error processing document {document_name}: {e}")
            self.status.fail(document_id, str(e) or "Unknown error")
            raise IngestionError(document_id, f"Failed to process {document_name}: {e}") from e

        result.embedded_count = result.chunk_count - len(result.failed_indices)
        self.status.complete(document_id)

        logger.info(
            f"Document processing completed: {document_name} "
            f"({result.chunk_count} chunks, {len(result.failed_indices)} without embedding)"
        )
        return result

    async def delete_document_chunks(self, document_id: str, document_name: str) -> int:
        """
        Remove every chunk of a document.

        Progress is reported at 50% when the delete starts and 100% when it
        has finished.

        Returns:
            Number of chunks deleted

        Raises:
            IngestionError: If the store fails; no partial result is reported
        """
        logger.info(f"Deleting chunks for document: {document_name}")
        self.status.publish(
            Deleting(document_id=document_id, document_name=document_name, progress=50)
        )

        try:
            count = self.document_store.delete_chunks(document_id)
        except Exception as e:
            logger.error(f"Error deleting chunks for {document_name}: {e}")
            self.status.fail(document_id, f"Failed to delete chunks: {e}")
            raise IngestionError(document_id, f"Failed to delete chunks: {e}") from e

        self.status.deleted(document_id, document_name)
        logger.info(f"Deleted {count} chunks for {document_name}")
        return count

    async def reprocess_document(
        self,
        document_id: str,
        document_name: str,
        content: str,
        chunk_size: int,
        chunk_overlap: int,
    ) -> IngestionResult:
        """
        Rebuild all chunks of a document from scratch.

        Existing chunks are deleted first, then the full pipeline runs again.
        """
        validate_chunking(chunk_size, chunk_overlap)
        await self.delete_document_chunks(document_id, document_name)
        return await self.process_document(
            document_id, document_name, content, chunk_size, chunk_overlap
        )
