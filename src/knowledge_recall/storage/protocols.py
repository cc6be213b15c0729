"""
Storage protocol definitions for documents, chunks and memories.

These protocols define the interface that storage implementations must provide.
They are implementation-agnostic and can be backed by various databases
(SQLite, PostgreSQL, in-memory, etc.).
"""

from datetime import datetime
from typing import List, Optional, Protocol

from knowledge_recall.models import Chunk, Document, MemoryEntry


class DocumentStore(Protocol):
    """
    Protocol for knowledge document and chunk storage.

    Chunks are owned by their document. Implementations must return chunks of
    one document ordered by chunk_index and must append inserted batches in
    the order given.
    """

    def add_document(self, document: Document) -> str:
        """
        Add a document to the store.

        Args:
            document: The document to store

        Returns:
            The document ID
        """
        ...

    def get_document(self, document_id: str) -> Optional[Document]:
        """
        Retrieve a document by ID.

        Returns:
            The document if found, None otherwise
        """
        ...

    def list_documents(self) -> List[Document]:
        """
        List all documents, most recently created first.
        """
        ...

    def update_document(self, document: Document) -> bool:
        """
        Replace a stored document.

        Returns:
            True if successful, False if the document was not found
        """
        ...

    def delete_document(self, document_id: str) -> bool:
        """
        Delete a document and all of its chunks.

        Returns:
            True if a document was deleted
        """
        ...

    def mark_document_processed(self, document_id: str, chunk_count: int) -> bool:
        """
        Flag a document as processed with its final chunk count.

        Returns:
            True if successful, False if the document was not found
        """
        ...

    def insert_chunks(self, chunks: List[Chunk]) -> int:
        """
        Append a batch of chunks.

        Args:
            chunks: Chunks in increasing chunk_index order

        Returns:
            Number of chunks inserted
        """
        ...

    def get_chunks(self, document_id: str) -> List[Chunk]:
        """
        Get all chunks of a document ordered by chunk_index.
        """
        ...

    def get_chunks_with_embeddings(self) -> List[Chunk]:
        """
        Get every chunk carrying an embedding, across all documents.
        """
        ...

    def update_chunk(self, chunk: Chunk) -> bool:
        """
        Replace a stored chunk.

        Returns:
            True if successful, False if the chunk was not found
        """
        ...

    def delete_chunks(self, document_id: str) -> int:
        """
        Delete all chunks of a document.

        Returns:
            Number of chunks deleted
        """
        ...


class MemoryStore(Protocol):
    """
    Protocol for long-term memory storage.

    Memories are soft-deleted by archiving. Listing excludes archived entries
    unless asked otherwise.
    """

    def add_memory(self, memory: MemoryEntry) -> str:
        """
        Add a memory to the store.

        Returns:
            The memory ID
        """
        ...

    def get_memory(self, memory_id: str) -> Optional[MemoryEntry]:
        """
        Retrieve a memory by ID, archived or not.
        """
        ...

    def get_memory_for_message(self, message_id: str) -> Optional[MemoryEntry]:
        """
        Retrieve the memory extracted from a message, if any.
        """
        ...

    def list_memories(
        self,
        include_archived: bool = False,
        conversation_id: Optional[str] = None,
        created_before: Optional[datetime] = None,
    ) -> List[MemoryEntry]:
        """
        List memories, newest first.

        Args:
            include_archived: Whether to include archived memories
            conversation_id: Only memories from this conversation
            created_before: Only memories created at or before this instant

        Returns:
            Matching memories ordered by created_at descending
        """
        ...

    def search_memories(self, query: str) -> List[MemoryEntry]:
        """
        Case-insensitive substring search over non-archived facts, newest first.
        """
        ...

    def update_memory(self, memory: MemoryEntry) -> bool:
        """
        Replace a stored memory.

        Returns:
            True if successful, False if the memory was not found
        """
        ...

    def update_embedding(self, memory_id: str, embedding: Optional[List[float]]) -> bool:
        """
        Replace only the embedding of a memory.

        Returns:
            True if successful, False if the memory was not found
        """
        ...

    def archive_memory(self, memory_id: str) -> bool:
        """
        Archive (soft-delete) a memory.

        Returns:
            True if successful, False if the memory was not found
        """
        ...

    def delete_memory(self, memory_id: str) -> bool:
        """
        Permanently delete a memory.

        Returns:
            True if a memory was deleted
        """
        ...

    def delete_conversation_memories(self, conversation_id: str) -> int:
        """
        Delete all memories of a conversation.

        Returns:
            Number of memories deleted
        """
        ...

    def delete_archived_memories(self) -> int:
        """
        Permanently delete every archived memory.

        Returns:
            Number of memories deleted
        """
        ...

    def count_memories(self) -> int:
        """
        Count non-archived memories.
        """
        ...
