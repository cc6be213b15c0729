"""
SQLAlchemy-based document and chunk storage implementation.

Works with any SQLAlchemy-compatible database (PostgreSQL, SQLite, MySQL,
etc.). Embedding vectors and chunk metadata are stored as JSON text.
"""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, Column, DateTime, Engine, Index, Integer, String, Text
from sqlalchemy.orm import Session, declarative_base

from knowledge_recall.models import Chunk, Document

logger = logging.getLogger(__name__)

# Declarative base for the tables of this store
Base = declarative_base()


class DocumentDB(Base):
    """SQLAlchemy model for knowledge documents."""

    __tablename__ = "knowledge_documents"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    content = Column(Text, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    size_bytes = Column(Integer, nullable=False, default=0)
    is_processed = Column(Boolean, nullable=False, default=False)
    chunk_count = Column(Integer, nullable=False, default=0)

    def to_document(self) -> Document:
        """Convert database model to Document."""
        return Document(
            id=self.id,
            name=self.name,
            content=self.content,
            created_at=self.created_at,
            updated_at=self.updated_at,
            size_bytes=self.size_bytes,
            is_processed=self.is_processed,
            chunk_count=self.chunk_count,
        )

    def apply(self, document: Document) -> None:
        """Copy every field of a Document onto this row."""
        self.name = document.name
        self.content = document.content
        self.created_at = document.created_at
        self.updated_at = document.updated_at
        self.size_bytes = document.size_bytes
        self.is_processed = document.is_processed
        self.chunk_count = document.chunk_count

    @staticmethod
    def from_document(document: Document) -> "DocumentDB":
        """Create database model from Document."""
        row = DocumentDB(id=document.id)
        row.apply(document)
        return row


class ChunkDB(Base):
    """SQLAlchemy model for document chunks."""

    __tablename__ = "document_chunks"

    id = Column(String, primary_key=True)
    document_id = Column(String, nullable=False, index=True)
    content = Column(Text, nullable=False)
    chunk_index = Column(Integer, nullable=False)

    # JSON serialized
    embedding_json = Column(Text, nullable=True)
    metadata_json = Column(Text, nullable=True)

    __table_args__ = (Index("idx_chunks_document_index", "document_id", "chunk_index"),)

    def to_chunk(self) -> Chunk:
        """Convert database model to Chunk."""
        return Chunk(
            id=self.id,
            document_id=self.document_id,
            content=self.content,
            chunk_index=self.chunk_index,
            embedding=json.loads(self.embedding_json) if self.embedding_json else None,
            metadata=json.loads(self.metadata_json) if self.metadata_json else None,
        )

    def apply(self, chunk: Chunk) -> None:
        """Copy every field of a Chunk onto this row."""
        self.document_id = chunk.document_id
        self.content = chunk.content
        self.chunk_index = chunk.chunk_index
        self.embedding_json = json.dumps(chunk.embedding) if chunk.embedding is not None else None
        self.metadata_json = json.dumps(chunk.metadata) if chunk.metadata is not None else None

    @staticmethod
    def from_chunk(chunk: Chunk) -> "ChunkDB":
        """Create database model from Chunk."""
        row = ChunkDB(id=chunk.id)
        row.apply(chunk)
        return row


class SQLAlchemyDocumentStore:
    """
    SQLAlchemy-based document and chunk storage.

    Example:
        # SQLite
        from sqlalchemy import create_engine
        engine = create_engine("sqlite:///knowledge.db")
        store = SQLAlchemyDocumentStore(engine)
        store.create_tables()
    """

    def __init__(self, engine: Engine):
        """
        Initialize the SQLAlchemy document store.

        Args:
            engine: SQLAlchemy engine for database connection
        """
        self.engine = engine
        logger.info(f"SQLAlchemyDocumentStore initialized (engine={engine.url})")

    @contextmanager
    def _session(self):
        """Yield a session that commits on success and rolls back on error."""
        session = Session(self.engine)
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            session.close()

    def create_tables(self):
        """Create database tables if they don't exist."""
        Base.metadata.create_all(self.engine)
        logger.info("Document tables created/verified")

    def add_document(self, document: Document) -> str:
        """Add a document to the store."""
        with self._session() as session:
            session.add(DocumentDB.from_document(document))
            logger.debug(f"Stored document {document.id}: '{document.name}'")
            return document.id

    def get_document(self, document_id: str) -> Optional[Document]:
        """Retrieve a document by ID."""
        with self._session() as session:
            row = session.get(DocumentDB, document_id)
            return row.to_document() if row else None

    def list_documents(self) -> List[Document]:
        """List all documents, most recently created first."""
        with self._session() as session:
            rows = session.query(DocumentDB).order_by(DocumentDB.created_at.desc()).all()
            return [row.to_document() for row in rows]

    def update_document(self, document: Document) -> bool:
        """Replace a stored document."""
        with self._session() as session:
            row = session.get(DocumentDB, document.id)
            if not row:
                logger.error(f"Document {document.id} not found")
                return False

            row.apply(document)
            return True

    def delete_document(self, document_id: str) -> bool:
        """Delete a document and all of its chunks."""
        with self._session() as session:
            chunk_count = (
                session.query(ChunkDB).filter(ChunkDB.document_id == document_id).delete()
            )
            deleted = session.query(DocumentDB).filter(DocumentDB.id == document_id).delete()

            if deleted:
                logger.info(f"Deleted document {document_id} ({chunk_count} chunks)")
            return bool(deleted)

    def mark_document_processed(self, document_id: str, chunk_count: int) -> bool:
        """Flag a document as processed with its final chunk count."""
        with self._session() as session:
            row = session.get(DocumentDB, document_id)
            if not row:
                logger.warning(f"Cannot mark document {document_id} processed: not found")
                return False

            row.is_processed = True
            row.chunk_count = chunk_count
            return True

    def insert_chunks(self, chunks: List[Chunk]) -> int:
        """Append a batch of chunks in one transaction."""
        with self._session() as session:
            session.add_all([ChunkDB.from_chunk(chunk) for chunk in chunks])
            logger.debug(f"Inserted {len(chunks)} chunks")
            return len(chunks)

    def get_chunks(self, document_id: str) -> List[Chunk]:
        """Get all chunks of a document ordered by chunk_index."""
        with self._session() as session:
            rows = (
                session.query(ChunkDB)
                .filter(ChunkDB.document_id == document_id)
                .order_by(ChunkDB.chunk_index.asc())
                .all()
            )
            return [row.to_chunk() for row in rows]

    def get_chunks_with_embeddings(self) -> List[Chunk]:
        """Get every chunk carrying an embedding, across all documents."""
        with self._session() as session:
            rows = (
                session.query(ChunkDB)
                .filter(ChunkDB.embedding_json.isnot(None))
                .order_by(ChunkDB.document_id, ChunkDB.chunk_index)
                .all()
            )
            return [row.to_chunk() for row in rows]

    def update_chunk(self, chunk: Chunk) -> bool:
        """Replace a stored chunk."""
        with self._session() as session:
            row = session.get(ChunkDB, chunk.id)
            if not row:
                logger.error(f"Chunk {chunk.id} not found")
                return False

            row.apply(chunk)
            return True

    def delete_chunks(self, document_id: str) -> int:
        """Delete all chunks of a document."""
        with self._session() as session:
            count = session.query(ChunkDB).filter(ChunkDB.document_id == document_id).delete()
            logger.info(f"Deleted {count} chunks for document {document_id}")
            return count
