import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A user-uploaded knowledge document."""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()), description="Unique document identifier"
    )
    name: str = Field(..., description="Display name of the document")
    content: str = Field(..., description="Full text of the document")
    created_at: datetime = Field(default_factory=datetime.now, description="When it was uploaded")
    updated_at: datetime = Field(
        default_factory=datetime.now, description="When its content last changed"
    )
    size_bytes: int = Field(default=0, ge=0, description="UTF-8 size of the content")
    is_processed: bool = Field(
        default=False, description="Whether the ingestion pipeline has chunked and embedded it"
    )
    chunk_count: int = Field(default=0, ge=0, description="Number of chunks produced on ingestion")

    @classmethod
    def from_content(cls, name: str, content: str) -> "Document":
        """Build a new, unprocessed document for the given text."""
        return cls(name=name, content=content, size_bytes=len(content.encode("utf-8")))


class Chunk(BaseModel):
    """A bounded, possibly overlapping slice of a document."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Unique chunk identifier")
    document_id: str = Field(..., description="ID of the parent document")
    content: str = Field(..., description="Trimmed chunk text")
    chunk_index: int = Field(..., ge=0, description="0-based position within the document")
    embedding: Optional[List[float]] = Field(
        default=None, description="Embedding vector, None when embedding failed"
    )
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, description="Source span and other chunk metadata"
    )


class MemoryEntry(BaseModel):
    """A fact about the user extracted from a conversation message."""

    id: str = Field(
        default_factory=lambda: f"mem_{uuid.uuid4().hex}", description="Unique memory identifier"
    )
    conversation_id: str = Field(..., description="Conversation the fact was extracted from")
    message_id: str = Field(..., description="Message the fact was extracted from")
    fact: str = Field(..., description="The remembered fact")
    created_at: datetime = Field(default_factory=datetime.now, description="When it was extracted")
    is_archived: bool = Field(default=False, description="Soft-deleted flag")
    embedding: Optional[List[float]] = Field(
        default=None, description="Embedding of the fact, None when not yet computed"
    )
