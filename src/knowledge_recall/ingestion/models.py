"""
Models for document processing status and results.

ProcessingStatus is a tagged union of frozen dataclasses. Each ingestion or
deletion operation moves through:

    Idle -> Processing(progress, step) -> Completed | Failed(reason) -> Idle
    Idle -> Deleting(progress) -> Idle | Failed(reason) -> Idle
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union


@dataclass(frozen=True)
class Idle:
    """No operation in progress."""

    kind: Literal["idle"] = "idle"


@dataclass(frozen=True)
class Processing:
    """A document is being chunked and embedded."""

    document_id: str
    document_name: str
    progress: int  # 0-100
    step: str
    kind: Literal["processing"] = "processing"


@dataclass(frozen=True)
class Deleting:
    """Chunks of a document are being removed."""

    document_id: str
    document_name: str
    progress: int  # 0-100
    kind: Literal["deleting"] = "deleting"


@dataclass(frozen=True)
class Completed:
    """Processing finished successfully."""

    document_id: str
    kind: Literal["completed"] = "completed"


@dataclass(frozen=True)
class Failed:
    """Processing or deletion failed."""

    document_id: str
    reason: str
    kind: Literal["failed"] = "failed"


ProcessingStatus = Union[Idle, Processing, Deleting, Completed, Failed]


@dataclass
class IngestionResult:
    """
    Outcome of one document ingestion run.

    Attributes:
        document_id: The processed document
        chunk_count: Number of chunks persisted
        embedded_count: Chunks persisted with an embedding
        failed_indices: chunk_index values whose embedding failed; those
            chunks were stored without a vector
        error: Reason when the run produced nothing (e.g. empty document)
    """

    document_id: str
    chunk_count: int = 0
    embedded_count: int = 0
    failed_indices: List[int] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None
