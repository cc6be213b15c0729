"""
Document ingestion: chunking, embedding and persistence with progress status.
"""

from knowledge_recall.ingestion.chunker import chunk_text, iter_chunk_spans, validate_chunking
from knowledge_recall.ingestion.models import (
    Completed,
    Deleting,
    Failed,
    Idle,
    IngestionResult,
    Processing,
    ProcessingStatus,
)
from knowledge_recall.ingestion.pipeline import DocumentIngestionPipeline
from knowledge_recall.ingestion.status import ProcessingStatusTracker

__all__ = [
    "chunk_text",
    "iter_chunk_spans",
    "validate_chunking",
    "Completed",
    "Deleting",
    "Failed",
    "Idle",
    "IngestionResult",
    "Processing",
    "ProcessingStatus",
    "DocumentIngestionPipeline",
    "ProcessingStatusTracker",
]
