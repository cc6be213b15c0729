"""
Exception hierarchy for knowledge-recall.

Per-item failures (a single embedding call) are absorbed by the pipelines and
reported through status and result objects. Only whole-operation failures
propagate to the caller.
"""


class KnowledgeRecallError(Exception):
    """Base class for all knowledge-recall errors."""


class ConfigurationError(KnowledgeRecallError, ValueError):
    """Invalid chunking or retrieval configuration, raised before any work starts."""


class EmbeddingError(KnowledgeRecallError):
    """The embedding provider failed to produce a vector for one request."""


class IngestionError(KnowledgeRecallError):
    """A document ingestion or chunk deletion operation failed as a whole."""

    def __init__(self, document_id: str, message: str):
        super().__init__(message)
        self.document_id = document_id


class DocumentNotFoundError(KnowledgeRecallError, LookupError):
    """The requested document does not exist in the store."""

    def __init__(self, document_id: str):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id
