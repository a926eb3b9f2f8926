"""
Exception hierarchy for ragdesk.

Chunking and classification failures are recovered where they occur; embedding,
storage and generation failures are surfaced to the caller.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class RagDeskError(Exception):
    """Base exception for all ragdesk errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        # Records already committed before the failure (see EmbeddingStore.store)
        self.partial_results: List[Any] = []
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ChunkingError(RagDeskError):
    """Raised when model-assisted chunking fails."""


class EmbeddingError(RagDeskError):
    """Raised when an embedding cannot be produced or is invalid."""


class MalformedModelResponse(RagDeskError):
    """Raised when a model answers with a payload of the wrong shape."""


class MalformedEmbeddingResponse(EmbeddingError, MalformedModelResponse):
    pass


class MalformedChunkingResponse(ChunkingError, MalformedModelResponse):
    pass


class StorageError(RagDeskError):
    """Raised when the vector store rejects a read or write."""


class ClassificationError(RagDeskError):
    pass


class GapPersistError(RagDeskError):
    pass


class GenerationError(RagDeskError):
    """Raised when the answer cannot be generated."""


class IngestionCancelled(RagDeskError):
    """Raised when a caller cancels ingestion part way through."""


class ProjectNotFoundError(RagDeskError):
    def __init__(self, slug: str) -> None:
        super().__init__(f"Project not found: {slug}", {"slug": slug})
