"""Abstract vector storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.models import EmbeddingRecord, SimilarityResult, SourceType


class VectorStore(ABC):
    """Abstract base class for vector storage backends."""

    @abstractmethod
    def insert(self, record: EmbeddingRecord) -> None:
        """Persist one record."""
        pass

    @abstractmethod
    def search(
        self,
        query_vector: List[float],
        threshold: float,
        limit: int,
        project_id: str,
        user_id: Optional[str] = None,
        source_type: Optional[SourceType] = None,
    ) -> List[SimilarityResult]:
        """Return records scoped to the tenant, closest first, with similarity >= threshold."""
        pass

    @abstractmethod
    def delete_by_source(self, source_id: str, source_type: SourceType) -> None:
        """Delete every record of a source. Deleting a missing source is a no-op."""
        pass

    @abstractmethod
    def count(
        self,
        project_id: Optional[str] = None,
        user_id: Optional[str] = None,
        source_id: Optional[str] = None,
        source_type: Optional[SourceType] = None,
    ) -> int:
        """Count records matching the filters."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """Check if collection exists and has data."""
        pass
