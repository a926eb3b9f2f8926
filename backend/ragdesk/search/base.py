"""Searcher Interface."""

from __future__ import annotations

from typing import List, Optional

from ..core import SimilarityResult, SourceType


class Searcher:
    """Abstract base class for semantic search."""

    def search(
        self,
        query: str,
        project_id: str,
        user_id: str,
        threshold: float = 0.4,
        limit: int = 10,
        source_type: Optional[SourceType] = None,
    ) -> List[SimilarityResult]:
        """Search for stored content semantically similar to query.

        Args:
            query: Search query text
            project_id: Tenant project
            user_id: Tenant user
            threshold: Minimum similarity in [0, 1]
            limit: Number of results to return
            source_type: Restrict results to one source type

        Returns:
            SimilarityResults sorted by descending similarity
        """
        raise NotImplementedError
