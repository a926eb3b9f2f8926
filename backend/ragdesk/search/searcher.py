"""Semantic search functionality."""

from __future__ import annotations

from typing import List, Optional

from ..core import SimilarityResult, SourceType
from ..storage import EmbeddingStore

from .base import Searcher

SUFFICIENCY_THRESHOLD = 0.5


class DefaultSearcher(Searcher):

    def __init__(self, embedding_store: EmbeddingStore):
        self.embedding_store = embedding_store

    def search(
        self,
        query: str,
        project_id: str,
        user_id: str,
        threshold: float = 0.4,
        limit: int = 10,
        source_type: Optional[SourceType] = None,
    ) -> List[SimilarityResult]:
        qv = self.embedding_store.embed(query)
        return self.embedding_store.search(
            qv,
            project_id=project_id,
            user_id=user_id,
            threshold=threshold,
            limit=limit,
            source_type=source_type,
        )


def is_sufficient(results: List[SimilarityResult], threshold: float = SUFFICIENCY_THRESHOLD) -> bool:
    """A retrieval answers the query when at least one hit is strictly above the bar."""
    return any(r.similarity > threshold for r in results)


def format_context(results: List[SimilarityResult]) -> List[str]:
    blocks = []
    for r in results:
        source_info = f"[{r.source_type.value.upper()}] " if r.source_type else ""
        blocks.append(f"{source_info}{r.content}")
    return blocks

