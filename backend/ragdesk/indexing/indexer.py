"""Content ingestion: chunk, embed and store, with progress reporting."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

from ..core import Chunker, EmbeddingRecord, ProgressEvent, SimilarityResult, SourceType
from ..core.chunking import DEFAULT_MAX_WORDS
from ..core.exceptions import ChunkingError
from ..search import DefaultSearcher
from ..storage import EmbeddingStore
from .base import Indexer, ProgressCallback

logger = logging.getLogger(__name__)


def _emit(on_progress: Optional[ProgressCallback], step: str, progress: int, message: str) -> None:
    if on_progress is None:
        return
    on_progress(ProgressEvent(step=step, progress=progress, message=message))


class ContentIndexer(Indexer):
    """Runs submitted content through the chunker and into the embedding store.

    Progress is reported as immutable ``ProgressEvent`` values through an
    optional callback; the indexer keeps no processing state of its own.
    """

    def __init__(self, chunker: Chunker, embedding_store: EmbeddingStore, max_words: int = DEFAULT_MAX_WORDS):
        self.chunker = chunker
        self.embedding_store = embedding_store
        self.max_words = max_words

    def process_content(
        self,
        content: str,
        source_id: str,
        source_type: SourceType,
        project_id: str,
        user_id: str,
        original_title: Optional[str] = None,
        replace: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[EmbeddingRecord]:
        _emit(on_progress, "analyzing", 0, "Analyzing content...")

        _emit(on_progress, "chunking", 20, "Breaking content into semantic chunks...")
        chunks = self.chunker.chunk(content, self.max_words)
        if not chunks:
            raise ChunkingError("No chunks generated from content")

        _emit(on_progress, "embedding", 50, f"Generating embeddings for {len(chunks)} chunks...")
        embeddings = None
        if replace:
            # Old records are only dropped once every new vector is in hand
            embeddings = self.embedding_store.embed_batch([c.content for c in chunks])
            self.embedding_store.delete_by_source(source_id, source_type)

        records = self.embedding_store.store(
            chunks,
            source_id=source_id,
            source_type=source_type,
            project_id=project_id,
            user_id=user_id,
            original_title=original_title,
            cancel_event=cancel_event,
            embeddings=embeddings,
        )

        _emit(on_progress, "complete", 100, "Processing complete!")
        logger.info(f"Processed {source_type.value}:{source_id} into {len(records)} records")
        return records

    def search_content(
        self,
        query: str,
        project_id: str,
        user_id: str,
        threshold: float = 0.4,
        limit: int = 10,
        source_type: Optional[SourceType] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[SimilarityResult]:
        _emit(on_progress, "searching", 0, "Searching similar content...")
        results = DefaultSearcher(self.embedding_store).search(
            query,
            project_id=project_id,
            user_id=user_id,
            threshold=threshold,
            limit=limit,
            source_type=source_type,
        )
        _emit(on_progress, "complete", 100, "Search complete!")
        return results

    def delete_content(
        self,
        source_id: str,
        source_type: SourceType,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        _emit(on_progress, "deleting", 0, "Deleting embeddings...")
        self.embedding_store.delete_by_source(source_id, source_type)
        _emit(on_progress, "complete", 100, "Deletion complete!")
