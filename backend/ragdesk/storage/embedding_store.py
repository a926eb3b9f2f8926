"""Embedding store: turns text into validated vectors and keeps them tenant-scoped."""

from __future__ import annotations

import datetime as _dt
import logging
import threading
import uuid
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence

from ..core.embeddings import Embedder, make_embedder
from ..core.exceptions import (
    EmbeddingError,
    IngestionCancelled,
    MalformedEmbeddingResponse,
    RagDeskError,
    StorageError,
)
from ..core.models import Chunk, EmbeddingRecord, SimilarityResult, SourceType
from .base import VectorStore
from .factory import make_vector_store

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.4
DEFAULT_LIMIT = 10


class EmbeddingStore:
    """Embeds text and stores/searches the resulting vectors.

    Every vector coming back from the embedder is checked against the fixed
    dimension; a short or malformed vector is an error, never truncated or padded.
    """

    def __init__(self, embedder: Embedder, vector_store: VectorStore, dimension: Optional[int] = None):
        self.embedder = embedder
        self.vector_store = vector_store
        self.dimension = dimension or embedder.dimension

    def _validate(self, vector: Any) -> List[float]:
        if not isinstance(vector, Sequence) or isinstance(vector, (str, bytes)):
            raise MalformedEmbeddingResponse(f"Embedding is not an array: {type(vector).__name__}")
        if not all(isinstance(v, Real) and not isinstance(v, bool) for v in vector):
            raise MalformedEmbeddingResponse("Embedding contains non-numeric values")
        if self.dimension is not None and len(vector) != self.dimension:
            raise EmbeddingError(
                f"Embedding has dimension {len(vector)}, expected {self.dimension}",
                {"expected": self.dimension, "actual": len(vector)},
            )
        return [float(v) for v in vector]

    def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise EmbeddingError("Text is required")
        try:
            vector = self.embedder.embed_one(text)
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Failed to generate embedding: {e}") from e
        return self._validate(vector)

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed all texts, in order. Any single failure fails the whole batch."""
        if not texts:
            return []
        if any(not t or not t.strip() for t in texts):
            raise EmbeddingError("Text is required")
        try:
            vectors = self.embedder.embed(list(texts))
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Failed to generate batch embeddings: {e}") from e
        if not isinstance(vectors, list) or len(vectors) != len(texts):
            raise MalformedEmbeddingResponse(
                f"Expected {len(texts)} embeddings, got {len(vectors) if isinstance(vectors, list) else vectors!r}"
            )
        return [self._validate(v) for v in vectors]

    def store(
        self,
        chunks: List[Chunk],
        source_id: str,
        source_type: SourceType,
        project_id: str,
        user_id: str,
        original_title: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
        embeddings: Optional[List[List[float]]] = None,
    ) -> List[EmbeddingRecord]:
        """Embed and persist chunks one at a time.

        ``embeddings``, when given, are vectors already computed for ``chunks``
        (same order) and are used instead of calling the embedder again.

        Writes are not rolled back. On failure the error is re-raised with
        ``partial_results`` holding the records already committed.
        """
        if embeddings is not None and len(embeddings) != len(chunks):
            raise EmbeddingError(
                f"Got {len(embeddings)} embeddings for {len(chunks)} chunks",
                {"expected": len(chunks), "actual": len(embeddings)},
            )
        results: List[EmbeddingRecord] = []

        for position, chunk in enumerate(chunks):
            if cancel_event is not None and cancel_event.is_set():
                err = IngestionCancelled(
                    f"Ingestion cancelled after {len(results)} of {len(chunks)} chunks",
                    {"source_id": source_id, "stored": len(results)},
                )
                err.partial_results = list(results)
                raise err

            metadata: Dict[str, Any] = {
                "summary": chunk.summary,
                "keywords": list(chunk.keywords),
                "chunkIndex": chunk.chunk_index,
                "totalChunks": chunk.total_chunks,
            }
            if original_title:
                metadata["originalTitle"] = original_title

            try:
                if embeddings is not None:
                    embedding = self._validate(embeddings[position])
                else:
                    embedding = self.embed(chunk.content)
                now = _dt.datetime.now(_dt.timezone.utc)
                record = EmbeddingRecord(
                    id=str(uuid.uuid4()),
                    content=chunk.content,
                    embedding=embedding,
                    metadata=metadata,
                    source_type=source_type,
                    source_id=source_id,
                    project_id=project_id,
                    user_id=user_id,
                    created_at=now,
                    updated_at=now,
                )
                self.vector_store.insert(record)
            except RagDeskError as e:
                logger.error(f"Error storing chunk {chunk.chunk_index}/{chunk.total_chunks} of {source_id}: {e}")
                e.partial_results = list(results)
                raise
            except Exception as e:
                logger.error(f"Error storing chunk {chunk.chunk_index}/{chunk.total_chunks} of {source_id}: {e}")
                err = StorageError(f"Failed to store embeddings: {e}")
                err.partial_results = list(results)
                raise err from e

            results.append(record)

        logger.info(f"Stored {len(results)} embeddings for {source_type.value}:{source_id}")
        return results

    def search(
        self,
        query_embedding: List[float],
        project_id: str,
        user_id: str,
        threshold: float = DEFAULT_THRESHOLD,
        limit: int = DEFAULT_LIMIT,
        source_type: Optional[SourceType] = None,
    ) -> List[SimilarityResult]:
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        if limit <= 0:
            return []
        results = self.vector_store.search(
            self._validate(query_embedding),
            threshold=threshold,
            limit=limit,
            project_id=project_id,
            user_id=user_id,
            source_type=source_type,
        )
        return sorted(results, key=lambda r: r.similarity, reverse=True)[:limit]

    def delete_by_source(self, source_id: str, source_type: SourceType) -> None:
        self.vector_store.delete_by_source(source_id, source_type)


def make_embedding_store(cfg: Dict) -> EmbeddingStore:
    embedder = make_embedder(cfg)
    dimension = cfg.get("embedding", {}).get("dimension")
    if embedder.dimension is not None:
        if dimension is not None and dimension != embedder.dimension:
            logger.warning(
                f"embedding.dimension={dimension} does not match model dimension "
                f"{embedder.dimension}; using the model's"
            )
        dimension = embedder.dimension
    return EmbeddingStore(embedder, make_vector_store(cfg), dimension=dimension)
