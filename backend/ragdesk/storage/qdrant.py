"""Qdrant vector database backend."""

from __future__ import annotations

import logging
from typing import List, Optional

from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointStruct,
    VectorParams,
)

from ..core.exceptions import StorageError
from ..core.models import EmbeddingRecord, SimilarityResult, SourceType
from .base import VectorStore

logger = logging.getLogger(__name__)

# Identical vectors can score a hair under 1.0 in float32
SCORE_TOLERANCE = 1e-6


def _build_filter(**conditions) -> Optional[Filter]:
    must = [
        FieldCondition(key=key, match=MatchValue(value=value))
        for key, value in conditions.items()
        if value is not None
    ]
    return Filter(must=must) if must else None


class QdrantVectorStore(VectorStore):
    """Single-collection store; tenants and sources are payload filters."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6333,
        collection_name: str = "embeddings",
        location: Optional[str] = None,
        client: Optional[QdrantClient] = None,
    ):
        self.host = host
        self.port = port
        self.collection_name = collection_name
        if client is not None:
            self.client = client
        elif location:
            self.client = QdrantClient(location=location)
        else:
            self.client = QdrantClient(host=host, port=port)

    def _collection_exists(self) -> bool:
        return self.client.collection_exists(collection_name=self.collection_name)

    def _get_collection_vector_dim(self) -> Optional[int]:
        if not self._collection_exists():
            return None
        collection_info = self.client.get_collection(collection_name=self.collection_name)
        return collection_info.config.params.vectors.size

    def _ensure_collection(self, vector_dim: int) -> None:
        existing_dim = self._get_collection_vector_dim()
        if existing_dim is None:
            self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=vector_dim, distance=Distance.COSINE),
            )
            logger.info(f"Created collection '{self.collection_name}' (dim={vector_dim})")
        elif existing_dim != vector_dim:
            raise StorageError(
                f"Collection '{self.collection_name}' exists with dimension {existing_dim}, "
                f"but record has dimension {vector_dim}. Re-embed all records after changing the model.",
                {"expected": existing_dim, "actual": vector_dim},
            )

    def insert(self, record: EmbeddingRecord) -> None:
        payload = {
            "content": record.content,
            "metadata": record.metadata,
            "source_type": record.source_type.value,
            "source_id": record.source_id,
            "project_id": record.project_id,
            "user_id": record.user_id,
            "created_at": record.created_at.isoformat(),
            "updated_at": record.updated_at.isoformat(),
        }
        try:
            self._ensure_collection(vector_dim=len(record.embedding))
            self.client.upsert(
                collection_name=self.collection_name,
                points=[PointStruct(id=record.id, vector=record.embedding, payload=payload)],
            )
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Error storing record {record.id} in collection '{self.collection_name}': {e}")
            raise StorageError(f"Failed to store record {record.id}: {e}") from e
        logger.debug(f"Stored record {record.id} for source {record.source_type.value}:{record.source_id}")

    def search(
        self,
        query_vector: List[float],
        threshold: float,
        limit: int,
        project_id: str,
        user_id: Optional[str] = None,
        source_type: Optional[SourceType] = None,
    ) -> List[SimilarityResult]:
        """Search using Qdrant's vector search."""
        search_filter = _build_filter(
            project_id=project_id,
            user_id=user_id,
            source_type=source_type.value if source_type else None,
        )
        score_threshold = threshold - SCORE_TOLERANCE if threshold > 0 else None

        try:
            if not self._collection_exists():
                return []
            results = self.client.query_points(
                collection_name=self.collection_name,
                query=query_vector,
                limit=limit,
                query_filter=search_filter,
                score_threshold=score_threshold,
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            logger.error(f"Error searching in collection '{self.collection_name}': {e}")
            raise StorageError(f"Similarity search failed: {e}") from e

        hits = []
        for point in results.points:
            payload = point.payload
            hits.append(
                SimilarityResult(
                    id=str(point.id),
                    content=payload["content"],
                    similarity=min(1.0, max(0.0, float(point.score))),
                    metadata=payload.get("metadata") or {},
                    source_type=SourceType(payload["source_type"]),
                    source_id=payload["source_id"],
                )
            )
        return hits

    def delete_by_source(self, source_id: str, source_type: SourceType) -> None:
        try:
            if not self._collection_exists():
                return
            self.client.delete(
                collection_name=self.collection_name,
                points_selector=_build_filter(source_id=source_id, source_type=source_type.value),
            )
            logger.info(f"Deleted embeddings for source {source_type.value}:{source_id}")
        except Exception as e:
            logger.error(f"Error deleting embeddings for {source_type.value}:{source_id}: {e}")
            raise StorageError(f"Failed to delete embeddings: {e}") from e

    def count(
        self,
        project_id: Optional[str] = None,
        user_id: Optional[str] = None,
        source_id: Optional[str] = None,
        source_type: Optional[SourceType] = None,
    ) -> int:
        """Count records in the collection."""
        try:
            if not self._collection_exists():
                return 0
            result = self.client.count(
                collection_name=self.collection_name,
                count_filter=_build_filter(
                    project_id=project_id,
                    user_id=user_id,
                    source_id=source_id,
                    source_type=source_type.value if source_type else None,
                ),
                exact=True,
            )
        except Exception as e:
            logger.error(f"Error counting records in collection '{self.collection_name}': {e}")
            raise StorageError(f"Failed to count embeddings: {e}") from e
        return result.count

    def exists(self) -> bool:
        """Check if collection exists and has data."""
        try:
            return self._collection_exists() and self.count() > 0
        except Exception:
            return False
