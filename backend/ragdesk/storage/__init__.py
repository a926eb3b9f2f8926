"""Vector storage and the embedding store built on it."""

from .base import VectorStore
from .qdrant import QdrantVectorStore
from .factory import make_vector_store
from .embedding_store import EmbeddingStore, make_embedding_store

__all__ = [
    "VectorStore",
    "QdrantVectorStore",
    "make_vector_store",
    "EmbeddingStore",
    "make_embedding_store",
]
