"""Core functionality for ragdesk."""

from .models import (
    Chunk,
    ChatTurn,
    EmbeddingRecord,
    GapRecord,
    GapType,
    ProgressEvent,
    ProjectInfo,
    QueryState,
    SimilarityResult,
    SourceType,
)
from .chunking import Chunker, SemanticChunker, SentenceChunker, chunk_content, fallback_chunk
from .embeddings import Embedder, HttpEmbedder, SentenceTransformersEmbedder, make_embedder

__all__ = [
    "Chunk",
    "ChatTurn",
    "EmbeddingRecord",
    "GapRecord",
    "GapType",
    "ProgressEvent",
    "ProjectInfo",
    "QueryState",
    "SimilarityResult",
    "SourceType",
    "Chunker",
    "SemanticChunker",
    "SentenceChunker",
    "chunk_content",
    "fallback_chunk",
    "Embedder",
    "HttpEmbedder",
    "SentenceTransformersEmbedder",
    "make_embedder",
]
