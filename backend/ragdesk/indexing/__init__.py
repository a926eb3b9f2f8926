"""Content ingestion for ragdesk."""

from .base import Indexer, ProgressCallback
from .indexer import ContentIndexer

__all__ = [
    "Indexer",
    "ProgressCallback",
    "ContentIndexer",
]
