"""Query-side retrieval."""

from .base import Searcher
from .searcher import DefaultSearcher, SUFFICIENCY_THRESHOLD, format_context, is_sufficient

__all__ = [
    "Searcher",
    "DefaultSearcher",
    "SUFFICIENCY_THRESHOLD",
    "format_context",
    "is_sufficient",
]
