"""Knowledge-gap detection: filtering, classification and persistence."""

from .filter import FilterVerdict, GapFilter
from .classifier import GapClassifier, KeywordGapClassifier, LLMGapClassifier, make_classifier
from .recorder import GapRecorder, SqlGapRecorder, build_gap_title

__all__ = [
    "FilterVerdict",
    "GapFilter",
    "GapClassifier",
    "KeywordGapClassifier",
    "LLMGapClassifier",
    "make_classifier",
    "GapRecorder",
    "SqlGapRecorder",
    "build_gap_title",
]
