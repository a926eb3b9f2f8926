"""Decides whether an unanswered query is worth logging as a knowledge gap.

Gates run in order and the first rejection wins. The chain favours precision:
a missed gap is cheaper than a ticket opened for small talk.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Callable, List, Optional, Tuple

MIN_QUERY_LENGTH = 15
MIN_WORD_COUNT = 4

GREETINGS = frozenset({
    "hi", "hey", "hello", "test", "hola", "yo", "sup", "howdy", "greetings",
    "good morning", "good afternoon", "good evening", "thanks", "thank you",
    "help", "help me", "can you help", "please help", "i need help",
    "what can you do", "what do you do",
})

GENERIC_HELP = re.compile(r"^(can you|could you|would you|will you|please)\s+(help|assist)", re.IGNORECASE)

RESPONSE_ECHOES = (
    re.compile(
        r"^(none of this|this (didn't|did not) help|not helpful|can('t| not) help|"
        r"forward the issue|contact support|talk to someone)",
        re.IGNORECASE,
    ),
    re.compile(r"^i have (an issue|a problem|a question)(\s+with|\s+about)?(\s+this)?\.?$", re.IGNORECASE),
    re.compile(r"^i('m| am) having (an issue|a problem|a question)(\s+with|\s+about)?(\s+this)?\.?$", re.IGNORECASE),
)


@dataclasses.dataclass(frozen=True)
class FilterVerdict:
    substantial: bool
    rejected_by: Optional[str] = None

    def __bool__(self) -> bool:
        return self.substantial


def _too_short(query: str) -> bool:
    return len(query) < MIN_QUERY_LENGTH


def _too_few_words(query: str) -> bool:
    return len(query.split()) < MIN_WORD_COUNT


def _is_greeting(query: str) -> bool:
    return query.lower() in GREETINGS


def _is_generic_help(query: str) -> bool:
    return GENERIC_HELP.match(query) is not None


def _is_response_echo(query: str) -> bool:
    return any(p.match(query) for p in RESPONSE_ECHOES)


class GapFilter:
    """Ordered predicate chain over the raw query string."""

    GATES: List[Tuple[str, Callable[[str], bool]]] = [
        ("length", _too_short),
        ("word_count", _too_few_words),
        ("greeting", _is_greeting),
        ("generic_help", _is_generic_help),
        ("response_echo", _is_response_echo),
    ]

    def evaluate(self, query: str) -> FilterVerdict:
        text = (query or "").strip()
        for name, rejects in self.GATES:
            if rejects(text):
                return FilterVerdict(substantial=False, rejected_by=name)
        return FilterVerdict(substantial=True)

    def is_substantial(self, query: str) -> bool:
        return self.evaluate(query).substantial
