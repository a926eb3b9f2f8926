"""Issue vs. inquiry classification of knowledge-gap queries."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Pattern

from ..core.exceptions import ClassificationError
from ..core.models import GapType

logger = logging.getLogger(__name__)

ISSUE_KEYWORDS = (
    "error", "errors", "bug", "bugs", "broken", "crash", "crashes", "crashed",
    "fail", "fails", "failed", "failing", "failure", "issue", "problem",
    "not working", "doesn't work", "does not work", "nothing works", "won't",
    "can't", "cannot", "unable", "wrong", "stuck", "freezes", "frozen",
    "exception", "glitch", "incorrect", "missing", "slow",
)

INQUIRY_KEYWORDS = (
    "how", "what", "why", "when", "where", "which", "who", "can", "could",
    "explain", "tell me", "describe", "learn", "understand", "difference",
    "is there", "are there", "guide", "tutorial", "information", "example",
)

CLASSIFICATION_PROMPT = '''Analyze the following user message and determine if it's describing a problem/issue that needs fixing or if it's just asking for information (inquiry).

USER MESSAGE:
"""
{query}
"""

CLASSIFICATION CRITERIA:
- ISSUE: The message describes a problem, bug, error, malfunction, complaint, or something that needs fixing. The user is reporting something that's not working as expected or expressing frustration about functionality.
- INQUIRY: The message is asking for information, clarification, general knowledge, or how to do something. The user is seeking to learn or understand, not reporting a problem.

Examples of ISSUES:
- "The login button doesn't work"
- "I'm getting an error when trying to upload files"
- "The app crashes when I click on settings"

Examples of INQUIRIES:
- "How do I reset my password?"
- "What payment methods do you accept?"
- "Can you explain how feature X works?"

Respond with ONLY "ISSUE" or "INQUIRY" based on your analysis. Be precise in your classification.'''


def _compile(keywords: Iterable[str]) -> List[Pattern[str]]:
    # Apostrophes count as word characters so "can" does not match "can't"
    return [
        re.compile(r"(?<![\w'])" + re.escape(kw) + r"(?![\w'])", re.IGNORECASE)
        for kw in keywords
    ]


class GapClassifier:
    """Abstract base class for gap classification."""

    def classify(self, query: str) -> GapType:
        raise NotImplementedError


class KeywordGapClassifier(GapClassifier):
    """Tallies issue and inquiry keywords; ties go to inquiry."""

    def __init__(
        self,
        issue_keywords: Iterable[str] = ISSUE_KEYWORDS,
        inquiry_keywords: Iterable[str] = INQUIRY_KEYWORDS,
    ):
        self._issue = _compile(issue_keywords)
        self._inquiry = _compile(inquiry_keywords)

    @staticmethod
    def _score(patterns: List[Pattern[str]], text: str) -> int:
        return sum(1 for p in patterns if p.search(text))

    def scores(self, query: str) -> Dict[str, int]:
        text = query or ""
        return {
            "issue": self._score(self._issue, text),
            "inquiry": self._score(self._inquiry, text),
        }

    def classify(self, query: str) -> GapType:
        s = self.scores(query)
        return GapType.ISSUE if s["issue"] > s["inquiry"] else GapType.INQUIRY


class LLMGapClassifier(GapClassifier):
    """Asks the text oracle; any failure classifies as inquiry."""

    def __init__(self, client: Any):
        self.client = client

    def _ask(self, query: str) -> GapType:
        response = self.client.chat(
            system_prompt="",
            user_message=CLASSIFICATION_PROMPT.format(query=query),
            max_tokens=10,
            temperature=0.1,
        )
        if response.error:
            raise ClassificationError(f"Classifier model error: {response.error}")
        answer = (response.content or "").strip().upper()
        if "ISSUE" in answer:
            return GapType.ISSUE
        if "INQUIRY" not in answer:
            logger.warning(f"Classifier returned neither ISSUE nor INQUIRY: {answer!r}")
        return GapType.INQUIRY

    def classify(self, query: str) -> GapType:
        try:
            return self._ask(query)
        except Exception as e:
            logger.warning(f"Gap classification failed, defaulting to inquiry: {e}")
            return GapType.INQUIRY


def make_classifier(cfg: Dict, client: Any = None) -> GapClassifier:
    kind = str(cfg.get("gaps", {}).get("classifier", "keyword")).strip().lower()
    if kind == "llm":
        if client is None:
            raise SystemExit("gaps.classifier=llm requires an LLM client")
        return LLMGapClassifier(client)
    if kind != "keyword":
        raise SystemExit(f"Invalid gaps.classifier: {kind!r}")
    return KeywordGapClassifier()
