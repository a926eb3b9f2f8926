"""LLM prompt building for knowledge-base answers."""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import tiktoken

from ..core import ProjectInfo, SimilarityResult
from ..search import format_context
from .base import PromptBuilder

logger = logging.getLogger(__name__)

NO_CONTEXT = "No specific context available for this query."


# ----------------------------
# Token estimation
# ----------------------------

@functools.lru_cache(maxsize=None)
def _encoding(name: str = "cl100k_base"):
    return tiktoken.get_encoding(name)


def count_tokens(text: str) -> int:
    """Count tokens in text using tiktoken."""
    return len(_encoding().encode(text))


# ----------------------------
# Prompt building
# ----------------------------

@dataclass(frozen=True)
class PromptConfig:
    max_context_tokens: int = 6000


def _build_header(project: ProjectInfo) -> str:
    lines: List[str] = []
    lines.append(f'You are a helpful AI assistant for the project "{project.name}".')
    lines.append("Your purpose is to answer questions based on the provided context and project information.")
    lines.append("")
    lines.append("PROJECT INFORMATION:")
    lines.append(f"Name: {project.name}")
    lines.append(f"Description: {project.description or ''}")
    if project.plan:
        lines.append(f"Plan: {project.plan}")
    return "\n".join(lines)


def _build_footer() -> str:
    return (
        "Please provide a helpful, accurate, and concise response based on the context. "
        "If the context doesn't contain relevant information to answer the question, "
        "acknowledge that you don't have enough information but try to be helpful based on "
        "general knowledge related to the project's domain. Do not make up specific "
        "information about the project that isn't provided."
    )


def pack_context(
    blocks: List[str],
    max_tokens: int,
    counter: Callable[[str], int],
) -> Tuple[List[str], int]:
    """Keep blocks in order until the token budget is spent."""
    kept: List[str] = []
    used = 0
    for block in blocks:
        tokens = counter(block)
        if used + tokens > max_tokens:
            logger.debug(f"Context budget reached: kept {len(kept)}/{len(blocks)} blocks ({used} tokens)")
            break
        kept.append(block)
        used += tokens
    return kept, used


class AnswerPromptBuilder(PromptBuilder):
    """Default implementation of PromptBuilder."""

    def __init__(
        self,
        config: Optional[PromptConfig] = None,
        token_counter: Optional[Callable[[str], int]] = None,
    ):
        self.config = config or PromptConfig()
        self.count_tokens = token_counter or count_tokens

    def build_prompt(
        self,
        query: str,
        hits: List[SimilarityResult],
        project: ProjectInfo,
    ) -> str:
        blocks, _ = pack_context(format_context(hits), self.config.max_context_tokens, self.count_tokens)
        context = "\n\n".join(blocks)

        parts = [
            _build_header(project),
            "",
            "CONTEXT FROM KNOWLEDGE BASE:",
            context or NO_CONTEXT,
            "",
            "USER QUERY:",
            query,
            "",
            _build_footer(),
        ]
        return "\n".join(parts)
