"""PromptBuilder Interface."""

from __future__ import annotations

from typing import List

from ..core import ProjectInfo, SimilarityResult


class PromptBuilder:
    """Abstract base class for prompt building."""

    def build_prompt(
        self,
        query: str,
        hits: List[SimilarityResult],
        project: ProjectInfo,
    ) -> str:
        """Build the system prompt for answering a chat query.

        Args:
            query: User query
            hits: Retrieved context, closest first
            project: Project the chat belongs to

        Returns:
            System prompt string
        """
        raise NotImplementedError
