"""Answer prompt assembly."""

from .base import PromptBuilder
from .builder import AnswerPromptBuilder, PromptConfig, count_tokens

__all__ = [
    "PromptBuilder",
    "AnswerPromptBuilder",
    "PromptConfig",
    "count_tokens",
]
