"""Text-completion oracle client."""

from .client import ChatCompletionClient, LLMConfig, LLMResponse, create_client

__all__ = [
    "ChatCompletionClient",
    "LLMConfig",
    "LLMResponse",
    "create_client",
]
