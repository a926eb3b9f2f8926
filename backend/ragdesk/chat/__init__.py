"""Chat answering over a project's knowledge base."""

from .orchestrator import ChatResult, QueryOrchestrator, split_history

__all__ = ["ChatResult", "QueryOrchestrator", "split_history"]
