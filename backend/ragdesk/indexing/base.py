"""Indexer Interface."""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

from ..core import EmbeddingRecord, ProgressEvent, SourceType

ProgressCallback = Callable[[ProgressEvent], None]


class Indexer:
    """Abstract base class for content indexing."""

    def process_content(
        self,
        content: str,
        source_id: str,
        source_type: SourceType,
        project_id: str,
        user_id: str,
        original_title: Optional[str] = None,
        replace: bool = False,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[EmbeddingRecord]:
        raise NotImplementedError

    def delete_content(
        self,
        source_id: str,
        source_type: SourceType,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        raise NotImplementedError
