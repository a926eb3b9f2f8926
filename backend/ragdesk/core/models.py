"""Data models for ragdesk."""

from __future__ import annotations

import dataclasses
import datetime as _dt
import enum
from typing import Any, Dict, List, Optional


class SourceType(str, enum.Enum):
    """Kind of entity an embedding was produced from."""

    CONTEXT = "context"
    ISSUE = "issue"
    INQUIRY = "inquiry"
    PRODUCT = "product"


class GapType(str, enum.Enum):
    ISSUE = "issue"
    INQUIRY = "inquiry"


class QueryState(str, enum.Enum):
    """States a chat query moves through on its way to an answer."""

    RETRIEVE = "retrieve"
    SUFFICIENT = "sufficient"
    INSUFFICIENT = "insufficient"
    FILTERED_OUT = "filtered_out"
    CLASSIFY = "classify"
    ISSUE = "issue"
    INQUIRY = "inquiry"
    LOGGED = "logged"


@dataclasses.dataclass(frozen=True)
class Chunk:
    """A bounded, self-contained segment of submitted content."""

    content: str
    summary: str
    keywords: List[str]
    chunk_index: int
    total_chunks: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "summary": self.summary,
            "keywords": list(self.keywords),
            "chunkIndex": self.chunk_index,
            "totalChunks": self.total_chunks,
        }


@dataclasses.dataclass
class EmbeddingRecord:
    """A stored chunk embedding, owned by one tenant (project + user)."""

    id: str
    content: str
    embedding: List[float]
    metadata: Dict[str, Any]
    source_type: SourceType
    source_id: str
    project_id: str
    user_id: str
    created_at: _dt.datetime
    updated_at: _dt.datetime


@dataclasses.dataclass(frozen=True)
class SimilarityResult:
    id: str
    content: str
    similarity: float
    metadata: Dict[str, Any]
    source_type: SourceType
    source_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "similarity": self.similarity,
            "metadata": dict(self.metadata),
            "sourceType": self.source_type.value,
            "sourceId": self.source_id,
        }


@dataclasses.dataclass(frozen=True)
class GapRecord:
    """An issue or inquiry logged for a query the knowledge base could not answer."""

    id: str
    gap_type: GapType
    title: str
    description: str
    tags: List[str]
    project_id: str
    user_id: str
    severity: Optional[str] = None
    status: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ChatTurn:
    role: str  # user | assistant
    content: str
    timestamp: Optional[_dt.datetime] = None


@dataclasses.dataclass(frozen=True)
class ProjectInfo:
    id: str
    name: str
    user_id: str
    description: str = ""
    plan: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ProgressEvent:
    """Snapshot of pipeline progress, emitted to an optional callback."""

    step: str
    progress: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"step": self.step, "progress": self.progress, "message": self.message}
