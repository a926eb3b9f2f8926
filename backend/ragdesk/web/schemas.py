from pydantic import BaseModel, Field
from typing import Optional, List, Literal

from ..core import SourceType


class ChunkRequest(BaseModel):
    content: str
    max_words_per_chunk: Optional[int] = Field(default=None, alias="maxWordsPerChunk", gt=0)

    class Config:
        populate_by_name = True


class EmbedRequest(BaseModel):
    text: str


class ProcessRequest(BaseModel):
    content: str
    source_id: str = Field(alias="sourceId")
    source_type: SourceType = Field(alias="sourceType")
    project_id: str = Field(alias="projectId")
    user_id: str = Field(alias="userId")
    original_title: Optional[str] = Field(default=None, alias="originalTitle")
    replace: bool = False

    class Config:
        populate_by_name = True


class SearchRequest(BaseModel):
    query: str
    project_id: str = Field(alias="projectId")
    user_id: str = Field(alias="userId")
    threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    limit: int = 10
    source_type: Optional[SourceType] = Field(default=None, alias="sourceType")

    class Config:
        populate_by_name = True


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    query: str
    chat_history: List[ChatMessage] = Field(default_factory=list, alias="chatHistory")
    project_slug: str = Field(alias="projectSlug")
    threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)

    class Config:
        populate_by_name = True
