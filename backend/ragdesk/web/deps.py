"""Shared service instances for the API routes."""

import logging
from functools import lru_cache
from typing import Dict, Optional

from fastapi import HTTPException

from ..chat import QueryOrchestrator
from ..config import load_config
from ..core import SemanticChunker
from ..gaps import GapFilter, SqlGapRecorder, make_classifier
from ..indexing import ContentIndexer
from ..llm import ChatCompletionClient, create_client
from ..prompt import AnswerPromptBuilder, PromptConfig
from ..search import DefaultSearcher
from ..storage import EmbeddingStore, make_embedding_store

from .database import SessionLocal

logger = logging.getLogger(__name__)


@lru_cache()
def get_settings() -> Dict:
    return load_config()


@lru_cache()
def get_embedding_store() -> EmbeddingStore:
    return make_embedding_store(get_settings())


@lru_cache()
def get_llm_client() -> Optional[ChatCompletionClient]:
    try:
        return create_client(get_settings())
    except ValueError as e:
        logger.warning(f"LLM client not configured: {e}")
        return None


def get_chunker() -> SemanticChunker:
    cfg = get_settings()
    client = get_llm_client() if cfg["chunking"].get("use_llm", True) else None
    return SemanticChunker(client=client)


def get_indexer() -> ContentIndexer:
    cfg = get_settings()
    return ContentIndexer(
        get_chunker(),
        get_embedding_store(),
        max_words=int(cfg["chunking"]["max_words_per_chunk"]),
    )


def get_orchestrator() -> QueryOrchestrator:
    cfg = get_settings()
    client = get_llm_client()
    if client is None:
        raise HTTPException(status_code=503, detail="LLM client not configured")

    chat_cfg = cfg["chat"]
    return QueryOrchestrator(
        searcher=DefaultSearcher(get_embedding_store()),
        llm_client=client,
        gap_filter=GapFilter(),
        classifier=make_classifier(cfg, client=client),
        recorder=SqlGapRecorder(SessionLocal),
        prompt_builder=AnswerPromptBuilder(PromptConfig(max_context_tokens=int(chat_cfg["max_context_tokens"]))),
        threshold=float(chat_cfg["threshold"]),
        match_count=int(chat_cfg["match_count"]),
        sufficiency_threshold=float(chat_cfg["sufficiency_threshold"]),
        gaps_enabled=bool(cfg["gaps"]["enabled"]),
    )
