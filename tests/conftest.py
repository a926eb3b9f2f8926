"""
Shared test fixtures for the ragdesk test suite.

Provides: deterministic fake embedder, scripted fake LLM client, in-memory
Qdrant store, in-memory SQLite database with a seeded project.
No network access is needed by any test.
"""

import hashlib
import os

# Must be set before ragdesk.web.database is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("LLM_API_KEY", None)
os.environ.pop("HF_TOKEN", None)

import pytest
from qdrant_client import QdrantClient

from ragdesk.core import Embedder, ProjectInfo
from ragdesk.llm import LLMResponse
from ragdesk.storage import EmbeddingStore, QdrantVectorStore

DIMENSION = 4


class FakeEmbedder(Embedder):
    """Deterministic embedder: explicit vectors by text, hashed otherwise."""

    def __init__(self, vectors=None, dimension=DIMENSION):
        self.vectors = dict(vectors or {})
        self.dimension = dimension
        self.fail_on = set()
        self.calls = []

    def embed_one(self, text):
        self.calls.append(text)
        if text in self.fail_on:
            raise RuntimeError("model unavailable")
        if text in self.vectors:
            return list(self.vectors[text])
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [b / 255.0 + 0.01 for b in digest[: self.dimension]]

    def embed(self, texts):
        return [self.embed_one(t) for t in texts]


class FakeLLMClient:
    """Returns scripted responses in order and records every call.

    A script entry may be a string (successful answer), an LLMResponse,
    or an exception instance to raise.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def chat(self, system_prompt, user_message, conversation_history=None, **kwargs):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_message": user_message,
            "conversation_history": conversation_history,
            **kwargs,
        })
        if not self.responses:
            return LLMResponse(finish_reason="error", time_taken=0.0, error="no scripted response")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, LLMResponse):
            return item
        return LLMResponse(content=item, finish_reason="stop", time_taken=0.0)


def llm_error(message="upstream unavailable"):
    return LLMResponse(finish_reason="error", time_taken=0.0, error=message)


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def vector_store():
    """Embedded Qdrant, one fresh instance per test."""
    store = QdrantVectorStore(client=QdrantClient(location=":memory:"))
    yield store
    store.client.close()


@pytest.fixture
def embedding_store(fake_embedder, vector_store):
    return EmbeddingStore(fake_embedder, vector_store)


@pytest.fixture
def db_session_factory():
    """
    Fresh schema on the shared in-memory SQLite engine.

    Yields:
        sessionmaker bound to the test engine
    """
    from ragdesk.web.database import Base, SessionLocal, engine
    from ragdesk.web import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield SessionLocal
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def project(db_session_factory):
    """A project row plus the ProjectInfo the orchestrator works with."""
    from ragdesk.web.models import Project

    db = db_session_factory()
    try:
        row = Project(
            name="Acme Widgets",
            description="Widgets for everyone",
            plan="pro",
            slug="acme-widgets",
            custom_slug="acme",
            user_id="owner-1",
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return ProjectInfo(
            id=row.id,
            name=row.name,
            user_id=row.user_id,
            description=row.description,
            plan=row.plan,
        )
    finally:
        db.close()
