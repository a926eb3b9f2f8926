"""Embedding models for semantic search."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

import requests

from .exceptions import EmbeddingError, MalformedEmbeddingResponse

logger = logging.getLogger(__name__)


class Embedder:
    """Abstract base class for embedding models."""

    dimension: Optional[int] = None

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts into vectors."""
        raise NotImplementedError

    def embed_one(self, text: str) -> List[float]:
        """Embed a single text into a vector."""
        return self.embed([text])[0]


class SentenceTransformersEmbedder(Embedder):
    """Embedder using SentenceTransformers library."""

    def __init__(self, model_name: str) -> None:
        from sentence_transformers import SentenceTransformer  # type: ignore
        self.model = SentenceTransformer(model_name)
        self.dimension = self.model.get_sentence_embedding_dimension()

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed texts using SentenceTransformers model."""
        arr = self.model.encode(texts, normalize_embeddings=True, show_progress_bar=False)
        return [row.tolist() for row in arr]


class HttpEmbedder(Embedder):
    """Embedder calling a remote embedding endpoint.

    Request ``{"text": ...}``, response ``{"embedding": [...]}`` or ``{"error": ...}``.
    Batches fan out over a thread pool; results keep input order.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 20,
        max_workers: int = 4,
        dimension: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.max_workers = max_workers
        self.dimension = dimension
        self.headers = {"Content-Type": "application/json", **(headers or {})}

    def embed_one(self, text: str) -> List[float]:
        try:
            response = requests.post(
                self.url,
                headers=self.headers,
                json={"text": text},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedEmbeddingResponse(
                f"Embedding endpoint returned invalid JSON (status {response.status_code})"
            ) from e

        if not response.ok:
            detail = data.get("error") if isinstance(data, dict) else None
            raise EmbeddingError(
                f"Embedding endpoint error: {response.status_code}",
                {"error": detail} if detail else None,
            )
        if not isinstance(data, dict):
            raise MalformedEmbeddingResponse("Invalid embedding response format")
        if data.get("error"):
            raise EmbeddingError(str(data["error"]))

        embedding = data.get("embedding")
        if not isinstance(embedding, list):
            raise MalformedEmbeddingResponse("Invalid embedding response format")
        return embedding

    def embed(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        with ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(texts)))) as pool:
            return list(pool.map(self.embed_one, texts))


def make_embedder(cfg: Dict) -> Embedder:
    """Create embedder from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        Embedder instance

    Raises:
        SystemExit: If backend is invalid or dependencies are missing
    """
    emb_cfg = cfg.get("embedding", {})
    backend = str(emb_cfg.get("backend", "sentence_transformers")).strip().lower()

    if backend == "http":
        http_cfg = emb_cfg.get("http", {})
        if not http_cfg.get("url"):
            raise SystemExit("embedding.http.url is required for the http backend (set EMBEDDING_URL)")
        return HttpEmbedder(
            url=http_cfg["url"],
            timeout=http_cfg.get("timeout", 20),
            max_workers=http_cfg.get("max_workers", 4),
            dimension=emb_cfg.get("dimension"),
        )

    if backend != "sentence_transformers":
        raise SystemExit(f"Invalid embedding.backend: {backend!r}")

    model_name = emb_cfg.get("sentence_transformers_model", "sentence-transformers/all-mpnet-base-v2")
    try:
        return SentenceTransformersEmbedder(model_name)
    except Exception as e:
        raise SystemExit(
            "Could not load sentence-transformers. "
            "Run: pip install -U sentence-transformers"
        ) from e
