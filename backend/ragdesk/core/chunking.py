"""Semantic chunking of free-text content, with a deterministic sentence-based fallback."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional

from .exceptions import ChunkingError, MalformedChunkingResponse
from .models import Chunk

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORDS = 75
MAX_KEYWORDS = 5

# End-of-sentence punctuation followed by whitespace
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")

STOP_WORDS = frozenset({
    "this", "that", "with", "have", "will", "been", "from", "they", "know",
    "want", "good", "much", "some", "time", "very", "when", "come", "here",
    "just", "like", "long", "make", "many", "over", "such", "take", "than",
    "them", "well", "were",
})

CHUNKING_PROMPT = """You are an expert content analyzer. Your task is to semantically chunk the following content into meaningful segments.

REQUIREMENTS:
- Each chunk should be semantically coherent and meaningful on its own
- Maximum {max_words} words per chunk (approximately 2-5 sentences)
- Preserve important context and relationships
- Each chunk should represent a complete thought or concept
- Provide a brief summary and up to 5 keywords for each chunk
- Split on semantic boundaries like sentences, paragraphs, or list items
- Do not break in the middle of a sentence if possible

CONTENT TO CHUNK:
{content}

Please return the result as a JSON array with the following structure:
[
  {{
    "content": "The actual chunk content",
    "summary": "Brief summary of this chunk",
    "keywords": ["keyword1", "keyword2", "keyword3"],
    "chunkIndex": 1,
    "totalChunks": 3
  }}
]

Ensure the JSON is valid and properly formatted. Return ONLY the JSON array, no additional text."""


def count_words(text: str) -> int:
    return len(text.split())


def split_sentences(content: str) -> List[str]:
    """Split content on sentence boundaries, dropping empty pieces."""
    return [s for s in SENTENCE_BOUNDARY.split(content.strip()) if s.strip()]


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """Pick the first distinct meaningful words of a text.

    Words are lower-cased and stripped of punctuation; words of three letters or
    fewer and stop words are ignored.
    """
    words = re.sub(r"[^\w\s]", " ", text.lower()).split()
    keywords: List[str] = []
    seen: set[str] = set()
    for word in words:
        if len(word) <= 3 or word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        keywords.append(word)
        if len(keywords) == limit:
            break
    return keywords


def fallback_chunk(content: str, max_words: int = DEFAULT_MAX_WORDS) -> List[Chunk]:
    """Greedy sentence packing.

    Sentences are accumulated until the next one would push the chunk past
    ``max_words``. A sentence is never split, so a single sentence longer than
    ``max_words`` becomes a chunk of its own.
    """
    groups: List[List[str]] = []
    current: List[str] = []
    word_count = 0

    for sentence in split_sentences(content):
        sentence_words = count_words(sentence)
        if current and word_count + sentence_words > max_words:
            groups.append(current)
            current = []
            word_count = 0
        current.append(sentence)
        word_count += sentence_words

    if current:
        groups.append(current)

    total = len(groups)
    chunks = []
    for i, group in enumerate(groups, start=1):
        text = " ".join(group)
        chunks.append(
            Chunk(
                content=text,
                summary=f"Chunk {i} of content",
                keywords=extract_keywords(text),
                chunk_index=i,
                total_chunks=total,
            )
        )
    return chunks


def parse_chunk_array(response_text: str) -> List[dict]:
    """Recover the JSON array of chunks from a model response.

    The whole text is tried first; otherwise the first position that decodes
    to a JSON array wins, which tolerates prose around the payload.
    """
    text = (response_text or "").strip()
    if not text:
        raise MalformedChunkingResponse("Empty chunking response")

    try:
        parsed = json.loads(text)
        if isinstance(parsed, list):
            return parsed
    except json.JSONDecodeError:
        pass

    decoder = json.JSONDecoder()
    start = text.find("[")
    while start != -1:
        try:
            parsed, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parsed
        start = text.find("[", start + 1)

    raise MalformedChunkingResponse("No valid JSON array found in chunking response")


def normalize_chunks(items: List[Any], max_words: Optional[int] = None) -> List[Chunk]:
    """Validate raw chunk dicts and reassign indices over the full sequence.

    With ``max_words`` set, a chunk over the cap is rejected unless it is a
    single sentence, which the sentence packer would not split either.
    """
    cleaned = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedChunkingResponse(f"Chunk is not an object: {item!r}")
        content = item.get("content")
        if not isinstance(content, str) or not content.strip():
            raise MalformedChunkingResponse("Chunk without content")
        if max_words is not None:
            words = count_words(content)
            if words > max_words and len(split_sentences(content)) > 1:
                raise MalformedChunkingResponse(
                    f"Chunk has {words} words, over the {max_words} word cap",
                    {"max_words": max_words, "actual": words},
                )
        keywords = item.get("keywords") or []
        if not isinstance(keywords, list):
            keywords = []
        cleaned.append((
            content.strip(),
            str(item.get("summary") or ""),
            [str(k) for k in keywords][:MAX_KEYWORDS],
        ))

    if not cleaned:
        raise MalformedChunkingResponse("Chunking response contained no chunks")

    total = len(cleaned)
    return [
        Chunk(content=c, summary=s, keywords=k, chunk_index=i, total_chunks=total)
        for i, (c, s, k) in enumerate(cleaned, start=1)
    ]


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------

class Chunker:
    """Abstract base class for content chunking."""

    def chunk(self, content: str, max_words_per_chunk: int = DEFAULT_MAX_WORDS) -> List[Chunk]:
        """Split content into chunks.

        Args:
            content: Free text to split
            max_words_per_chunk: Word cap per chunk

        Returns:
            Chunks numbered 1..N, all carrying total_chunks == N
        """
        raise NotImplementedError


class SentenceChunker(Chunker):
    """Deterministic chunker; always succeeds."""

    def chunk(self, content: str, max_words_per_chunk: int = DEFAULT_MAX_WORDS) -> List[Chunk]:
        return fallback_chunk(content, max_words_per_chunk)


class SemanticChunker(Chunker):
    """Model-assisted chunker that falls back to sentence packing on any failure."""

    def __init__(self, client: Optional[Any] = None):
        self.client = client

    def chunk(self, content: str, max_words_per_chunk: int = DEFAULT_MAX_WORDS) -> List[Chunk]:
        if not content or not content.strip():
            return []

        if self.client is not None:
            try:
                chunks = self._chunk_with_model(content, max_words_per_chunk)
                logger.debug(f"Model produced {len(chunks)} chunks")
                return chunks
            except ChunkingError as e:
                logger.warning(f"Semantic chunking failed, falling back to sentence chunking: {e}")
            except Exception as e:
                logger.warning(f"Unexpected chunking failure, falling back to sentence chunking: {e}")

        return fallback_chunk(content, max_words_per_chunk)

    def _chunk_with_model(self, content: str, max_words: int) -> List[Chunk]:
        prompt = CHUNKING_PROMPT.format(max_words=max_words, content=content)
        response = self.client.chat(system_prompt="", user_message=prompt, temperature=0.1)
        if response.error:
            raise ChunkingError(f"Chunking model error: {response.error}")
        return normalize_chunks(parse_chunk_array(response.content or ""), max_words=max_words)


def chunk_content(content: str, max_words_per_chunk: int = DEFAULT_MAX_WORDS, client: Optional[Any] = None) -> List[Chunk]:
    """Chunk content (Functional Wrapper)."""
    chunker = SemanticChunker(client=client)
    return chunker.chunk(content, max_words_per_chunk)
