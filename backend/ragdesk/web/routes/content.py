"""Content routes: chunking, embedding, ingestion, search and deletion."""

import asyncio
import json
import logging
import threading
from typing import AsyncIterator, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from ...core import Chunker, SourceType
from ...core.chunking import DEFAULT_MAX_WORDS
from ...core.exceptions import IngestionCancelled, RagDeskError
from ...indexing import ContentIndexer
from ...storage import EmbeddingStore

from ..deps import get_chunker, get_embedding_store, get_indexer
from ..schemas import ChunkRequest, EmbedRequest, ProcessRequest, SearchRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _record_dict(record) -> Dict:
    return {"id": record.id, "content": record.content, "metadata": record.metadata}


@router.post("/chunk")
def chunk(request: ChunkRequest, chunker: Chunker = Depends(get_chunker)):
    if not request.content.strip():
        return _error(400, "Content is required")
    chunks = chunker.chunk(request.content, request.max_words_per_chunk or DEFAULT_MAX_WORDS)
    return {"chunks": [c.to_dict() for c in chunks]}


@router.post("/embed")
def embed(request: EmbedRequest, store: EmbeddingStore = Depends(get_embedding_store)):
    if not request.text.strip():
        return _error(400, "Text is required")
    try:
        return {"embedding": store.embed(request.text)}
    except RagDeskError as e:
        logger.error(f"Error generating embedding: {e}")
        return _error(500, e.message)


@router.post("/process")
def process(request: ProcessRequest, indexer: ContentIndexer = Depends(get_indexer)):
    try:
        records = indexer.process_content(
            request.content,
            source_id=request.source_id,
            source_type=request.source_type,
            project_id=request.project_id,
            user_id=request.user_id,
            original_title=request.original_title,
            replace=request.replace,
        )
    except RagDeskError as e:
        logger.error(f"Error processing {request.source_type.value}:{request.source_id}: {e}")
        return _error(500, e.message)
    return {"records": [_record_dict(r) for r in records], "count": len(records)}


async def stream_processing(indexer: ContentIndexer, request: ProcessRequest) -> AsyncIterator[Dict]:
    """Run ingestion in a worker thread and relay its progress as SSE events.

    Ends with a ``complete`` or ``error`` event. If the consumer goes away
    the cancel event is set and the worker stops before its next chunk.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    cancel_event = threading.Event()

    def publish(event: str, data: Dict) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, (event, data))

    def work() -> None:
        try:
            records = indexer.process_content(
                request.content,
                source_id=request.source_id,
                source_type=request.source_type,
                project_id=request.project_id,
                user_id=request.user_id,
                original_title=request.original_title,
                replace=request.replace,
                on_progress=lambda ev: publish("progress", ev.to_dict()),
                cancel_event=cancel_event,
            )
            publish("complete", {"records": [_record_dict(r) for r in records], "count": len(records)})
        except IngestionCancelled as e:
            logger.info(f"Ingestion of {request.source_id} cancelled with {len(e.partial_results)} records stored")
            publish("error", {"error": e.message, "stored": len(e.partial_results)})
        except RagDeskError as e:
            logger.error(f"Error processing {request.source_type.value}:{request.source_id}: {e}")
            publish("error", {"error": e.message, "stored": len(e.partial_results)})
        except Exception as e:
            logger.exception(f"Unexpected error processing {request.source_id}")
            publish("error", {"error": str(e), "stored": 0})

    worker = loop.run_in_executor(None, work)
    try:
        while True:
            event, data = await queue.get()
            yield {"event": event, "data": json.dumps(data)}
            if event != "progress":
                break
    finally:
        cancel_event.set()
        await asyncio.shield(worker)


@router.post("/process/stream")
async def process_stream(request: ProcessRequest, indexer: ContentIndexer = Depends(get_indexer)):
    return EventSourceResponse(
        stream_processing(indexer, request),
        headers={"X-Accel-Buffering": "no", "Cache-Control": "no-cache"},
    )


@router.post("/search")
def search(request: SearchRequest, indexer: ContentIndexer = Depends(get_indexer)):
    if not request.query.strip():
        return _error(400, "Query is required")
    try:
        results = indexer.search_content(
            request.query,
            project_id=request.project_id,
            user_id=request.user_id,
            threshold=request.threshold,
            limit=request.limit,
            source_type=request.source_type,
        )
    except RagDeskError as e:
        logger.error(f"Error searching content: {e}")
        return _error(500, e.message)
    return {"results": [r.to_dict() for r in results]}


@router.delete("/{source_type}/{source_id}")
def delete(source_type: SourceType, source_id: str, indexer: ContentIndexer = Depends(get_indexer)):
    try:
        indexer.delete_content(source_id, source_type)
    except RagDeskError as e:
        logger.error(f"Error deleting embeddings for {source_type.value}:{source_id}: {e}")
        return _error(500, e.message)
    return {"success": True}
