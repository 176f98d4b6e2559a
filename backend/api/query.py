"""POST /api/query[...] — natural language → SQL → executed display configs.

The /stream variants write NDJSON lines:
  {"type": "progress", "message": ...}   zero or more
  {"type": "result", "data": {...}}      or
  {"type": "error", "error": ..., "status": ...}
"""
import json
import logging
import queue
import threading
from typing import Any, Callable, Iterator

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import StreamingResponse

from api.deps import Services, get_services, resolve_connection_string, status_for, to_http_error
from core.errors import AppError
from core.progress import ProgressEmitter
from models.query import FollowupRequest, QueryRequest, QueryResponse

router = APIRouter()
logger = logging.getLogger(__name__)

_DONE = object()


def _answer(services: Services, req: QueryRequest, connection_string: str, progress: ProgressEmitter) -> QueryResponse:
    result = services.generator.generate_sql(req.query, connection_string, progress)
    displays = services.executor.execute_displays(result, connection_string, progress)
    return QueryResponse(
        query=req.query,
        display=jsonable_encoder([d.to_payload() for d in displays]),
        explanation=result.explanation,
    )


def _answer_followup(
    services: Services, req: FollowupRequest, connection_string: str, progress: ProgressEmitter,
) -> QueryResponse:
    result = services.generator.generate_followup_sql(
        req.followup_instruction, req.previous_context, connection_string, progress,
    )
    displays = services.executor.execute_displays(result, connection_string, progress)
    return QueryResponse(
        query=req.followup_instruction,
        original_query=req.previous_context.query,
        display=jsonable_encoder([d.to_payload() for d in displays]),
        explanation=result.explanation,
    )


def _stream(work: Callable[[ProgressEmitter], QueryResponse], start_message: str) -> Iterator[str]:
    """Run work on a worker thread and relay its progress events as NDJSON lines."""
    events: "queue.Queue[Any]" = queue.Queue()
    progress = ProgressEmitter().subscribe(
        lambda e: events.put({"type": "progress", "message": e.message})
    )

    def worker() -> None:
        try:
            progress.emit("start", start_message)
            events.put({"type": "result", "data": work(progress).model_dump()})
        except AppError as e:
            events.put({"type": "error", "error": str(e), "status": status_for(e)})
        except Exception as e:
            logger.exception("Error processing streaming query")
            events.put({"type": "error", "error": str(e), "status": 500})
        finally:
            events.put(_DONE)

    threading.Thread(target=worker, daemon=True).start()
    while True:
        item = events.get()
        if item is _DONE:
            return
        yield json.dumps(jsonable_encoder(item)) + "\n"


@router.post("/query", response_model=QueryResponse)
def query(req: QueryRequest, services: Services = Depends(get_services)):
    connection_string = resolve_connection_string(req.connection_string)
    try:
        return _answer(services, req, connection_string, ProgressEmitter())
    except AppError as e:
        raise to_http_error(e)


@router.post("/query/stream")
def query_stream(req: QueryRequest, services: Services = Depends(get_services)):
    connection_string = resolve_connection_string(req.connection_string)
    return StreamingResponse(
        _stream(lambda progress: _answer(services, req, connection_string, progress), "Starting query processing"),
        media_type="application/x-ndjson",
    )


@router.post("/query/followup", response_model=QueryResponse)
def followup(req: FollowupRequest, services: Services = Depends(get_services)):
    connection_string = resolve_connection_string(req.connection_string)
    try:
        return _answer_followup(services, req, connection_string, ProgressEmitter())
    except AppError as e:
        raise to_http_error(e)


@router.post("/query/followup/stream")
def followup_stream(req: FollowupRequest, services: Services = Depends(get_services)):
    connection_string = resolve_connection_string(req.connection_string)
    return StreamingResponse(
        _stream(
            lambda progress: _answer_followup(services, req, connection_string, progress),
            "Processing followup instruction",
        ),
        media_type="application/x-ndjson",
    )
