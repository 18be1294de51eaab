"""Thread, message and tool output endpoints.

Run events are streamed back as Server-Sent Events, one ``StreamEvent`` JSON
object per ``data:`` frame.
"""

import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from empleabot.assistant.backend import ThreadBackend
from empleabot.assistant.reconciler import ReconciliationResult
from empleabot.errors import EmpleaBotError, RemoteResourceError
from empleabot.models.events import StreamError, StreamEvent, encode_sse
from empleabot.models.schemas import ActionsRequest, MessageRequest, ThreadCreated

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistants/threads", tags=["threads"])


def get_backend(request: Request) -> ThreadBackend:
    """Return the thread backend, or 503 when no assistant is usable."""
    backend = request.app.state.backend
    if backend is None:
        result: ReconciliationResult | None = request.app.state.reconciliation
        detail = "No usable assistant"
        if result is not None and result.detail:
            detail = f"{detail}: {result.detail}"
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    return backend


Backend = Annotated[ThreadBackend, Depends(get_backend)]


def _event_stream(feed: AsyncIterator[StreamEvent]) -> StreamingResponse:
    async def frames() -> AsyncIterator[str]:
        try:
            async for event in feed:
                yield encode_sse(event)
        except EmpleaBotError as e:
            logger.error(f"Event stream failed: {e}")
            yield encode_sse(StreamError(message=str(e)))

    return StreamingResponse(
        frames(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


def _bad_gateway(e: RemoteResourceError) -> HTTPException:
    logger.error(str(e))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("", response_model=ThreadCreated)
async def create_thread(backend: Backend) -> ThreadCreated:
    """Create a new conversation thread."""
    try:
        thread_id = await backend.create_thread()
    except RemoteResourceError as e:
        raise _bad_gateway(e) from e
    return ThreadCreated(thread_id=thread_id)


@router.post("/{thread_id}/messages")
async def post_message(
    thread_id: str,
    request: MessageRequest,
    backend: Backend,
) -> StreamingResponse:
    """Add a user message to the thread and stream the resulting run.

    Returns:
        Server-Sent Events, one StreamEvent per frame.

    Raises:
        422: Empty message.
        502: The message or run could not be created.
        503: No usable assistant.
    """
    try:
        feed = await backend.post_message(thread_id, request.content)
    except RemoteResourceError as e:
        raise _bad_gateway(e) from e
    return _event_stream(feed)


@router.post("/{thread_id}/actions")
async def submit_actions(
    thread_id: str,
    request: ActionsRequest,
    backend: Backend,
) -> StreamingResponse:
    """Submit tool outputs for a run and stream its continuation."""
    try:
        feed = await backend.submit_tool_outputs(
            thread_id, request.run_id, request.tool_call_outputs
        )
    except RemoteResourceError as e:
        raise _bad_gateway(e) from e
    return _event_stream(feed)
