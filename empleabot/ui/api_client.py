"""ThreadBackend that talks to the EmpleaBot HTTP API.

Consumes the Server-Sent Events of the thread endpoints and rebuilds the
StreamEvent feed on the UI side.
"""

import os
from collections.abc import AsyncIterator

import httpx
from pydantic import ValidationError

from empleabot.errors import RemoteResourceError, StreamProtocolError
from empleabot.models.events import StreamEvent, ToolOutput, decode_sse_line
from empleabot.models.schemas import ActionsRequest, MessageRequest, ThreadCreated

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


def _error_detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("detail", response.text))
    except ValueError:
        return response.text


class HttpThreadBackend:
    """Thread operations over HTTP.

    Args:
        base_url: Root URL of the EmpleaBot API.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (e.g. ASGITransport in tests).
    """

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        *,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url, timeout=self._timeout, transport=self._transport
        )

    async def create_thread(self) -> str:
        async with self._client() as client:
            try:
                response = await client.post("/api/assistants/threads")
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RemoteResourceError(
                    f"HTTP {e.response.status_code}: {_error_detail(e.response)}"
                ) from e
            except httpx.RequestError as e:
                raise RemoteResourceError(f"Connection failed: {e}") from e
        return ThreadCreated.model_validate(response.json()).thread_id

    async def post_message(self, thread_id: str, content: str) -> AsyncIterator[StreamEvent]:
        payload = MessageRequest(content=content).model_dump(mode="json")
        return self._stream(f"/api/assistants/threads/{thread_id}/messages", payload)

    async def submit_tool_outputs(
        self, thread_id: str, run_id: str, outputs: list[ToolOutput]
    ) -> AsyncIterator[StreamEvent]:
        payload = ActionsRequest(run_id=run_id, tool_call_outputs=outputs).model_dump(mode="json")
        return self._stream(f"/api/assistants/threads/{thread_id}/actions", payload)

    async def _stream(self, path: str, payload: dict) -> AsyncIterator[StreamEvent]:
        """Consume SSE frames from a thread endpoint."""
        async with self._client() as client:
            try:
                async with client.stream(
                    "POST",
                    path,
                    json=payload,
                    headers={"Accept": "text/event-stream"},
                ) as response:
                    if response.is_error:
                        await response.aread()
                        raise RemoteResourceError(
                            f"HTTP {response.status_code}: {_error_detail(response)}"
                        )
                    async for line in response.aiter_lines():
                        event = decode_sse_line(line)
                        if event is not None:
                            yield event
            except httpx.RequestError as e:
                raise StreamProtocolError(f"Connection failed: {e}") from e
            except ValidationError as e:
                raise StreamProtocolError(f"Malformed stream event: {e}") from e
