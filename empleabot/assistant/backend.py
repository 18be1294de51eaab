"""Thread lifecycle against the OpenAI Assistants API.

Raw ``AssistantStreamEvent`` objects from the SDK are translated into the
closed ``StreamEvent`` union here, so nothing downstream touches SDK shapes.
"""

import logging
from collections.abc import AsyncIterator, Iterable
from typing import Any, Protocol

import httpx
from openai import APIError, AsyncOpenAI
from pydantic import BaseModel

from empleabot.errors import RemoteResourceError, StreamProtocolError
from empleabot.models.events import (
    CODE_INTERPRETER,
    FileAnnotation,
    ImageFileDone,
    RequiredToolCall,
    RunCompleted,
    RunFailed,
    RunRequiresAction,
    StreamError,
    StreamEvent,
    TextCreated,
    TextDelta,
    ToolCallCreated,
    ToolCallDelta,
    ToolOutput,
)

logger = logging.getLogger(__name__)

_RUN_FAILURE_EVENTS = {
    "thread.run.failed",
    "thread.run.cancelled",
    "thread.run.expired",
    "thread.run.incomplete",
}


class ThreadBackend(Protocol):
    """Remote thread operations used by a chat session."""

    async def create_thread(self) -> str: ...

    async def post_message(self, thread_id: str, content: str) -> AsyncIterator[StreamEvent]: ...

    async def submit_tool_outputs(
        self, thread_id: str, run_id: str, outputs: list[ToolOutput]
    ) -> AsyncIterator[StreamEvent]: ...


class GeneratedFile(BaseModel):
    """A file produced by the assistant (code interpreter images, exports)."""

    content: bytes
    filename: str | None = None


class FileStore(Protocol):
    async def get_file(self, file_id: str) -> GeneratedFile: ...


class AssistantEventTranslator:
    """Turns raw SDK stream events into StreamEvents for one feed.

    Keeps track of which message content blocks and tool calls were already
    seen, so creation events are emitted once per block.
    """

    def __init__(self) -> None:
        self._content_seen: set[tuple[str, int]] = set()
        self._tool_calls_seen: set[tuple[str, int]] = set()

    def translate(self, raw: Any) -> list[StreamEvent]:
        name = raw.event
        data = raw.data

        if name == "thread.message.delta":
            return self._message_delta(data)
        if name == "thread.run.step.delta":
            return self._step_delta(data)
        if name == "thread.run.requires_action":
            return [self._requires_action(data)]
        if name == "thread.run.completed":
            return [RunCompleted(run_id=data.id)]
        if name in _RUN_FAILURE_EVENTS:
            last_error = getattr(data, "last_error", None)
            return [
                RunFailed(
                    run_id=data.id,
                    status=data.status,
                    message=last_error.message if last_error else None,
                )
            ]
        if name == "error":
            return [StreamError(message=getattr(data, "message", None) or "Unknown stream error")]
        return []

    def _message_delta(self, data: Any) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        for block in data.delta.content or ():
            key = (data.id, block.index)
            is_new = key not in self._content_seen
            self._content_seen.add(key)

            if block.type == "text":
                if is_new:
                    events.append(TextCreated())
                if block.text is None:
                    continue
                annotations = _file_annotations(block.text.annotations or ())
                events.append(TextDelta(value=block.text.value, annotations=annotations or None))
            elif block.type == "image_file" and is_new and block.image_file is not None:
                events.append(ImageFileDone(file_id=block.image_file.file_id))
        return events

    def _step_delta(self, data: Any) -> list[StreamEvent]:
        details = data.delta.step_details
        if details is None or details.type != "tool_calls":
            return []

        events: list[StreamEvent] = []
        for call in details.tool_calls or ():
            key = (data.id, call.index)
            if key not in self._tool_calls_seen:
                self._tool_calls_seen.add(key)
                events.append(ToolCallCreated(kind=call.type, tool_call_id=call.id))
            code = call.code_interpreter if call.type == CODE_INTERPRETER else None
            events.append(ToolCallDelta(kind=call.type, input=code.input if code else None))
        return events

    @staticmethod
    def _requires_action(data: Any) -> RunRequiresAction:
        action = data.required_action
        calls = action.submit_tool_outputs.tool_calls if action else []
        return RunRequiresAction(
            run_id=data.id,
            tool_calls=[
                RequiredToolCall(
                    id=call.id,
                    kind=call.type,
                    name=call.function.name,
                    arguments=call.function.arguments,
                )
                for call in calls
            ],
        )


def _file_annotations(annotations: Iterable[Any]) -> list[FileAnnotation]:
    return [
        FileAnnotation(text=annotation.text, file_id=annotation.file_path.file_id)
        for annotation in annotations
        if annotation.type == "file_path" and annotation.text and annotation.file_path
    ]


class OpenAIThreadBackend:
    """ThreadBackend and FileStore over the OpenAI Assistants API."""

    def __init__(self, client: AsyncOpenAI, assistant_id: str) -> None:
        self._client = client
        self._assistant_id = assistant_id

    @property
    def assistant_id(self) -> str:
        return self._assistant_id

    async def create_thread(self) -> str:
        try:
            thread = await self._client.beta.threads.create()
        except APIError as e:
            raise RemoteResourceError(f"Failed to create thread: {e}") from e
        logger.info(f"Created thread {thread.id}")
        return thread.id

    async def post_message(self, thread_id: str, content: str) -> AsyncIterator[StreamEvent]:
        try:
            await self._client.beta.threads.messages.create(
                thread_id, role="user", content=content
            )
            stream = await self._client.beta.threads.runs.create(
                thread_id, assistant_id=self._assistant_id, stream=True
            )
        except APIError as e:
            raise RemoteResourceError(f"Failed to start run on thread {thread_id}: {e}") from e
        return self._events(stream)

    async def submit_tool_outputs(
        self, thread_id: str, run_id: str, outputs: list[ToolOutput]
    ) -> AsyncIterator[StreamEvent]:
        try:
            stream = await self._client.beta.threads.runs.submit_tool_outputs(
                run_id,
                thread_id=thread_id,
                tool_outputs=[output.model_dump() for output in outputs],
                stream=True,
            )
        except APIError as e:
            raise RemoteResourceError(f"Failed to submit tool outputs for run {run_id}: {e}") from e
        return self._events(stream)

    async def get_file(self, file_id: str) -> GeneratedFile:
        try:
            info = await self._client.files.retrieve(file_id)
            response = await self._client.files.content(file_id)
        except APIError as e:
            raise RemoteResourceError(f"Failed to fetch file {file_id}: {e}") from e
        return GeneratedFile(content=response.content, filename=info.filename)

    async def _events(self, stream: Any) -> AsyncIterator[StreamEvent]:
        translator = AssistantEventTranslator()
        try:
            async for raw in stream:
                for event in translator.translate(raw):
                    yield event
        except (APIError, httpx.HTTPError) as e:
            raise StreamProtocolError(f"Stream interrupted: {e}") from e
        finally:
            await stream.close()
