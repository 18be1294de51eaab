"""Stream events produced by an assistant run.

A closed, tagged union discriminated on ``type``. The same models are the
Server-Sent Events payloads of the thread endpoints, so the UI can rebuild the
feed on the other side of HTTP.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

CODE_INTERPRETER = "code_interpreter"


class FileAnnotation(BaseModel):
    """Literal span of generated text that refers to a generated file."""

    text: str
    file_id: str


class TextCreated(BaseModel):
    """A new text content block started."""

    type: Literal["text_created"] = "text_created"


class TextDelta(BaseModel):
    type: Literal["text_delta"] = "text_delta"
    value: str | None = None
    annotations: list[FileAnnotation] | None = None


class ImageFileDone(BaseModel):
    type: Literal["image_file_done"] = "image_file_done"
    file_id: str


class ToolCallCreated(BaseModel):
    type: Literal["tool_call_created"] = "tool_call_created"
    kind: str
    tool_call_id: str | None = None


class ToolCallDelta(BaseModel):
    type: Literal["tool_call_delta"] = "tool_call_delta"
    kind: str
    input: str | None = None


class RequiredToolCall(BaseModel):
    """A tool call the run waits on.

    Attributes:
        id: Tool call id the output must be keyed by.
        kind: Tool type, ``function`` for caller-resolved calls.
        name: Function name.
        arguments: JSON-encoded function arguments.
    """

    id: str
    kind: str = "function"
    name: str | None = None
    arguments: str = ""


class ToolOutput(BaseModel):
    tool_call_id: str
    output: str


class RunRequiresAction(BaseModel):
    type: Literal["run_requires_action"] = "run_requires_action"
    run_id: str
    tool_calls: list[RequiredToolCall]


class RunCompleted(BaseModel):
    type: Literal["run_completed"] = "run_completed"
    run_id: str | None = None


class RunFailed(BaseModel):
    """The server ended the run without completing it."""

    type: Literal["run_failed"] = "run_failed"
    run_id: str | None = None
    status: str = "failed"
    message: str | None = None


class StreamError(BaseModel):
    """Transport or server error reported inside the feed."""

    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[
    TextCreated
    | TextDelta
    | ImageFileDone
    | ToolCallCreated
    | ToolCallDelta
    | RunRequiresAction
    | RunCompleted
    | RunFailed
    | StreamError,
    Field(discriminator="type"),
]

stream_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)


def encode_sse(event: StreamEvent) -> str:
    """Serialize an event as one SSE ``data:`` frame."""
    return f"data: {event.model_dump_json(exclude_none=True)}\n\n"


def decode_sse_line(line: str) -> StreamEvent | None:
    """Parse a ``data:`` line back into an event; other lines yield None."""
    if not line.startswith("data: "):
        return None
    return stream_event_adapter.validate_json(line.removeprefix("data: ").strip())
