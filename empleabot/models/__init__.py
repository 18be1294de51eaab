"""Pydantic models for stream events and API requests/responses.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - events: Closed union of run stream events (also the SSE wire format)
    - schemas: Thread, message, tool output and upload payloads
"""

from empleabot.models.events import (
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
from empleabot.models.schemas import (
    ActionsRequest,
    MessageRequest,
    PDFUploadResponse,
    ThreadCreated,
)

__all__ = [
    "ActionsRequest",
    "FileAnnotation",
    "ImageFileDone",
    "MessageRequest",
    "PDFUploadResponse",
    "RequiredToolCall",
    "RunCompleted",
    "RunFailed",
    "RunRequiresAction",
    "StreamError",
    "StreamEvent",
    "TextCreated",
    "TextDelta",
    "ThreadCreated",
    "ToolCallCreated",
    "ToolCallDelta",
    "ToolOutput",
]
