"""Request and response payloads of the HTTP API."""

from pydantic import BaseModel, Field, field_validator

from empleabot.models.events import ToolOutput


class ThreadCreated(BaseModel):
    """Response of the create-thread endpoint."""

    thread_id: str


class MessageRequest(BaseModel):
    """Request payload for posting a user message to a thread.

    Attributes:
        content: Message text, already merged with any attachment.
    """

    content: str = Field(..., min_length=1)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Strip whitespace from content before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ActionsRequest(BaseModel):
    """Tool outputs for a run waiting on tool calls.

    Attributes:
        run_id: Run that requested the tool calls.
        tool_call_outputs: One output per tool call, keyed by tool_call_id.
    """

    run_id: str = Field(..., min_length=1)
    tool_call_outputs: list[ToolOutput]


class PDFUploadResponse(BaseModel):
    """Response after PDF upload processing.

    Attributes:
        filename: Name of the uploaded file.
        pages: Number of pages in the document.
        text: Extracted text, ready to be folded into a message.
        success: Whether the extraction was successful.
        error: Error message if extraction failed.
    """

    filename: str
    pages: int
    text: str = ""
    success: bool
    error: str | None = None
