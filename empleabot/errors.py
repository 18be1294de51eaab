"""Error taxonomy shared across the assistant, parsing and session layers.

Only ExtractionError is recovered locally (the user uploads again). Everything
else is surfaced to the session or HTTP layer and never retried automatically.
"""


class EmpleaBotError(Exception):
    """Base class for all application errors."""


class ConfigurationError(EmpleaBotError):
    """Missing or invalid configuration (credentials, descriptor). Fatal at startup."""


class RemoteResourceError(EmpleaBotError):
    """A create, retrieve or update call against the remote API failed."""


class ExtractionError(EmpleaBotError):
    """Raised when a document cannot be accepted or its text cannot be extracted."""


class AttachmentBusyError(ExtractionError):
    """Another document is still being extracted for this session."""


class StreamProtocolError(EmpleaBotError):
    """The event feed was malformed, timed out, or closed before the run completed."""


class RunFailedError(StreamProtocolError):
    """The server ended the run as failed, cancelled, expired or incomplete."""

    def __init__(self, status: str, message: str | None = None) -> None:
        self.status = status
        detail = f"Run {status}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


class ToolResolutionError(EmpleaBotError):
    """A tool call resolver failed; the batch was not submitted."""


class SessionBusyError(EmpleaBotError):
    """A message was submitted while a run is still streaming."""
