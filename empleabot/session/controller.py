"""Chat session orchestration.

Owns the thread id, the pending attachment and the transcript of one UI
session, and wires backend feeds into the StreamReconstructor.
"""

import asyncio
import functools
import logging
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from empleabot.assistant.backend import ThreadBackend
from empleabot.errors import AttachmentBusyError, SessionBusyError
from empleabot.models.events import RequiredToolCall
from empleabot.parsing.pdf_parser import PDF_MEDIA_TYPE, ExtractedDocument, extract_pdf
from empleabot.session.reconstructor import (
    DEFAULT_FILES_URL,
    StreamReconstructor,
    ToolResolver,
)
from empleabot.session.transcript import Role, TranscriptStore

logger = logging.getLogger(__name__)

ATTACHMENT_TEMPLATE = "PDF Content from {name}:\n{text}\n\nUser Query: {query}"

Extractor = Callable[[bytes, str, str | None], ExtractedDocument]


class PendingAttachment(BaseModel):
    """Extracted document waiting to be merged into the next message."""

    model_config = ConfigDict(frozen=True)

    name: str
    text: str
    pages: int = 0


class AttachmentSlot:
    """Holds at most one pending attachment and one extraction in flight."""

    def __init__(self, extractor: Extractor = extract_pdf) -> None:
        self._extractor = extractor
        self._pending: PendingAttachment | None = None
        self._processing = False

    @property
    def pending(self) -> PendingAttachment | None:
        return self._pending

    @property
    def processing(self) -> bool:
        return self._processing

    async def load(
        self,
        content: bytes,
        filename: str,
        media_type: str | None = PDF_MEDIA_TYPE,
    ) -> PendingAttachment:
        """Extract a document and make it the pending attachment.

        A failed extraction leaves the slot as it was.

        Raises:
            AttachmentBusyError: If another extraction is still running.
            ExtractionError: If the document is rejected or cannot be parsed.
        """
        if self._processing:
            raise AttachmentBusyError("A document is already being processed")

        self._processing = True
        try:
            document = await asyncio.to_thread(self._extractor, content, filename, media_type)
        finally:
            self._processing = False

        self._pending = PendingAttachment(
            name=document.name, text=document.text, pages=document.pages
        )
        return self._pending

    def take(self) -> PendingAttachment | None:
        """Return the pending attachment and clear the slot."""
        attachment, self._pending = self._pending, None
        return attachment

    def discard(self) -> None:
        self._pending = None


async def _empty_output(tool_call: RequiredToolCall) -> str:
    logger.debug(f"No resolver configured; returning empty output for {tool_call.name}")
    return ""


class SessionController:
    """One chat session: thread, attachment, transcript and active run.

    Args:
        backend: Remote thread operations.
        resolver: Produces the output of a function tool call. Defaults to
            an empty string for every call.
        idle_timeout: Seconds to wait for each stream event.
        files_url: Prefix for links to generated files.
        extractor: Document text extractor.
    """

    def __init__(
        self,
        backend: ThreadBackend,
        *,
        resolver: ToolResolver | None = None,
        idle_timeout: float | None = 120.0,
        files_url: str = DEFAULT_FILES_URL,
        extractor: Extractor = extract_pdf,
    ) -> None:
        self._backend = backend
        self._resolver = resolver or _empty_output
        self.transcript = TranscriptStore()
        self.attachments = AttachmentSlot(extractor)
        self.reconstructor = StreamReconstructor(
            self.transcript, files_url=files_url, idle_timeout=idle_timeout
        )
        self._thread_id: str | None = None
        self._thread_lock = asyncio.Lock()
        self._run_task: asyncio.Task[None] | None = None

    @property
    def thread_id(self) -> str | None:
        return self._thread_id

    @property
    def input_enabled(self) -> bool:
        return self.reconstructor.input_enabled and not self.attachments.processing

    async def start(self) -> str:
        """Create the session thread on first use; later calls reuse it."""
        async with self._thread_lock:
            if self._thread_id is None:
                self._thread_id = await self._backend.create_thread()
                logger.info(f"Session started on thread {self._thread_id}")
        return self._thread_id

    async def attach(
        self,
        content: bytes,
        filename: str,
        media_type: str | None = PDF_MEDIA_TYPE,
    ) -> PendingAttachment:
        return await self.attachments.load(content, filename, media_type)

    def discard_attachment(self) -> None:
        self.attachments.discard()

    def compose(self, user_input: str) -> str:
        """Build the outgoing message text, folding in the pending attachment."""
        attachment = self.attachments.pending
        if attachment is None:
            return user_input
        return ATTACHMENT_TEMPLATE.format(
            name=attachment.name, text=attachment.text, query=user_input
        )

    async def submit(self, user_input: str) -> None:
        """Send a user message and stream the assistant's reply into the transcript.

        Raises:
            ValueError: If the input is blank.
            SessionBusyError: If a run or an extraction is still in progress.
            RemoteResourceError: If the message cannot be posted.
            StreamProtocolError: If the run fails, times out or its feed breaks.
            ToolResolutionError: If a tool call cannot be resolved.
        """
        text = user_input.strip()
        if not text:
            raise ValueError("Message must not be empty")
        if not self.input_enabled:
            raise SessionBusyError("Wait for the current response before sending another message")
        self.reconstructor.begin_run()

        try:
            thread_id = await self.start()
        except BaseException:
            self.reconstructor.abort()
            raise
        content = self.compose(text)
        self.attachments.take()
        self.transcript.append(Role.USER, text)

        self._run_task = asyncio.create_task(self._run(thread_id, content))
        try:
            await self._run_task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info(f"Run on thread {thread_id} cancelled")
        finally:
            self._run_task = None

    def cancel(self) -> bool:
        """Abort the in-flight run, if any. Returns whether a run was cancelled."""
        task = self._run_task
        if task is None or task.done():
            return False
        return task.cancel()

    async def _run(self, thread_id: str, content: str) -> None:
        try:
            feed = await self._backend.post_message(thread_id, content)
            await self.reconstructor.consume(
                feed,
                submit_tool_outputs=functools.partial(self._backend.submit_tool_outputs, thread_id),
                resolver=self._resolver,
            )
        finally:
            self.reconstructor.abort()
