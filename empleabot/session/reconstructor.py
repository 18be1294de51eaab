"""Rebuilds the transcript from the ordered event feed of a run.

``apply`` is the single transition function: it writes to the transcript and
returns the new state plus any external work (tool resolution) as effects.
``consume`` drives ``apply`` over a live feed, performs the effects, follows
the feed returned by a tool output submission, and guarantees that input is
enabled again when the run ends for any reason.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import assert_never

from empleabot.errors import (
    EmpleaBotError,
    RunFailedError,
    StreamProtocolError,
    ToolResolutionError,
)
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
from empleabot.session.transcript import Role, TranscriptStore

logger = logging.getLogger(__name__)

DEFAULT_FILES_URL = "/api/files"

ToolResolver = Callable[[RequiredToolCall], Awaitable[str]]
SubmitToolOutputs = Callable[[str, list[ToolOutput]], Awaitable[AsyncIterator[StreamEvent]]]


class RunState(str, Enum):
    IDLE = "idle"
    STREAMING = "streaming"
    AWAITING_TOOLS = "awaiting_tools"
    COMPLETED = "completed"
    FAILED = "failed"


_INPUT_ENABLED_STATES = frozenset({RunState.IDLE, RunState.COMPLETED, RunState.FAILED})


@dataclass(frozen=True)
class ResolveToolCalls:
    """Effect: resolve every tool call and submit the outputs as one batch."""

    run_id: str
    tool_calls: tuple[RequiredToolCall, ...]


@dataclass(frozen=True)
class Transition:
    state: RunState
    effects: tuple[ResolveToolCalls, ...] = ()
    error: EmpleaBotError | None = None


class StreamReconstructor:
    """State machine for one session's runs.

    Args:
        transcript: Store the run writes into.
        files_url: Prefix for links to generated files.
        idle_timeout: Seconds to wait for each event before the run is
            abandoned; None waits forever.
    """

    def __init__(
        self,
        transcript: TranscriptStore,
        *,
        files_url: str = DEFAULT_FILES_URL,
        idle_timeout: float | None = 120.0,
    ) -> None:
        self._transcript = transcript
        self._files_url = files_url.rstrip("/")
        self._idle_timeout = idle_timeout
        self._state = RunState.IDLE
        self._listeners: list[Callable[[RunState], None]] = []

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def input_enabled(self) -> bool:
        return self._state in _INPUT_ENABLED_STATES

    def subscribe(self, listener: Callable[[RunState], None]) -> None:
        self._listeners.append(listener)

    def begin_run(self) -> None:
        """Enter streaming for a freshly posted message; disables input."""
        self._set_state(RunState.STREAMING)

    def abort(self) -> None:
        """End an unfinished run as failed so input is enabled again."""
        if not self.input_enabled:
            self._set_state(RunState.FAILED)

    def apply(self, event: StreamEvent) -> Transition:
        """Apply one event to the transcript and return the resulting transition.

        Raises:
            StreamProtocolError: If a delta arrives for a message of the wrong role.
        """
        match event:
            case TextCreated():
                self._transcript.append(Role.ASSISTANT)
                return self._move(RunState.STREAMING)

            case TextDelta(value=value, annotations=annotations):
                if value or annotations:
                    self._require_last_role(Role.ASSISTANT, event)
                if value:
                    self._transcript.append_to_last(value)
                if annotations:
                    self._annotate_last(annotations)
                return self._move(RunState.STREAMING)

            case ImageFileDone(file_id=file_id):
                last = self._transcript.last
                if last is None or last.role is Role.USER:
                    self._transcript.append(Role.ASSISTANT)
                self._transcript.append_to_last(
                    f"\n![{file_id}]({self._files_url}/{file_id})\n"
                )
                return self._move(RunState.STREAMING)

            case ToolCallCreated(kind=kind):
                if kind == CODE_INTERPRETER:
                    self._transcript.append(Role.CODE)
                return self._move(RunState.STREAMING)

            case ToolCallDelta(kind=kind, input=fragment):
                if kind == CODE_INTERPRETER and fragment:
                    self._require_last_role(Role.CODE, event)
                    self._transcript.append_to_last(fragment)
                return self._move(RunState.STREAMING)

            case RunRequiresAction(run_id=run_id, tool_calls=tool_calls):
                effect = ResolveToolCalls(run_id=run_id, tool_calls=tuple(tool_calls))
                return self._move(RunState.AWAITING_TOOLS, effects=(effect,))

            case RunCompleted():
                return self._move(RunState.COMPLETED)

            case RunFailed(status=status, message=message):
                logger.warning(f"Run {event.run_id} ended as {status}: {message}")
                return self._move(RunState.FAILED, error=RunFailedError(status, message))

            case StreamError(message=message):
                return self._move(RunState.FAILED, error=StreamProtocolError(message))

            case _:
                assert_never(event)

    async def consume(
        self,
        feed: AsyncIterator[StreamEvent],
        *,
        submit_tool_outputs: SubmitToolOutputs,
        resolver: ToolResolver,
    ) -> None:
        """Process a run's feed, and any follow-up feeds, until the run ends.

        Raises:
            StreamProtocolError: On timeout, an error event, or a feed that
                closes before the run completes.
            ToolResolutionError: If a resolver fails.
        """
        if self.input_enabled:
            self.begin_run()
        try:
            current: AsyncIterator[StreamEvent] | None = feed
            while current is not None:
                current = await self._drain(current, submit_tool_outputs, resolver)
            if self._state is not RunState.COMPLETED:
                raise StreamProtocolError("Event stream closed before the run completed")
        except TimeoutError as e:
            raise StreamProtocolError(
                f"No stream event received within {self._idle_timeout}s"
            ) from e
        finally:
            self.abort()

    async def _drain(
        self,
        feed: AsyncIterator[StreamEvent],
        submit_tool_outputs: SubmitToolOutputs,
        resolver: ToolResolver,
    ) -> AsyncIterator[StreamEvent] | None:
        """Consume one feed; return the feed that follows a tool output submission."""
        try:
            while True:
                try:
                    async with asyncio.timeout(self._idle_timeout):
                        event = await anext(feed)
                except StopAsyncIteration:
                    return None

                transition = self.apply(event)
                if transition.error is not None:
                    raise transition.error

                for effect in transition.effects:
                    outputs = await self._resolve(effect, resolver)
                    logger.info(f"Submitting {len(outputs)} tool output(s) for run {effect.run_id}")
                    follow_up = await submit_tool_outputs(effect.run_id, outputs)
                    self._set_state(RunState.STREAMING)
                    return follow_up
        finally:
            aclose = getattr(feed, "aclose", None)
            if aclose is not None:
                await aclose()

    @staticmethod
    async def _resolve(effect: ResolveToolCalls, resolver: ToolResolver) -> list[ToolOutput]:
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [group.create_task(resolver(call)) for call in effect.tool_calls]
        except ExceptionGroup as eg:
            raise ToolResolutionError(
                f"Tool call resolution failed for run {effect.run_id}: {eg.exceptions[0]}"
            ) from eg

        outputs = []
        for call, task in zip(effect.tool_calls, tasks, strict=True):
            result = task.result()
            if not isinstance(result, str):
                raise ToolResolutionError(
                    f"Resolver returned {type(result).__name__} for tool call {call.id}"
                )
            outputs.append(ToolOutput(tool_call_id=call.id, output=result))
        return outputs

    def _annotate_last(self, annotations: list[FileAnnotation]) -> None:
        text = self._transcript.last.text
        for annotation in annotations:
            if not annotation.text:
                continue
            text = text.replace(annotation.text, f"{self._files_url}/{annotation.file_id}")
        self._transcript.replace_last(text)

    def _require_last_role(self, role: Role, event: StreamEvent) -> None:
        last = self._transcript.last
        if last is None or last.role is not role:
            self._set_state(RunState.FAILED)
            raise StreamProtocolError(
                f"{event.type} received while the last message is "
                f"{last.role.value if last else 'missing'}, expected {role.value}"
            )

    def _move(
        self,
        state: RunState,
        *,
        effects: tuple[ResolveToolCalls, ...] = (),
        error: EmpleaBotError | None = None,
    ) -> Transition:
        self._set_state(state)
        return Transition(state=state, effects=effects, error=error)

    def _set_state(self, state: RunState) -> None:
        if state is self._state:
            return
        logger.debug(f"Run state {self._state.value} -> {state.value}")
        self._state = state
        for listener in self._listeners:
            listener(state)
