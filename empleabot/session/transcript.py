"""Ordered chat transcript for one session."""

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    CODE = "code"


class Message(BaseModel):
    """A single transcript entry. Immutable; the store replaces the last one."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str = ""


class TranscriptStore:
    """Append-only list of messages where only the last one may change.

    Listeners registered with ``subscribe`` are called after every write with
    the new snapshot.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._listeners: list[Callable[[tuple[Message, ...]], None]] = []

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def subscribe(self, listener: Callable[[tuple[Message, ...]], None]) -> None:
        self._listeners.append(listener)

    def append(self, role: Role, text: str = "") -> Message:
        message = Message(role=role, text=text)
        self._messages.append(message)
        self._notify()
        return message

    def append_to_last(self, fragment: str) -> Message:
        """Extend the text of the last message."""
        last = self._require_last()
        return self.replace_last(last.text + fragment)

    def replace_last(self, text: str) -> Message:
        """Replace the text of the last message, keeping its role."""
        last = self._require_last()
        updated = last.model_copy(update={"text": text})
        self._messages[-1] = updated
        self._notify()
        return updated

    def clear(self) -> None:
        self._messages.clear()
        self._notify()

    def _require_last(self) -> Message:
        if not self._messages:
            raise IndexError("Transcript is empty")
        return self._messages[-1]

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)
