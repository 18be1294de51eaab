"""Unit tests for TranscriptStore."""

import pytest
import pytest_check as check

from empleabot.session.transcript import Message, Role, TranscriptStore


class TestTranscriptStore:
    """Tests for append-only transcript behavior."""

    def test_append_keeps_order(self) -> None:
        store = TranscriptStore()

        store.append(Role.USER, "Hola")
        store.append(Role.ASSISTANT)

        check.equal(len(store), 2)
        check.equal([m.role for m in store.snapshot()], [Role.USER, Role.ASSISTANT])
        check.equal(store.last, Message(role=Role.ASSISTANT, text=""))

    def test_only_last_message_changes(self) -> None:
        """append_to_last and replace_last never touch earlier messages."""
        store = TranscriptStore()
        store.append(Role.USER, "question")
        store.append(Role.ASSISTANT, "ans")

        store.append_to_last("wer")
        check.equal(store.last.text, "answer")

        store.replace_last("rewritten")
        check.equal(store.snapshot()[0].text, "question")
        check.equal(store.last, Message(role=Role.ASSISTANT, text="rewritten"))

    def test_snapshot_is_immutable_copy(self) -> None:
        store = TranscriptStore()
        store.append(Role.USER, "a")
        snapshot = store.snapshot()

        store.append(Role.ASSISTANT, "b")

        assert len(snapshot) == 1

    def test_write_to_empty_transcript_fails(self) -> None:
        with pytest.raises(IndexError):
            TranscriptStore().append_to_last("x")

    def test_listeners_receive_snapshots(self) -> None:
        """Every write notifies subscribers with the current messages."""
        store = TranscriptStore()
        seen: list[int] = []
        store.subscribe(lambda messages: seen.append(len(messages)))

        store.append(Role.USER, "a")
        store.append_to_last("b")
        store.clear()

        assert seen == [1, 1, 0]
