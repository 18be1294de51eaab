"""Chat session state: transcript, run state machine and orchestration."""

from empleabot.session.controller import AttachmentSlot, PendingAttachment, SessionController
from empleabot.session.reconstructor import RunState, StreamReconstructor
from empleabot.session.transcript import Message, Role, TranscriptStore

__all__ = [
    "AttachmentSlot",
    "Message",
    "PendingAttachment",
    "Role",
    "RunState",
    "SessionController",
    "StreamReconstructor",
    "TranscriptStore",
]
