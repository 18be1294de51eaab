"""Remote assistant management over the OpenAI Assistants API.

Responsibilities:
    - Settings loaded from the environment
    - Declared assistant configuration and its reconciliation
    - Thread lifecycle and translation of raw run events

Maintains clean separation from the HTTP layer.
"""

from empleabot.assistant.backend import OpenAIThreadBackend, ThreadBackend
from empleabot.assistant.config import Settings, get_settings
from empleabot.assistant.descriptor import AssistantDescriptor, ToolKind, default_descriptor
from empleabot.assistant.reconciler import (
    ReconcileAction,
    ReconciliationResult,
    Reconciler,
    reconcile_assistant,
)

__all__ = [
    "AssistantDescriptor",
    "OpenAIThreadBackend",
    "ReconcileAction",
    "ReconciliationResult",
    "Reconciler",
    "Settings",
    "ThreadBackend",
    "ToolKind",
    "default_descriptor",
    "get_settings",
    "reconcile_assistant",
]
