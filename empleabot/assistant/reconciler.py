"""Converge the remote assistant to the locally declared descriptor.

Three outcomes only: no id means create, an equivalent assistant means no-op,
a divergent assistant means a full update. A failed retrieve leaves the
application without a usable assistant instead of creating a replacement, so a
stale ``ASSISTANT_ID`` never silently forks the assistant.
"""

import logging
from enum import Enum
from typing import Any, Protocol

from openai import APIError, AsyncOpenAI
from pydantic import BaseModel

from empleabot.assistant.config import Settings
from empleabot.assistant.descriptor import (
    AssistantDescriptor,
    RemoteAssistant,
    default_descriptor,
)
from empleabot.errors import RemoteResourceError

logger = logging.getLogger(__name__)


class AssistantGateway(Protocol):
    """Remote operations on the assistant resource."""

    async def create(self, descriptor: AssistantDescriptor) -> RemoteAssistant: ...

    async def retrieve(self, assistant_id: str) -> RemoteAssistant: ...

    async def update(
        self, assistant_id: str, descriptor: AssistantDescriptor
    ) -> RemoteAssistant: ...


class ReconcileAction(str, Enum):
    """What reconciliation did to the remote assistant."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    UNAVAILABLE = "unavailable"


class ReconciliationResult(BaseModel):
    """Outcome of a reconciliation, threaded into app construction.

    Attributes:
        assistant_id: Converged assistant id, None when no assistant is usable.
        action: What was done.
        detail: Reason when the assistant is unavailable.
    """

    assistant_id: str | None
    action: ReconcileAction
    detail: str | None = None

    @property
    def usable(self) -> bool:
        return self.assistant_id is not None


def _to_remote(assistant: Any) -> RemoteAssistant:
    return RemoteAssistant(
        id=assistant.id,
        name=assistant.name,
        instructions=assistant.instructions,
        model=assistant.model,
        tool_types=tuple(tool.type for tool in assistant.tools or ()),
    )


class OpenAIAssistantGateway:
    """AssistantGateway backed by the OpenAI Assistants API."""

    def __init__(self, client: AsyncOpenAI) -> None:
        self._client = client

    async def create(self, descriptor: AssistantDescriptor) -> RemoteAssistant:
        try:
            assistant = await self._client.beta.assistants.create(**descriptor.to_api_params())
        except APIError as e:
            raise RemoteResourceError(f"Failed to create assistant: {e}") from e
        return _to_remote(assistant)

    async def retrieve(self, assistant_id: str) -> RemoteAssistant:
        try:
            assistant = await self._client.beta.assistants.retrieve(assistant_id)
        except APIError as e:
            raise RemoteResourceError(f"Failed to retrieve assistant {assistant_id}: {e}") from e
        return _to_remote(assistant)

    async def update(
        self, assistant_id: str, descriptor: AssistantDescriptor
    ) -> RemoteAssistant:
        try:
            assistant = await self._client.beta.assistants.update(
                assistant_id, **descriptor.to_api_params()
            )
        except APIError as e:
            raise RemoteResourceError(f"Failed to update assistant {assistant_id}: {e}") from e
        return _to_remote(assistant)


class Reconciler:
    """Creates or updates the remote assistant so it matches a descriptor."""

    def __init__(self, gateway: AssistantGateway) -> None:
        self._gateway = gateway

    async def converge(
        self,
        desired: AssistantDescriptor,
        observed_id: str | None = None,
    ) -> ReconciliationResult:
        """Make the remote assistant match ``desired``.

        Args:
            desired: The declared assistant configuration.
            observed_id: Id of an existing assistant, None to create one.

        Returns:
            ReconciliationResult with the converged id, or no id when the
            existing assistant could not be retrieved.

        Raises:
            RemoteResourceError: If the create or update call fails.
        """
        if observed_id is None:
            logger.info("Creating new assistant...")
            created = await self._gateway.create(desired)
            logger.info(f"New assistant created: {created.name} ({created.id})")
            return ReconciliationResult(assistant_id=created.id, action=ReconcileAction.CREATED)

        try:
            observed = await self._gateway.retrieve(observed_id)
        except RemoteResourceError as e:
            logger.warning(f"No usable assistant: {e}")
            return ReconciliationResult(
                assistant_id=None,
                action=ReconcileAction.UNAVAILABLE,
                detail=str(e),
            )
        logger.info(f"Assistant found: {observed.name}")

        changed = desired.differences(observed)
        if not changed:
            return ReconciliationResult(assistant_id=observed_id, action=ReconcileAction.UNCHANGED)

        logger.info(f"Updating assistant configuration ({', '.join(changed)} changed)...")
        updated = await self._gateway.update(observed_id, desired)
        logger.info(f"Assistant updated: {updated.name}")
        return ReconciliationResult(assistant_id=updated.id, action=ReconcileAction.UPDATED)


async def reconcile_assistant(client: AsyncOpenAI, settings: Settings) -> ReconciliationResult:
    """Converge the EmpleaBot assistant declared for ``settings.model``."""
    reconciler = Reconciler(OpenAIAssistantGateway(client))
    result = await reconciler.converge(default_descriptor(settings.model), settings.assistant_id)
    if result.action is ReconcileAction.CREATED:
        logger.info(f"Set ASSISTANT_ID={result.assistant_id} to reuse this assistant")
    return result
