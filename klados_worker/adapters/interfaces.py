"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from typing import Any, Protocol

from klados_worker.domain import OutputEntityDraft, TargetEntity


class ArkeClientPort(Protocol):
    """Port definition for the Arke calls a job handle consumes."""

    async def client_get_entity(self, entity_id: str) -> TargetEntity:
        """Fetch one entity by id.

        Args:
            entity_id: Entity identifier.

        Returns:
            TargetEntity: Entity id, type, and properties.

        Raises:
            ArkeNotFoundError: Raised when the entity does not exist.
            ArkeApiError: Raised for other transport or API failures.
        """

    async def client_create_entity(self, draft: OutputEntityDraft) -> str:
        """Create one entity and return its id.

        Args:
            draft: Entity type, collection, properties, and relationships.

        Returns:
            str: Created entity id.

        Raises:
            ArkeApiError: Raised for transport or API failures.
        """

    async def client_update_entity(self, entity_id: str, properties: dict[str, Any]) -> None:
        """Merge properties into an existing entity.

        Args:
            entity_id: Entity identifier.
            properties: Properties to merge.

        Returns:
            None: Updates the entity as side effect.

        Raises:
            ArkeApiError: Raised for transport or API failures.
        """

    async def client_update_batch_slot(
        self,
        batch_id: str,
        slot_index: int,
        payload: dict[str, Any],
    ) -> None:
        """Report the outcome of one scattered batch item.

        Args:
            batch_id: Batch identifier.
            slot_index: Zero-based slot index.
            payload: Slot status payload.

        Returns:
            None: Updates the slot as side effect.

        Raises:
            ArkeApiError: Raised for transport or API failures.
        """

    async def client_workflow_handoff(self, rhiza_id: str, payload: dict[str, Any]) -> None:
        """Hand produced outputs to the next workflow stage.

        Args:
            rhiza_id: Workflow identifier.
            payload: Hand-off payload with job, path, and output ids.

        Returns:
            None: Triggers the hand-off as side effect.

        Raises:
            ArkeApiError: Raised for transport or API failures.
        """

    async def client_close(self) -> None:
        """Release transport resources held by the client."""


class ArkeClientFactory(Protocol):
    """Callable that builds one client per job."""

    def __call__(self, api_base: str, auth_token: str, network: str) -> ArkeClientPort:
        """Build an Arke client bound to one job's API base and credentials."""
