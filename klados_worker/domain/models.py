"""Typed domain models shared across runtime layers.

Job requests arrive as JSON and are validated with pydantic; everything the
worker builds internally is a frozen dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

DERIVED_FROM_PREDICATE = "derived_from"


class BatchPosition(BaseModel):
    """Position of this invocation inside a scattered batch.

    Attributes:
        id: Batch identifier owned by the platform.
        index: Zero-based slot index of this item.
        total: Number of slots in the batch.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    index: int = Field(ge=0)
    total: int = Field(ge=1)

    @model_validator(mode="after")
    def _validate_index_bounds(self) -> BatchPosition:
        if self.index >= self.total:
            raise ValueError("batch index must be lower than batch total")
        return self


class WorkflowContext(BaseModel):
    """Rhiza workflow context attached to jobs that are one stage of a pipeline.

    Attributes:
        id: Rhiza workflow identifier.
        path: Step names walked so far.
        parent_logs: Upstream log record ids.
        batch: Optional scatter position.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    path: list[str] = Field(default_factory=list)
    parent_logs: list[str] = Field(default_factory=list)
    batch: BatchPosition | None = None


class JobRequest(BaseModel):
    """Inbound job request posted by Arke to `/process`.

    Attributes:
        job_id: Platform job identifier.
        target_entity: Single target entity id.
        target_entities: Target entity ids for multi-target invocations.
        target_collection: Collection that scopes permissions for the job.
        job_collection: Optional collection that receives the job log and outputs.
        api_base: Optional API base override supplied by the platform.
        network: Arke network the job runs against.
        rhiza: Optional workflow context.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    job_id: str = Field(min_length=1)
    target_entity: str | None = None
    target_entities: list[str] | None = None
    target_collection: str = Field(min_length=1)
    job_collection: str | None = None
    api_base: str | None = None
    network: Literal["main", "test"] = "main"
    rhiza: WorkflowContext | None = None

    @model_validator(mode="after")
    def _validate_target_present(self) -> JobRequest:
        if not self.request_target_ids():
            raise ValueError("target_entity or target_entities must identify at least one entity")
        return self

    def request_target_ids(self) -> list[str]:
        """Return every target id named by the request, without duplicates.

        Returns:
            list[str]: Target ids in request order.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        candidate_ids: list[str] = []
        if self.target_entity:
            candidate_ids.append(self.target_entity)
        candidate_ids.extend(self.target_entities or [])

        target_ids: list[str] = []
        for candidate_id in candidate_ids:
            normalized_id = candidate_id.strip()
            if normalized_id and normalized_id not in target_ids:
                target_ids.append(normalized_id)
        return target_ids


@dataclass(frozen=True)
class AgentIdentity:
    """Static agent credentials injected into every job handle.

    Attributes:
        agent_id: Registered klados id.
        agent_version: Agent version label.
        auth_token: Agent API key.
    """

    agent_id: str | None
    agent_version: str
    auth_token: str | None = field(default=None, repr=False)


@dataclass(frozen=True)
class TargetEntity:
    """Entity fetched from Arke as the subject of a job.

    Attributes:
        id: Entity id.
        type: Entity type tag.
        properties: Free-form property mapping.
    """

    id: str
    type: str
    properties: dict[str, Any]


@dataclass(frozen=True)
class EntityRelationship:
    """Relationship edge attached to a created entity."""

    predicate: str
    peer: str
    peer_type: str | None = None

    def relationship_to_payload(self) -> dict[str, str]:
        payload = {"predicate": self.predicate, "peer": self.peer}
        if self.peer_type:
            payload["peer_type"] = self.peer_type
        return payload


@dataclass(frozen=True)
class OutputEntityDraft:
    """Entity that a job asks Arke to create.

    Attributes:
        type: Entity type tag.
        collection: Destination collection id.
        properties: Free-form property mapping.
        relationships: Relationship edges from the new entity.
    """

    type: str
    collection: str
    properties: dict[str, Any]
    relationships: tuple[EntityRelationship, ...] = ()

    def draft_to_payload(self) -> dict[str, object]:
        """Serialize the draft to the `POST /entities` body.

        Returns:
            dict[str, object]: JSON-serializable create payload.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "type": self.type,
            "collection": self.collection,
            "properties": dict(self.properties),
            "relationships": [relationship.relationship_to_payload() for relationship in self.relationships],
        }
