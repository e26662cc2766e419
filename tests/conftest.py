"""Shared test doubles for Arke-backed job tests."""

from __future__ import annotations

from typing import Any

import pytest

from klados_worker.adapters import ArkeNotFoundError, ArkeServerError
from klados_worker.config import WorkerSettings
from klados_worker.domain import AgentIdentity, JobRequest, OutputEntityDraft, TargetEntity

LOG_ENTITY_TYPE = "klados_log"


class FakeArkeBackend:
    """In-memory stand-in for the Arke API shared by every fake client."""

    def __init__(self):
        self.entities: dict[str, dict[str, Any]] = {}
        self.created: list[OutputEntityDraft] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.batch_updates: list[tuple[str, int, dict[str, Any]]] = []
        self.handoffs: list[tuple[str, dict[str, Any]]] = []
        self.factory_calls: list[tuple[str, str, str]] = []
        self.clients: list[FakeArkeClient] = []
        self.fail_create_types: set[str] = set()
        self.handoff_error: Exception | None = None
        self.batch_error: Exception | None = None
        self._output_counter = 0
        self._log_counter = 0

    def backend_add_entity(self, entity_id: str, entity_type: str, properties: dict[str, Any]) -> None:
        self.entities[entity_id] = {"id": entity_id, "type": entity_type, "properties": dict(properties)}

    def backend_next_id(self, entity_type: str) -> str:
        if entity_type == LOG_ENTITY_TYPE:
            self._log_counter += 1
            return f"log{self._log_counter}"
        self._output_counter += 1
        return f"o{self._output_counter}"

    def backend_entities_of_type(self, entity_type: str) -> list[dict[str, Any]]:
        return [entity for entity in self.entities.values() if entity["type"] == entity_type]

    def client_factory(self, api_base: str, auth_token: str, network: str) -> FakeArkeClient:
        self.factory_calls.append((api_base, auth_token, network))
        client = FakeArkeClient(backend=self)
        self.clients.append(client)
        return client


class FakeArkeClient:
    """Fake Arke client recording every call against the shared backend."""

    def __init__(self, backend: FakeArkeBackend):
        self._backend = backend
        self.closed = False

    async def client_get_entity(self, entity_id: str) -> TargetEntity:
        entity = self._backend.entities.get(entity_id)
        if entity is None:
            raise ArkeNotFoundError(f"Arke returned HTTP 404: GET /entities/{entity_id}", status_code=404)
        return TargetEntity(id=entity["id"], type=entity["type"], properties=dict(entity["properties"]))

    async def client_create_entity(self, draft: OutputEntityDraft) -> str:
        if draft.type in self._backend.fail_create_types:
            raise ArkeServerError("Arke returned HTTP 500: POST /entities", status_code=500)
        entity_id = self._backend.backend_next_id(draft.type)
        self._backend.created.append(draft)
        self._backend.entities[entity_id] = {
            "id": entity_id,
            "type": draft.type,
            "collection": draft.collection,
            "properties": dict(draft.properties),
            "relationships": [relationship.relationship_to_payload() for relationship in draft.relationships],
        }
        return entity_id

    async def client_update_entity(self, entity_id: str, properties: dict[str, Any]) -> None:
        self._backend.updates.append((entity_id, properties))
        self._backend.entities[entity_id]["properties"].update(properties)

    async def client_update_batch_slot(self, batch_id: str, slot_index: int, payload: dict[str, Any]) -> None:
        if self._backend.batch_error is not None:
            raise self._backend.batch_error
        self._backend.batch_updates.append((batch_id, slot_index, payload))

    async def client_workflow_handoff(self, rhiza_id: str, payload: dict[str, Any]) -> None:
        if self._backend.handoff_error is not None:
            raise self._backend.handoff_error
        self._backend.handoffs.append((rhiza_id, payload))

    async def client_close(self) -> None:
        self.closed = True


@pytest.fixture
def arke_backend() -> FakeArkeBackend:
    """Return a fresh in-memory Arke backend with target `e1` seeded."""

    backend = FakeArkeBackend()
    backend.backend_add_entity("e1", "test_entity", {"title": "Test Entity", "content": "Test content"})
    return backend


@pytest.fixture
def agent_identity() -> AgentIdentity:
    return AgentIdentity(agent_id="klados_1", agent_version="1.2.3", auth_token="ak_secret")


@pytest.fixture
def worker_settings() -> WorkerSettings:
    return WorkerSettings(
        environment_name="test",
        agent_id="klados_1",
        agent_version="1.2.3",
        arke_agent_key="ak_secret",
        verification_token="vt_token",
        arke_verify_agent_id=None,
        arke_api_base="https://arke.test",
    )


def build_job_request(**overrides: Any) -> JobRequest:
    """Build a valid job request targeting `e1` in job collection `c1`."""

    payload: dict[str, Any] = {
        "job_id": "job_1",
        "target_entity": "e1",
        "target_collection": "tc1",
        "job_collection": "c1",
    }
    payload.update(overrides)
    return JobRequest.model_validate(payload)


@pytest.fixture
def job_request_factory():
    return build_job_request
