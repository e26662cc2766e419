"""Tests for job intake through `POST /process`."""

from __future__ import annotations

import asyncio
import threading

from fastapi.testclient import TestClient

from klados_worker.api.application import create_api_application
from klados_worker.bootstrap import bootstrap_create_identity
from klados_worker.config import WorkerSettings
from klados_worker.jobs import BackgroundJobRunner, JobHandle, process_job


def _build_application(settings: WorkerSettings, arke_backend, processing_routine=process_job):
    return create_api_application(
        settings=settings,
        identity=bootstrap_create_identity(settings),
        client_factory=arke_backend.client_factory,
        job_runner=BackgroundJobRunner(),
        processing_routine=processing_routine,
    )


def _job_body(**overrides) -> dict[str, object]:
    body: dict[str, object] = {
        "job_id": "job_1",
        "target_entity": "e1",
        "target_collection": "tc1",
        "job_collection": "c1",
    }
    body.update(overrides)
    return body


def test_api_process_acknowledges_before_routine_completes(worker_settings, arke_backend) -> None:
    """The acceptance payload returns while the routine is still blocked."""

    release = threading.Event()
    routine_started = threading.Event()
    completed: list[str] = []

    async def _blocking_routine(job: JobHandle) -> list[str]:
        routine_started.set()
        await asyncio.to_thread(release.wait, 5)
        completed.append(job.request.job_id)
        return []

    application = _build_application(worker_settings, arke_backend, _blocking_routine)
    with TestClient(application) as client:
        response = client.post("/process", json=_job_body())

        assert response.status_code == 200
        assert response.json() == {
            "accepted": True,
            "job_id": "job_1",
            "klados_id": "klados_1",
            "status": "accepted",
        }
        assert completed == []
        assert routine_started.wait(5)
        release.set()

    assert completed == ["job_1"]
    assert application.state.job_runner.runner_pending_count() == 0


def test_api_process_runs_job_to_completion_after_response(worker_settings, arke_backend) -> None:
    """Target `e1` with job collection `c1` produces output `o1` once drained."""

    application = _build_application(worker_settings, arke_backend)
    with TestClient(application) as client:
        response = client.post("/process", json=_job_body())
        assert response.status_code == 200

    output = arke_backend.entities["o1"]
    assert output["collection"] == "c1"
    assert output["properties"]["source_id"] == "e1"
    assert output["relationships"][0]["predicate"] == "derived_from"
    assert output["relationships"][0]["peer"] == "e1"

    log_records = arke_backend.backend_entities_of_type("klados_log")
    assert len(log_records) == 1
    assert log_records[0]["properties"]["status"] == "done"
    assert log_records[0]["properties"]["outputs"] == ["o1"]
    assert arke_backend.factory_calls == [("https://arke.test", "ak_secret", "main")]


def test_api_process_returns_acceptance_even_when_job_fails(worker_settings, arke_backend) -> None:
    """Job failures are only visible in the job log, never in the response."""

    application = _build_application(worker_settings, arke_backend)
    with TestClient(application) as client:
        response = client.post("/process", json=_job_body(target_entity="missing"))
        assert response.status_code == 200
        assert response.json()["accepted"] is True

    assert arke_backend.backend_entities_of_type("processed_output") == []
    log_properties = arke_backend.backend_entities_of_type("klados_log")[0]["properties"]
    assert log_properties["status"] == "failed"
    assert log_properties["error"]["code"] == "NOT_FOUND"


def test_api_process_concurrent_requests_keep_separate_handles(worker_settings, arke_backend) -> None:
    """Two requests for different targets produce independent logs and outputs."""

    arke_backend.backend_add_entity("e2", "test_entity", {"title": "Second"})
    application = _build_application(worker_settings, arke_backend)
    with TestClient(application) as client:
        first = client.post("/process", json=_job_body(job_id="job_a", target_entity="e1"))
        second = client.post("/process", json=_job_body(job_id="job_b", target_entity="e2"))
        assert first.json()["job_id"] == "job_a"
        assert second.json()["job_id"] == "job_b"

    sources = sorted(
        entity["properties"]["source_id"] for entity in arke_backend.backend_entities_of_type("processed_output")
    )
    assert sources == ["e1", "e2"]
    logs_by_job = {
        entity["properties"]["job_id"]: entity["properties"]
        for entity in arke_backend.backend_entities_of_type("klados_log")
    }
    assert logs_by_job["job_a"]["target"] == "e1"
    assert logs_by_job["job_b"]["target"] == "e2"
    assert len(arke_backend.clients) == 2
    assert all(client.closed for client in arke_backend.clients)


def test_api_process_without_agent_key_returns_configuration_error(worker_settings, arke_backend) -> None:
    settings = worker_settings.model_copy(update={"arke_agent_key": None})
    application = _build_application(settings, arke_backend)

    with TestClient(application) as client:
        response = client.post("/process", json=_job_body())

    assert response.status_code == 500
    assert response.json() == {"error": "ARKE_AGENT_KEY is not configured"}
    assert arke_backend.factory_calls == []


def test_api_process_rejects_request_without_target(worker_settings, arke_backend) -> None:
    application = _build_application(worker_settings, arke_backend)

    with TestClient(application) as client:
        response = client.post("/process", json=_job_body(target_entity=None))

    assert response.status_code == 422
    assert arke_backend.factory_calls == []
