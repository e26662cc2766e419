"""Tests for health and endpoint-verification behavior."""

from fastapi.testclient import TestClient

from klados_worker.api.application import create_api_application
from klados_worker.bootstrap import bootstrap_create_identity
from klados_worker.config import WorkerSettings


def _build_settings(**overrides) -> WorkerSettings:
    """Create deterministic test settings.

    Returns:
        WorkerSettings: Settings with agent identity and verification material.

    Raises:
        ValueError: Raised by WorkerSettings when values are invalid.
    """

    values = {
        "environment_name": "test",
        "agent_id": "klados_main",
        "agent_version": "2.0.0",
        "arke_agent_key": "ak_secret",
        "verification_token": "vt_token",
        "arke_verify_agent_id": None,
        "arke_api_base": "https://arke.test",
    }
    values.update(overrides)
    return WorkerSettings(**values)


def _build_client(settings: WorkerSettings, arke_backend) -> TestClient:
    application = create_api_application(
        settings=settings,
        identity=bootstrap_create_identity(settings),
        client_factory=arke_backend.client_factory,
    )
    return TestClient(application)


def test_api_health_returns_configured_identity(arke_backend) -> None:
    """Return HTTP 200 with the configured agent id and version on every call."""

    client = _build_client(_build_settings(), arke_backend)

    first_response = client.get("/health")
    second_response = client.get("/health")

    assert first_response.status_code == 200
    assert first_response.json() == {"status": "ok", "agent_id": "klados_main", "version": "2.0.0"}
    assert second_response.json() == first_response.json()
    assert arke_backend.factory_calls == []


def test_api_health_reports_unset_agent_id_as_null(arke_backend) -> None:
    client = _build_client(_build_settings(agent_id=None), arke_backend)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["agent_id"] is None


def test_api_verification_prefers_verification_agent_id(arke_backend) -> None:
    """Verification-specific id wins when both ids are configured."""

    client = _build_client(_build_settings(arke_verify_agent_id="klados_pending"), arke_backend)

    response = client.get("/.well-known/arke-verification")

    assert response.status_code == 200
    assert response.json() == {"verification_token": "vt_token", "klados_id": "klados_pending"}


def test_api_verification_falls_back_to_agent_id(arke_backend) -> None:
    client = _build_client(_build_settings(arke_verify_agent_id="  "), arke_backend)

    response = client.get("/.well-known/arke-verification")

    assert response.status_code == 200
    assert response.json()["klados_id"] == "klados_main"


def test_api_verification_works_before_agent_id_is_set(arke_backend) -> None:
    client = _build_client(_build_settings(agent_id=None, arke_verify_agent_id="klados_pending"), arke_backend)

    response = client.get("/.well-known/arke-verification")

    assert response.status_code == 200
    assert response.json()["klados_id"] == "klados_pending"


def test_api_verification_without_token_returns_configuration_error(arke_backend) -> None:
    client = _build_client(_build_settings(verification_token=None), arke_backend)

    response = client.get("/.well-known/arke-verification")

    assert response.status_code == 500
    assert response.json() == {"error": "Verification not configured"}


def test_api_verification_without_any_id_returns_configuration_error(arke_backend) -> None:
    client = _build_client(_build_settings(agent_id=None, arke_verify_agent_id=None), arke_backend)

    response = client.get("/.well-known/arke-verification")

    assert response.status_code == 500
    assert response.json() == {"error": "Verification not configured"}


def test_api_responses_carry_request_id(arke_backend) -> None:
    """Supplied request ids are echoed; missing ones are generated."""

    client = _build_client(_build_settings(), arke_backend)

    echoed = client.get("/health", headers={"X-Request-ID": "req-123"})
    generated = client.get("/health")

    assert echoed.headers["X-Request-ID"] == "req-123"
    assert generated.headers["X-Request-ID"]
