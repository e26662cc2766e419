"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from klados_worker.adapters import adapter_create_arke_client_factory
from klados_worker.api import create_api_application
from klados_worker.config import WorkerSettings, config_load_settings
from klados_worker.domain import AgentIdentity
from klados_worker.jobs import BackgroundJobRunner, process_job


def bootstrap_create_identity(settings: WorkerSettings) -> AgentIdentity:
    """Build the immutable agent identity shared by handler and job handles.

    Args:
        settings: Validated runtime settings.

    Returns:
        AgentIdentity: Agent id, version, and auth token.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return AgentIdentity(
        agent_id=settings.agent_id,
        agent_version=settings.agent_version,
        auth_token=settings.arke_agent_key,
    )


def bootstrap_create_application(settings: WorkerSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    return create_api_application(
        settings=resolved_settings,
        identity=bootstrap_create_identity(resolved_settings),
        client_factory=adapter_create_arke_client_factory(
            request_timeout_seconds=resolved_settings.arke_request_timeout_seconds,
        ),
        job_runner=BackgroundJobRunner(),
        processing_routine=process_job,
    )
