"""Health and endpoint-verification router composition."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from klados_worker.config import WorkerConfigurationError, WorkerSettings
from klados_worker.domain import AgentIdentity

VERIFICATION_PATH = "/.well-known/arke-verification"


def api_create_health_router(settings: WorkerSettings, identity: AgentIdentity) -> APIRouter:
    """Create router exposing identity health and Arke ownership verification.

    Args:
        settings: Runtime settings holding verification material.
        identity: Static agent identity reported by `/health`.

    Returns:
        APIRouter: Router exposing `/health` and the verification endpoint.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if settings is None:
        raise ValueError("settings must not be None")
    if identity is None:
        raise ValueError("identity must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return static agent identity for operational checks.

        Returns:
            JSONResponse: Status, agent id, and version payload.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        payload = {
            "status": "ok",
            "agent_id": identity.agent_id,
            "version": identity.agent_version,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get(VERIFICATION_PATH)
    def api_arke_verification() -> JSONResponse:
        """Return the verification token and klados id issued at registration.

        The verification-specific id is published while AGENT_ID is still
        unset; afterwards the primary agent id is used.

        Returns:
            JSONResponse: Verification token and klados id.

        Raises:
            WorkerConfigurationError: Raised when the token or both ids are missing.
        """

        verification_token = settings.verification_token
        klados_id = settings.settings_resolve_verification_agent_id()
        if not verification_token or not klados_id:
            raise WorkerConfigurationError("Verification not configured")

        payload = {
            "verification_token": verification_token,
            "klados_id": klados_id,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
