"""Job intake router composition for the `/process` endpoint."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from klados_worker.adapters import ArkeClientFactory
from klados_worker.domain import AgentIdentity, JobRequest
from klados_worker.jobs import BackgroundJobRunner, JobHandle, ProcessingRoutine


def api_create_process_router(
    identity: AgentIdentity,
    client_factory: ArkeClientFactory,
    job_runner: BackgroundJobRunner,
    processing_routine: ProcessingRoutine,
    default_api_base: str,
) -> APIRouter:
    """Create router that accepts jobs and runs them after responding.

    Args:
        identity: Static agent identity bound to every job handle.
        client_factory: Builder for per-job Arke clients.
        job_runner: Runner holding detached job tasks.
        processing_routine: Routine executed inside each job handle.
        default_api_base: Arke API base used when a request carries none.

    Returns:
        APIRouter: Router exposing `POST /process`.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if identity is None:
        raise ValueError("identity must not be None")
    if client_factory is None:
        raise ValueError("client_factory must not be None")
    if job_runner is None:
        raise ValueError("job_runner must not be None")
    if processing_routine is None:
        raise ValueError("processing_routine must not be None")
    if not default_api_base.strip():
        raise ValueError("default_api_base must not be blank")

    router = APIRouter(tags=["jobs"])

    @router.post("/process")
    async def api_process_job(job_request: JobRequest) -> JSONResponse:
        """Accept one job and schedule its processing.

        Args:
            job_request: Validated job request body.

        Returns:
            JSONResponse: Handle acceptance payload; job outcome is only in the job log.

        Raises:
            WorkerConfigurationError: Raised when agent credentials are not configured.
        """

        job = JobHandle.job_accept(
            request=job_request,
            identity=identity,
            client_factory=client_factory,
            default_api_base=default_api_base,
        )
        job_runner.runner_schedule(job.job_run(processing_routine), name=f"job:{job_request.job_id}")
        return JSONResponse(content=job.accept_response, status_code=status.HTTP_200_OK)

    return router
