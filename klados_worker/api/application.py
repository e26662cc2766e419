"""FastAPI application factory for the klados worker.

This module composes routers, the request-id middleware, configuration
error mapping, and the lifespan hook that drains detached jobs.
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from klados_worker.adapters import ArkeClientFactory
from klados_worker.config import WorkerConfigurationError, WorkerSettings
from klados_worker.domain import AgentIdentity
from klados_worker.jobs import BackgroundJobRunner, ProcessingRoutine, process_job

from .routers import api_create_health_router, api_create_process_router

logger = logging.getLogger("klados_worker.api")


def create_api_application(
    settings: WorkerSettings,
    identity: AgentIdentity,
    client_factory: ArkeClientFactory,
    job_runner: BackgroundJobRunner | None = None,
    processing_routine: ProcessingRoutine = process_job,
) -> FastAPI:
    """Create the FastAPI application instance for the worker.

    Args:
        settings: Validated settings used for verification and shutdown policy.
        identity: Static agent identity shared by handler and job handles.
        client_factory: Builder for per-job Arke clients.
        job_runner: Optional runner for detached jobs; a new one is built when omitted.
        processing_routine: Routine executed inside each job handle.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """

    runner = job_runner or BackgroundJobRunner()

    @asynccontextmanager
    async def api_lifespan(_application: FastAPI):
        yield
        pending_count = runner.runner_pending_count()
        if pending_count:
            logger.info("shutdown_draining_jobs pending=%d", pending_count)
        await runner.runner_drain(timeout_seconds=settings.shutdown_drain_timeout_seconds)

    application = FastAPI(title="Klados Worker", lifespan=api_lifespan)
    application.state.job_runner = runner

    @application.middleware("http")
    async def api_request_id_middleware(request: Request, call_next):
        """Attach a request id to every response and log one access line."""

        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "access request_id=%s method=%s path=%s status=%s duration_ms=%.2f",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    @application.exception_handler(WorkerConfigurationError)
    async def api_configuration_error_handler(request: Request, exc: WorkerConfigurationError) -> JSONResponse:
        logger.error(
            "configuration_error request_id=%s path=%s detail=%s",
            getattr(request.state, "request_id", None),
            request.url.path,
            exc,
        )
        return JSONResponse(
            content={"error": str(exc)},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    application.include_router(api_create_health_router(settings=settings, identity=identity))
    application.include_router(
        api_create_process_router(
            identity=identity,
            client_factory=client_factory,
            job_runner=runner,
            processing_routine=processing_routine,
            default_api_base=settings.arke_api_base,
        )
    )

    return application
