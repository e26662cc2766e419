"""Job handle owning one job's accept, run, and finalize lifecycle."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final

from klados_worker.adapters import ArkeClientFactory, ArkeClientPort
from klados_worker.config import WorkerConfigurationError
from klados_worker.domain import (
    AgentIdentity,
    BatchPosition,
    EntityRelationship,
    JobRequest,
    OutputEntityDraft,
    TargetEntity,
    domain_utc_now_iso,
)

from .error_codes import (
    JobError,
    JobErrorCode,
    JobErrorDetail,
    TargetValidationError,
    WorkflowHandoffError,
    job_error_classify,
)
from .interfaces import JobRunResult, JobStatus, ProcessingRoutine
from .job_logger import JobLogger

logger = logging.getLogger("klados_worker.jobs")


class JobHandle:
    """Lifecycle wrapper around one accepted job request.

    A handle writes exactly one log record, reports the batch slot at most
    once, and hands produced outputs to the next workflow stage. It is owned
    by the request that created it and runs once.
    """

    _LOG_ENTITY_TYPE: Final[str] = "klados_log"
    _PARENT_LOG_PREDICATE: Final[str] = "received_from"
    _CANCELLED_MESSAGE: Final[str] = "job cancelled before completion"

    def __init__(self, request: JobRequest, identity: AgentIdentity, client: ArkeClientPort):
        """Initialize a handle; use `job_accept` to build one from a request.

        Args:
            request: Validated job request.
            identity: Static agent identity.
            client: Arke client bound to this job.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if request is None:
            raise ValueError("request must not be None")
        if identity is None:
            raise ValueError("identity must not be None")
        if client is None:
            raise ValueError("client must not be None")

        self._request = request
        self._identity = identity
        self._client = client
        self._log = JobLogger(job_id=request.job_id)
        self._status = JobStatus.ACCEPTED

    @classmethod
    def job_accept(
        cls,
        request: JobRequest,
        identity: AgentIdentity,
        client_factory: ArkeClientFactory,
        default_api_base: str,
    ) -> JobHandle:
        """Accept a job request and bind it to agent credentials.

        The request's `api_base` is trusted as supplied by the Arke platform:
        the per-job client sends the agent key to it. Deployments that expose
        `/process` to untrusted callers must front it with their own checks.

        Args:
            request: Validated job request.
            identity: Static agent identity.
            client_factory: Builder for the per-job Arke client.
            default_api_base: API base used when the request carries none.

        Returns:
            JobHandle: Handle in `accepted` state.

        Raises:
            WorkerConfigurationError: Raised when agent id or agent key is not configured.
        """

        if not identity.agent_id:
            raise WorkerConfigurationError("AGENT_ID is not configured")
        if not identity.auth_token:
            raise WorkerConfigurationError("ARKE_AGENT_KEY is not configured")

        api_base = (request.api_base or "").strip() or default_api_base
        client = client_factory(api_base, identity.auth_token, request.network)
        return cls(request=request, identity=identity, client=client)

    @property
    def request(self) -> JobRequest:
        return self._request

    @property
    def identity(self) -> AgentIdentity:
        return self._identity

    @property
    def client(self) -> ArkeClientPort:
        return self._client

    @property
    def log(self) -> JobLogger:
        return self._log

    @property
    def status(self) -> JobStatus:
        return self._status

    @property
    def is_workflow(self) -> bool:
        """Return whether this invocation is one stage of a rhiza workflow."""

        return self._request.rhiza is not None

    @property
    def batch_position(self) -> BatchPosition | None:
        """Return the scatter position when this invocation is one batch item."""

        if self._request.rhiza is None:
            return None
        return self._request.rhiza.batch

    @property
    def accept_response(self) -> dict[str, object]:
        """Return the acknowledgment payload sent back from `/process`."""

        return {
            "accepted": True,
            "job_id": self._request.job_id,
            "klados_id": self._identity.agent_id,
            "status": JobStatus.ACCEPTED.value,
        }

    def job_output_collection(self) -> str:
        """Return the collection that receives the job log and outputs."""

        return self._request.job_collection or self._request.target_collection

    async def job_fetch_target(self) -> TargetEntity:
        """Fetch the single target entity named by the request.

        Returns:
            TargetEntity: Fetched target entity.

        Raises:
            TargetValidationError: Raised when the request names more than one target.
            ArkeApiError: Raised when the fetch fails.
        """

        target_ids = self._request.request_target_ids()
        if len(target_ids) != 1:
            raise TargetValidationError(
                f"job names {len(target_ids)} targets; a single target fetch needs exactly one"
            )
        return await self._client.client_get_entity(target_ids[0])

    async def job_fetch_targets(self) -> list[TargetEntity]:
        """Fetch every target entity named by the request, in request order."""

        targets: list[TargetEntity] = []
        for target_id in self._request.request_target_ids():
            targets.append(await self._client.client_get_entity(target_id))
        return targets

    async def job_run(self, routine: ProcessingRoutine) -> JobRunResult:
        """Run the processing routine and finalize the job.

        The handle moves `accepted -> running -> {done | failed}`. Failures from
        the routine, the hand-off, or the batch slot report are classified and
        recorded on the log record; this method does not raise them. A
        cancelled run is finalized as `failed` with the batch slot reported
        before the cancellation propagates.

        Args:
            routine: Async processing routine returning output entity ids.

        Returns:
            JobRunResult: Terminal status, outputs, and classified error.

        Raises:
            RuntimeError: Raised when the handle has already run.
            asyncio.CancelledError: Re-raised after a cancelled run is finalized.
        """

        if self._status is not JobStatus.ACCEPTED:
            raise RuntimeError(f"job {self._request.job_id} has already run")
        self._status = JobStatus.RUNNING

        output_ids: list[str] = []
        error_detail: JobErrorDetail | None = None
        log_entity_id: str | None = None
        cancellation: asyncio.CancelledError | None = None

        try:
            try:
                log_entity_id = await self._client.client_create_entity(self._job_build_log_record())
                output_ids = self._job_normalize_output_ids(await routine(self))
                if self.is_workflow and output_ids:
                    await self._job_handoff(output_ids=output_ids, log_entity_id=log_entity_id)
            except asyncio.CancelledError as error:
                cancellation = error
                error_detail = self._job_record_failure(
                    JobError(self._CANCELLED_MESSAGE, error_code=JobErrorCode.INTERNAL_ERROR.value)
                )
            except Exception as error:  # classified and recorded on the job log
                error_detail = self._job_record_failure(error)

            if self.batch_position is not None:
                try:
                    await self._job_report_batch_slot(output_ids=output_ids, error_detail=error_detail)
                except Exception as error:  # classified and recorded on the job log
                    slot_error_detail = self._job_record_failure(error)
                    error_detail = error_detail or slot_error_detail

            self._status = JobStatus.DONE if error_detail is None else JobStatus.FAILED
            if log_entity_id is not None:
                await self._job_finalize_log_record(
                    log_entity_id=log_entity_id,
                    output_ids=output_ids,
                    error_detail=error_detail,
                )
        finally:
            await self._job_close_client()

        logger.info(
            "job_finished job_id=%s status=%s outputs=%d",
            self._request.job_id,
            self._status.value,
            len(output_ids),
        )
        if cancellation is not None:
            raise cancellation
        return JobRunResult(
            job_id=self._request.job_id,
            status=self._status,
            output_ids=tuple(output_ids),
            error=error_detail,
            log_entity_id=log_entity_id,
        )

    def _job_build_log_record(self) -> OutputEntityDraft:
        target_ids = self._request.request_target_ids()
        properties: dict[str, Any] = {
            "job_id": self._request.job_id,
            "klados_id": self._identity.agent_id,
            "agent_version": self._identity.agent_version,
            "status": JobStatus.RUNNING.value,
            "target": target_ids[0] if len(target_ids) == 1 else target_ids,
            "target_collection": self._request.target_collection,
            "started_at": domain_utc_now_iso(),
        }
        relationships: tuple[EntityRelationship, ...] = ()
        workflow = self._request.rhiza
        if workflow is not None:
            properties["rhiza_id"] = workflow.id
            properties["path"] = list(workflow.path)
            if workflow.batch is not None:
                properties["batch"] = workflow.batch.model_dump()
            relationships = tuple(
                EntityRelationship(predicate=self._PARENT_LOG_PREDICATE, peer=parent_log_id)
                for parent_log_id in workflow.parent_logs
            )
        return OutputEntityDraft(
            type=self._LOG_ENTITY_TYPE,
            collection=self.job_output_collection(),
            properties=properties,
            relationships=relationships,
        )

    def _job_normalize_output_ids(self, output_ids: object) -> list[str]:
        if not isinstance(output_ids, (list, tuple)):
            raise TypeError("processing routine must return a list of output entity ids")
        normalized_ids: list[str] = []
        for output_id in output_ids:
            if not isinstance(output_id, str) or not output_id.strip():
                raise TypeError("processing routine returned a blank or non-string output id")
            normalized_ids.append(output_id.strip())
        return normalized_ids

    async def _job_handoff(self, output_ids: list[str], log_entity_id: str) -> None:
        workflow = self._request.rhiza
        if workflow is None:
            return
        payload: dict[str, Any] = {
            "job_id": self._request.job_id,
            "klados_id": self._identity.agent_id,
            "path": list(workflow.path),
            "outputs": list(output_ids),
            "log_id": log_entity_id,
        }
        if workflow.batch is not None:
            payload["batch"] = workflow.batch.model_dump()
        try:
            await self._client.client_workflow_handoff(workflow.id, payload)
        except Exception as error:
            raise WorkflowHandoffError(f"Workflow hand-off failed: {error}") from error
        self._log.info("Handed off outputs to next workflow step", {"outputs": list(output_ids)})

    async def _job_report_batch_slot(self, output_ids: list[str], error_detail: JobErrorDetail | None) -> None:
        batch = self.batch_position
        if batch is None:
            return
        payload: dict[str, Any] = {
            "job_id": self._request.job_id,
            "status": JobStatus.DONE.value if error_detail is None else JobStatus.FAILED.value,
            "output_ids": list(output_ids),
        }
        if error_detail is not None:
            payload["error"] = error_detail.detail_to_payload()
        await self._client.client_update_batch_slot(batch.id, batch.index, payload)

    async def _job_finalize_log_record(
        self,
        log_entity_id: str,
        output_ids: list[str],
        error_detail: JobErrorDetail | None,
    ) -> None:
        properties: dict[str, Any] = {
            "status": self._status.value,
            "completed_at": domain_utc_now_iso(),
            "outputs": list(output_ids),
            "log_data": {"messages": self._log.messages},
        }
        if error_detail is not None:
            properties["error"] = error_detail.detail_to_payload()
        try:
            await self._client.client_update_entity(log_entity_id, properties)
        except Exception:
            logger.exception(
                "job_log_finalize_failed job_id=%s log_id=%s",
                self._request.job_id,
                log_entity_id,
            )

    def _job_record_failure(self, error: Exception) -> JobErrorDetail:
        error_detail = job_error_classify(error)
        self._log.error(error_detail.message, error_detail.detail_to_payload())
        logger.warning(
            "job_failed job_id=%s code=%s",
            self._request.job_id,
            error_detail.code,
            exc_info=error,
        )
        return error_detail

    async def _job_close_client(self) -> None:
        try:
            await self._client.client_close()
        except Exception:
            logger.exception("job_client_close_failed job_id=%s", self._request.job_id)
