"""Canonical job error codes and exception classification for job logs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final

from klados_worker.adapters import (
    ArkeApiConnectionError,
    ArkeApiError,
    ArkeApiTimeoutError,
    ArkeNotFoundError,
    ArkePermissionError,
    ArkeRequestError,
)


class JobErrorCode(str, Enum):
    """Error codes written to the job log and batch slot on failure."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    API_ERROR = "API_ERROR"
    OUTPUT_CREATION_FAILED = "OUTPUT_CREATION_FAILED"
    HANDOFF_FAILED = "HANDOFF_FAILED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


JOB_ERROR_DEFAULT_MESSAGES: Final[dict[str, str]] = {
    JobErrorCode.INVALID_INPUT.value: "Target entity failed validation.",
    JobErrorCode.NOT_FOUND.value: "Requested entity was not found.",
    JobErrorCode.PERMISSION_DENIED.value: "Agent is not permitted to perform this operation.",
    JobErrorCode.NETWORK_ERROR.value: "Network failure while calling the Arke API.",
    JobErrorCode.TIMEOUT.value: "Arke API call timed out.",
    JobErrorCode.API_ERROR.value: "Arke API call failed.",
    JobErrorCode.OUTPUT_CREATION_FAILED.value: "Output entity could not be created.",
    JobErrorCode.HANDOFF_FAILED.value: "Workflow hand-off failed.",
    JobErrorCode.INTERNAL_ERROR.value: "Unexpected error during job processing.",
}

JOB_RETRYABLE_ERROR_CODES: Final[frozenset[str]] = frozenset(
    {
        JobErrorCode.NETWORK_ERROR.value,
        JobErrorCode.TIMEOUT.value,
        JobErrorCode.API_ERROR.value,
    }
)


@dataclass(frozen=True)
class JobErrorDetail:
    """Classified failure recorded on the job log.

    Attributes:
        code: Canonical job error code.
        message: Human-readable failure message.
        retryable: Whether a caller may reasonably retry the job.
    """

    code: str
    message: str
    retryable: bool

    def detail_to_payload(self) -> dict[str, object]:
        return {"code": self.code, "message": self.message, "retryable": self.retryable}


class JobError(Exception):
    """Base exception for typed job failures raised by processing routines.

    Attributes:
        error_code: Canonical job error code.
    """

    default_error_code: str = JobErrorCode.INTERNAL_ERROR.value

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code or self.default_error_code


class TargetValidationError(JobError, ValueError):
    """Target entity does not satisfy the routine's business checks."""

    default_error_code = JobErrorCode.INVALID_INPUT.value


class OutputCreationError(JobError, RuntimeError):
    """Output entity creation failed or returned no id."""

    default_error_code = JobErrorCode.OUTPUT_CREATION_FAILED.value


class WorkflowHandoffError(JobError, RuntimeError):
    """Hand-off to the next workflow stage failed."""

    default_error_code = JobErrorCode.HANDOFF_FAILED.value


def job_error_classify(error: BaseException) -> JobErrorDetail:
    """Map any exception raised during a job to a classified error detail.

    Args:
        error: Exception raised by the routine or by handle bookkeeping.

    Returns:
        JobErrorDetail: Code, message, and retryable flag.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(error, JobError):
        error_code = error.error_code
    elif isinstance(error, ArkeNotFoundError):
        error_code = JobErrorCode.NOT_FOUND.value
    elif isinstance(error, ArkePermissionError):
        error_code = JobErrorCode.PERMISSION_DENIED.value
    elif isinstance(error, ArkeRequestError):
        error_code = JobErrorCode.INVALID_INPUT.value
    elif isinstance(error, (ArkeApiTimeoutError, TimeoutError)):
        error_code = JobErrorCode.TIMEOUT.value
    elif isinstance(error, (ArkeApiConnectionError, ConnectionError)):
        error_code = JobErrorCode.NETWORK_ERROR.value
    elif isinstance(error, ArkeApiError):
        error_code = JobErrorCode.API_ERROR.value
    else:
        error_code = JobErrorCode.INTERNAL_ERROR.value

    message = str(error).strip() or JOB_ERROR_DEFAULT_MESSAGES.get(
        error_code,
        JOB_ERROR_DEFAULT_MESSAGES[JobErrorCode.INTERNAL_ERROR.value],
    )
    return JobErrorDetail(
        code=error_code,
        message=message,
        retryable=error_code in JOB_RETRYABLE_ERROR_CODES,
    )
