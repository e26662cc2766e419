"""Job layer package for job lifecycle and processing boundaries."""

from .error_codes import (
	JOB_ERROR_DEFAULT_MESSAGES,
	JOB_RETRYABLE_ERROR_CODES,
	JobError,
	JobErrorCode,
	JobErrorDetail,
	OutputCreationError,
	TargetValidationError,
	WorkflowHandoffError,
	job_error_classify,
)
from .handle import JobHandle
from .interfaces import JobRunResult, JobStatus, ProcessingRoutine
from .job_logger import JobLogger
from .processing import OUTPUT_ENTITY_TYPE, job_processing_validate_target, process_job
from .runner import BackgroundJobRunner

__all__ = [
	"BackgroundJobRunner",
	"JOB_ERROR_DEFAULT_MESSAGES",
	"JOB_RETRYABLE_ERROR_CODES",
	"JobError",
	"JobErrorCode",
	"JobErrorDetail",
	"JobHandle",
	"JobLogger",
	"JobRunResult",
	"JobStatus",
	"OUTPUT_ENTITY_TYPE",
	"OutputCreationError",
	"ProcessingRoutine",
	"TargetValidationError",
	"WorkflowHandoffError",
	"job_error_classify",
	"job_processing_validate_target",
	"process_job",
]
