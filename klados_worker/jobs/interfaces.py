"""Typed interfaces for job-layer lifecycle responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Awaitable, Callable

from .error_codes import JobErrorDetail

if TYPE_CHECKING:
    from .handle import JobHandle


class JobStatus(str, Enum):
    """Lifecycle states of one job handle."""

    ACCEPTED = "accepted"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class JobRunResult:
    """Result contract for one finished job lifecycle.

    Attributes:
        job_id: Platform job identifier.
        status: Terminal state (`done` or `failed`).
        output_ids: Entity ids produced by the routine.
        error: Classified failure when status is `failed`.
        log_entity_id: Id of the job log record, when it could be created.
    """

    job_id: str
    status: JobStatus
    output_ids: tuple[str, ...] = ()
    error: JobErrorDetail | None = None
    log_entity_id: str | None = None


ProcessingRoutine = Callable[["JobHandle"], Awaitable[list[str]]]
