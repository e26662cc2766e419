"""Domain models used across application layer boundaries."""

from .models import (
    DERIVED_FROM_PREDICATE,
    AgentIdentity,
    BatchPosition,
    EntityRelationship,
    JobRequest,
    OutputEntityDraft,
    TargetEntity,
    WorkflowContext,
)
from .timeline import JOB_LOG_LEVELS, domain_build_log_message, domain_utc_now_iso

__all__ = [
    "DERIVED_FROM_PREDICATE",
    "JOB_LOG_LEVELS",
    "AgentIdentity",
    "BatchPosition",
    "EntityRelationship",
    "JobRequest",
    "OutputEntityDraft",
    "TargetEntity",
    "WorkflowContext",
    "domain_build_log_message",
    "domain_utc_now_iso",
]
