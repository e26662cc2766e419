"""Job processing logic executed inside a running job handle.

`process_job` is the routine handed to `JobHandle.job_run`. It fetches the
target, validates it, transforms it, creates one output entity, and returns
the output ids for workflow hand-off. Logging, error recording, and hand-off
stay with the handle.
"""

from __future__ import annotations

from typing import Any, Final

from klados_worker.adapters import ArkeApiError
from klados_worker.domain import (
    DERIVED_FROM_PREDICATE,
    EntityRelationship,
    OutputEntityDraft,
    TargetEntity,
    domain_utc_now_iso,
)

from .error_codes import OutputCreationError, TargetValidationError
from .handle import JobHandle

OUTPUT_ENTITY_TYPE: Final[str] = "processed_output"


async def process_job(job: JobHandle) -> list[str]:
    """Process one job and return the ids of the outputs it created.

    Args:
        job: Running job handle.

    Returns:
        list[str]: Output entity ids for the next workflow step.

    Raises:
        TargetValidationError: Raised when the target fails validation.
        OutputCreationError: Raised when the output entity cannot be created.
        ArkeApiError: Raised when the target fetch fails.
    """

    job.log.info(
        "Starting job processing",
        {"targets": job.request.request_target_ids(), "is_workflow": job.is_workflow},
    )

    target = await job.job_fetch_target()
    job.log.info(
        "Fetched target entity",
        {"id": target.id, "type": target.type, "title": target.properties.get("title")},
    )

    job_processing_validate_target(target)

    job.log.info("Processing entity")
    result = await job_processing_transform(target)
    job.log.info("Processing complete", {"result_length": len(result)})

    draft = OutputEntityDraft(
        type=OUTPUT_ENTITY_TYPE,
        collection=job.job_output_collection(),
        properties={
            "result": result,
            "source_id": target.id,
            "processed_at": domain_utc_now_iso(),
        },
        relationships=(
            EntityRelationship(predicate=DERIVED_FROM_PREDICATE, peer=target.id, peer_type=target.type or None),
        ),
    )
    try:
        output_id = await job.client.client_create_entity(draft)
    except ArkeApiError as error:
        raise OutputCreationError(f"Failed to create output entity: {error}") from error

    job.log.success("Created output entity", {"output_id": output_id})
    return [output_id]


def job_processing_validate_target(target: TargetEntity) -> None:
    """Validate that the target carries text to process.

    Args:
        target: Fetched target entity.

    Returns:
        None: Returns when the target is valid.

    Raises:
        TargetValidationError: Raised when neither `title` nor `content` holds text.
    """

    for property_name in ("title", "content"):
        value = target.properties.get(property_name)
        if isinstance(value, str) and value.strip():
            return
    raise TargetValidationError(f"Target entity {target.id} must have a title or content property")


async def job_processing_transform(target: TargetEntity) -> str:
    """Transform the target into the output result text."""

    title: Any = target.properties.get("title")
    label = title.strip() if isinstance(title, str) and title.strip() else "untitled"
    return f"Processed entity {target.id}: {label}"
