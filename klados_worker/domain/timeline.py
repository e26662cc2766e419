"""Shared job log message helper utilities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

JOB_LOG_LEVELS = frozenset({"info", "success", "warning", "error"})


def domain_utc_now_iso() -> str:
    """Return the current UTC timestamp in ISO-8601 form."""

    return datetime.now(timezone.utc).isoformat()


def domain_build_log_message(
    level: str,
    message: str,
    metadata: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured job log message payload.

    Args:
        level: Message level (`info`, `success`, `warning`, `error`).
        message: Human-readable message text.
        metadata: Optional structured details object.

    Returns:
        dict[str, object]: Structured log message.

    Raises:
        ValueError: Raised when level is not a supported job log level.
    """

    if level not in JOB_LOG_LEVELS:
        raise ValueError(f"unsupported job log level={level}")

    message_payload: dict[str, object] = {
        "level": level,
        "message": message,
        "at_utc": domain_utc_now_iso(),
    }
    if metadata is not None:
        message_payload["metadata"] = metadata
    return message_payload
