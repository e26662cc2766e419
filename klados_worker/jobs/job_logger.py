"""Per-job message collector written into the job log record."""

from __future__ import annotations

import logging
from typing import Any

from klados_worker.domain import domain_build_log_message

logger = logging.getLogger("klados_worker.jobs")

_PYTHON_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JobLogger:
    """Collect job log messages and mirror them to the service logger."""

    def __init__(self, job_id: str):
        if not job_id.strip():
            raise ValueError("job_id must not be blank")
        self._job_id = job_id
        self._messages: list[dict[str, object]] = []

    @property
    def messages(self) -> list[dict[str, object]]:
        """Return a copy of the collected messages in emission order."""

        return list(self._messages)

    def info(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._logger_append("info", message, metadata)

    def success(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._logger_append("success", message, metadata)

    def warning(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._logger_append("warning", message, metadata)

    def error(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._logger_append("error", message, metadata)

    def _logger_append(self, level: str, message: str, metadata: dict[str, Any] | None) -> None:
        self._messages.append(domain_build_log_message(level=level, message=message, metadata=metadata))
        logger.log(
            _PYTHON_LEVELS[level],
            "job_id=%s level=%s message=%s metadata=%s",
            self._job_id,
            level,
            message,
            metadata or {},
        )
