"""Run-after-response primitive for detached job execution."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

logger = logging.getLogger("klados_worker.jobs")


class BackgroundJobRunner:
    """Track detached job tasks so shutdown can wait for them.

    Tasks are scheduled on the running event loop and held by strong
    reference until they finish. `runner_drain` is awaited by the
    application lifespan before the process exits.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def runner_schedule(self, job_coroutine: Coroutine[Any, Any, Any], name: str | None = None) -> asyncio.Task[Any]:
        """Schedule one coroutine as a detached task.

        Args:
            job_coroutine: Coroutine to run independently of the caller.
            name: Optional task name for diagnostics.

        Returns:
            asyncio.Task: Scheduled task.

        Raises:
            RuntimeError: Raised when called without a running event loop.
        """

        task = asyncio.get_running_loop().create_task(job_coroutine, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._runner_on_task_done)
        return task

    def runner_pending_count(self) -> int:
        """Return the number of scheduled tasks that have not finished."""

        return len(self._tasks)

    async def runner_drain(self, timeout_seconds: float | None = None) -> int:
        """Wait for every scheduled task to finish.

        Tasks scheduled while draining are waited for as well. The timeout
        bounds the whole drain. Tasks still running at the deadline are
        cancelled and awaited so their own cleanup runs before returning.

        Args:
            timeout_seconds: Optional upper bound on the wait.

        Returns:
            int: Number of tasks cancelled at the deadline.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        loop = asyncio.get_running_loop()
        deadline = None if timeout_seconds is None else loop.time() + timeout_seconds
        while self._tasks:
            remaining_seconds = None if deadline is None else max(0.0, deadline - loop.time())
            pending_tasks = set(self._tasks)
            _, still_pending = await asyncio.wait(pending_tasks, timeout=remaining_seconds)
            if still_pending:
                logger.warning("runner_drain_timeout pending=%d", len(still_pending))
                for task in still_pending:
                    task.cancel()
                await asyncio.gather(*still_pending, return_exceptions=True)
                return len(still_pending)
        return 0

    def _runner_on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("detached_task_cancelled name=%s", task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error("detached_task_failed name=%s", task.get_name(), exc_info=error)
