"""
Background execution for uploads.

A thin wrapper around ThreadPoolExecutor. The pool is bounded, which
also bounds how many scratch files exist at once: one per running task.

Tasks that raise are logged here through a done-callback, so an
exception is never lost even when the caller drops the Future.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable

logger = logging.getLogger(__name__)


class BackgroundTaskRunner:
    """Runs callables on a bounded thread pool."""

    def __init__(self, max_workers: int = 4, thread_name_prefix: str = "upload") -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self._max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
        )

        logger.info("Initialized background task runner", extra={"max_workers": max_workers})

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def submit(
        self,
        fn: Callable[..., Any],
        *args: Any,
        description: str = "",
        **kwargs: Any,
    ) -> Future:
        """Schedule fn(*args, **kwargs) and return its Future."""
        future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(lambda f: self._log_failure(f, description))
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work; by default wait for in-flight tasks."""
        logger.info("Shutting down background task runner", extra={"wait": wait})
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _log_failure(future: Future, description: str) -> None:
        if future.cancelled():
            return

        exc = future.exception()
        if exc is not None:
            logger.error(
                "Background task failed",
                extra={"task": description, "error": str(exc)},
                exc_info=exc,
            )
