"""Cancellation-aware retry with exponential backoff and jitter.

Every remote call a pipeline worker makes goes through RetryExecutor.run:
  1. Cancellation is checked before each attempt and again after a failure,
     so a cancel request that lands mid-call is never reported as a plain
     transient error.
  2. Errors declared non-retriable abort immediately.
  3. Otherwise the executor waits ``initial_delay * 2**(n-1)`` plus up to
     ``jitter_ratio`` of that, yielding to the event loop while it waits.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

from docflow.core.config import RetryConfig
from docflow.tasks.cancellation import CancellationRegistry
from docflow.tasks.errors import ErrorKind, TaskCancelledError, error_kind

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[None]]


class RetryExecutor:
    """Runs fallible operations with bounded retries."""

    def __init__(
        self,
        cancellation: CancellationRegistry | None = None,
        config: RetryConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.cancellation = cancellation
        self.config = config or RetryConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()

    def backoff_delay(self, attempts: int, initial_delay: float) -> float:
        """Delay after ``attempts`` failed attempts, jitter included."""
        base = initial_delay * 2 ** (attempts - 1)
        return base + self._rng.uniform(0, self.config.jitter_ratio * base)

    async def run(
        self,
        operation: Callable[[], Awaitable[T] | T],
        max_attempts: int | None = None,
        initial_delay: float | None = None,
        task_id: str | None = None,
        description: str = "operation",
    ) -> T:
        """Invoke ``operation`` until it succeeds or retrying stops making sense.

        Args:
            operation: Zero-argument callable; may return an awaitable.
            max_attempts: Total attempts allowed (defaults to config).
            initial_delay: Seconds before the first retry (defaults to config).
            task_id: Task whose cancellation flag is honored.
            description: Label used in log lines.

        Returns:
            The operation's result.

        Raises:
            TaskCancelledError: Cancellation was observed for ``task_id``.
            Exception: The last failure, unchanged, when it is non-retriable
                or attempts are exhausted.
        """
        max_attempts = max_attempts if max_attempts is not None else self.config.max_attempts
        initial_delay = initial_delay if initial_delay is not None else self.config.initial_delay
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        label = task_id or "Retry"

        attempts = 0
        while True:
            if self._is_cancelled(task_id):
                logger.info("[%s] Task cancelled before starting/retrying %s.", label, description)
                raise TaskCancelledError(task_id)

            try:
                result = operation()
                if inspect.isawaitable(result):
                    result = await result
                return result
            except Exception as exc:
                if self._is_cancelled(task_id):
                    logger.info(
                        "[%s] Task cancelled during %s attempt %d.", label, description, attempts + 1
                    )
                    if isinstance(exc, TaskCancelledError):
                        raise
                    raise TaskCancelledError(
                        task_id, f"Task {task_id} cancelled during operation."
                    ) from exc

                attempts += 1
                logger.warning(
                    "[%s] Attempt %d/%d failed for %s: %s",
                    label,
                    attempts,
                    max_attempts,
                    description,
                    exc,
                )

                if error_kind(exc) is ErrorKind.NON_RETRIABLE:
                    logger.error(
                        "[%s] Non-retriable error for %s. Aborting retries.", label, description
                    )
                    raise

                if attempts >= max_attempts:
                    logger.error(
                        "[%s] All %d attempts failed for %s.", label, max_attempts, description
                    )
                    raise

                delay = self.backoff_delay(attempts, initial_delay)
                logger.debug("[%s] Retrying %s in %.3fs...", label, description, delay)
                await self._sleep(delay)

    def _is_cancelled(self, task_id: str | None) -> bool:
        return bool(task_id) and self.cancellation is not None and self.cancellation.is_cancelled(
            task_id
        )
