"""Fetch orchestrator - load the task collection with bounded retry and backoff."""

import asyncio
from pydantic import BaseModel, Field
from typing import Awaitable, Callable, Optional

from src.models.task import Task, TaskFilters
from src.services.remote_task_service import RemoteTaskService
from src.services.task_store import TaskStore
from src.utils.errors import error_message
from src.utils.logging import correlation_context, get_structured_logger, log_timing

logger = get_structured_logger(__name__)

# Defaults; SyncConfig can override both
MAX_RETRIES = 3
BASE_DELAY_MS = 1000

Sleep = Callable[[float], Awaitable[None]]


def retry_delay_ms(retry_count: int, base_delay_ms: int = BASE_DELAY_MS) -> int:
    """Backoff before the next attempt, from the retry count before incrementing.

    0 -> base, 1 -> 2x base, 2 -> 4x base.
    """
    return base_delay_ms * (2 ** retry_count)


class FetchOutcome(BaseModel):
    """Result of one top-level fetch run."""
    ok: bool
    attempts: int
    tasks: list[Task] = Field(default_factory=list)
    error: Optional[str] = None
    total_delay_ms: int = 0


class FetchOrchestrator:
    """
    Drive ``fetch_tasks`` against the remote service.

    A run ends in exactly one terminal store update: ``fetch_succeeded`` or
    ``fetch_failed``. Every exception from the service is treated as
    retryable; there is no transient/permanent distinction. Overlapping runs
    are not prevented here.
    """

    def __init__(
        self,
        store: TaskStore,
        service: RemoteTaskService,
        *,
        max_retries: int = MAX_RETRIES,
        base_delay_ms: int = BASE_DELAY_MS,
        sleep: Sleep = asyncio.sleep,
    ):
        self.store = store
        self.service = service
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self._sleep = sleep

    async def run(self, filters: Optional[TaskFilters] = None, *, filter_triggered: bool = False) -> FetchOutcome:
        """Fetch tasks for ``filters``, retrying with exponential backoff."""
        filters = filters if filters is not None else TaskFilters()

        with correlation_context(prefix="fetch"):
            if filter_triggered:
                # set_filter/clear_filters already raised filter_loading
                self.store.clear_error()
            else:
                self.store.begin_fetch()

            logger.info(
                "Fetch run started",
                filters=filters.as_query(),
                filter_triggered=filter_triggered,
                max_retries=self.max_retries
            )
            return await self._attempt_loop(filters)

    async def _attempt_loop(self, filters: TaskFilters) -> FetchOutcome:
        retry_count = 0
        total_delay_ms = 0

        while True:
            try:
                with log_timing("fetch_tasks", logger=logger, attempt=retry_count + 1):
                    tasks = await self.service.fetch_tasks(filters)
            except Exception as e:
                message = error_message(e)

                if retry_count >= self.max_retries:
                    self.store.fetch_failed(message)
                    self.store.reset_retry()
                    logger.error(
                        "Fetch failed after exhausting retries",
                        attempts=retry_count + 1,
                        error=message
                    )
                    return FetchOutcome(
                        ok=False,
                        attempts=retry_count + 1,
                        error=message,
                        total_delay_ms=total_delay_ms,
                    )

                delay_ms = retry_delay_ms(retry_count, self.base_delay_ms)
                self.store.increment_retry()
                logger.warning(
                    "Fetch attempt failed, backing off",
                    attempt=retry_count + 1,
                    retry_in_ms=delay_ms,
                    error=message
                )
                await self._sleep(delay_ms / 1000)
                total_delay_ms += delay_ms
                retry_count += 1
                continue

            self.store.fetch_succeeded(tasks)
            logger.info(
                "Fetch succeeded",
                attempts=retry_count + 1,
                task_count=len(tasks),
                total_delay_ms=total_delay_ms
            )
            return FetchOutcome(
                ok=True,
                attempts=retry_count + 1,
                tasks=list(tasks),
                total_delay_ms=total_delay_ms,
            )
