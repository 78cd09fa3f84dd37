"""Remote task service contract and an in-process simulation of it."""

import asyncio
import itertools
import random
from datetime import date, datetime, timezone
from typing import Optional, Protocol

from src.models.task import NewTask, Task, TaskFilters, TaskPriority, TaskStatus
from src.utils.errors import RemoteServiceError, TaskNotFoundError
from src.utils.logging import get_structured_logger
from src.utils.sync_config import SyncConfig

logger = get_structured_logger(__name__)


class RemoteTaskService(Protocol):
    """What the orchestrators need from the remote side."""

    async def fetch_tasks(self, filters: TaskFilters) -> list[Task]: ...

    async def update_task_status(self, task_id: int, new_status: TaskStatus) -> Task: ...

    async def create_task(self, new_task: NewTask) -> Task: ...


def seed_tasks() -> list[Task]:
    """Sample board used by the simulated service."""
    rows = [
        (1, "Review PR #123", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "John Doe", date(2024, 2, 15)),
        (2, "Update documentation", TaskStatus.TODO, TaskPriority.LOW, "Jane Smith", date(2024, 2, 20)),
        (3, "Fix login bug", TaskStatus.DONE, TaskPriority.CRITICAL, "John Doe", date(2024, 2, 10)),
        (4, "Implement new feature", TaskStatus.TODO, TaskPriority.MEDIUM, "Alice Johnson", date(2024, 2, 25)),
        (5, "Code review for feature X", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "Bob Wilson", date(2024, 2, 18)),
        (6, "Write unit tests", TaskStatus.TODO, TaskPriority.MEDIUM, "Jane Smith", date(2024, 2, 22)),
        (7, "Deploy to staging", TaskStatus.DONE, TaskPriority.CRITICAL, "John Doe", date(2024, 2, 12)),
        (8, "Performance optimization", TaskStatus.IN_PROGRESS, TaskPriority.HIGH, "Alice Johnson", date(2024, 2, 28)),
        (9, "Update dependencies", TaskStatus.TODO, TaskPriority.LOW, "Bob Wilson", date(2024, 3, 1)),
        (10, "Security audit", TaskStatus.DONE, TaskPriority.CRITICAL, "Jane Smith", date(2024, 2, 8)),
    ]
    return [
        Task(id=task_id, title=title, status=status, priority=priority, assignee=assignee, due_date=due_date)
        for task_id, title, status, priority, assignee, due_date in rows
    ]


class SimulatedTaskService:
    """
    Remote task service stand-in with artificial latency and random failures.

    Each call independently fails with probability ``failure_rate``. Status
    updates return an updated copy and leave the seeded collection as it was,
    so a later fetch still reports the original status.
    """

    def __init__(
        self,
        tasks: Optional[list[Task]] = None,
        *,
        latency_ms: int = 800,
        create_latency_ms: int = 1000,
        failure_rate: float = 0.05,
        rng: Optional[random.Random] = None,
    ):
        self._tasks = list(tasks) if tasks is not None else seed_tasks()
        self.latency_ms = latency_ms
        self.create_latency_ms = create_latency_ms
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._next_id = itertools.count(max((t.id for t in self._tasks), default=0) + 1)

    @classmethod
    def from_config(cls, config: SyncConfig) -> "SimulatedTaskService":
        return cls(
            latency_ms=config.simulated_latency_ms,
            create_latency_ms=config.simulated_create_latency_ms,
            failure_rate=config.simulated_failure_rate,
        )

    async def _delay(self, latency_ms: int) -> None:
        if latency_ms:
            await asyncio.sleep(latency_ms / 1000)

    def _should_fail(self) -> bool:
        return self._rng.random() < self.failure_rate

    async def fetch_tasks(self, filters: TaskFilters) -> list[Task]:
        await self._delay(self.latency_ms)

        if self._should_fail():
            logger.debug("Simulated fetch failure", filters=filters.as_query())
            raise RemoteServiceError("Failed to fetch tasks")

        return [task.model_copy() for task in self._tasks if filters.matches(task)]

    async def update_task_status(self, task_id: int, new_status: TaskStatus) -> Task:
        new_status = TaskStatus(new_status)
        await self._delay(self.latency_ms)

        if self._should_fail():
            logger.debug("Simulated update failure", task_id=task_id, new_status=new_status.value)
            raise RemoteServiceError("Failed to update task")

        for task in self._tasks:
            if task.id == task_id:
                return task.model_copy(update={"status": new_status})

        raise TaskNotFoundError("Task not found")

    async def create_task(self, new_task: NewTask) -> Task:
        await self._delay(self.create_latency_ms)

        task = Task(
            **new_task.model_dump(include=set(NewTask.model_fields)),
            id=next(self._next_id),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._tasks.append(task)
        logger.info("Simulated task created", task_id=task.id)
        return task.model_copy()
