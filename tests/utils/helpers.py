"""Test helper classes for driving async timing deterministically."""

import asyncio
from typing import Optional

from src.models.task import NewTask, Task, TaskFilters, TaskStatus
from src.utils.errors import RemoteServiceError, TaskNotFoundError


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays and only yields once."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)

    @property
    def total_ms(self) -> int:
        return round(sum(self.calls) * 1000)


class ManualClock:
    """Virtual time: sleepers wake only when the test advances the clock."""

    def __init__(self):
        self.now = 0.0
        self._waiters: list[tuple[float, asyncio.Future]] = []

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self._waiters.append((self.now + seconds, future))
        await future

    async def advance(self, seconds: float) -> None:
        """Move time forward, wake due sleepers and let them run."""
        # Let freshly scheduled tasks register their sleeps at the current time
        await settle()
        self.now += seconds
        for deadline, future in list(self._waiters):
            if deadline <= self.now + 1e-9:
                self._waiters.remove((deadline, future))
                if not future.done():
                    future.set_result(None)
        await settle()


async def settle(rounds: int = 20) -> None:
    """Give every ready task a chance to run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class GatedTaskService:
    """
    Remote task service whose status updates stay in flight until released.

    Each ``update_task_status`` call parks on a future; ``resolve`` and
    ``reject`` complete a pending call for a task id, the oldest by default.
    """

    def __init__(self, tasks: list[Task]):
        self.tasks = {task.id: task for task in tasks}
        self.fetch_calls: list[TaskFilters] = []
        self.update_calls: list[tuple[int, TaskStatus]] = []
        self._pending: dict[int, list[tuple[asyncio.Future, TaskStatus]]] = {}

    async def fetch_tasks(self, filters: TaskFilters) -> list[Task]:
        self.fetch_calls.append(filters)
        return [task.model_copy() for task in self.tasks.values() if filters.matches(task)]

    async def update_task_status(self, task_id: int, new_status: TaskStatus) -> Task:
        self.update_calls.append((task_id, new_status))
        future = asyncio.get_running_loop().create_future()
        self._pending.setdefault(task_id, []).append((future, new_status))
        return await future

    async def create_task(self, new_task: NewTask) -> Task:
        task = Task(**new_task.model_dump(), id=max(self.tasks, default=0) + 1)
        self.tasks[task.id] = task
        return task

    def in_flight(self, task_id: int) -> int:
        return len(self._pending.get(task_id, []))

    def resolve(self, task_id: int, status: Optional[TaskStatus] = None, index: int = 0) -> None:
        """Complete the ``index``-th pending call for ``task_id`` with the server's view."""
        future, requested = self._pending[task_id].pop(index)
        task = self.tasks.get(task_id)
        if task is None:
            future.set_exception(TaskNotFoundError("Task not found"))
            return
        future.set_result(task.model_copy(update={"status": status or requested}))

    def reject(self, task_id: int, message: str = "Failed to update task", index: int = 0) -> None:
        future, _ = self._pending[task_id].pop(index)
        future.set_exception(RemoteServiceError(message))
