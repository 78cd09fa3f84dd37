"""Task sync service - the command surface the dashboard talks to."""

import asyncio
from typing import Optional

from src.models.sync_state import SyncState
from src.models.task import NewTask, Task, TaskStatus
from src.services.debounce_gate import DebounceGate
from src.services.fetch_orchestrator import FetchOrchestrator, FetchOutcome, Sleep
from src.services.mutation_orchestrator import MutationOrchestrator, MutationOutcome
from src.services.remote_task_service import RemoteTaskService, SimulatedTaskService
from src.services.task_store import TaskStore
from src.utils.logging import get_structured_logger, timed
from src.utils.sync_config import SyncConfig

logger = get_structured_logger(__name__)


class TaskSyncService:
    """
    Wires the store, the remote service and the orchestrators together.

    The dashboard reads ``state`` and issues only these commands: fetch,
    filter change, clear filters and status update. Task creation and banner
    dismissal are sibling helpers with no retry or optimistic logic.
    """

    def __init__(
        self,
        service: RemoteTaskService,
        config: Optional[SyncConfig] = None,
        *,
        store: Optional[TaskStore] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.config = config or SyncConfig()
        self.service = service
        self.store = store or TaskStore()
        self.fetcher = FetchOrchestrator(
            self.store,
            service,
            max_retries=self.config.max_retries,
            base_delay_ms=self.config.retry_base_delay_ms,
            sleep=sleep,
        )
        self.mutator = MutationOrchestrator(self.store, service)
        self.gate = DebounceGate(self.store, self.fetcher, self.config.debounce_window_ms, sleep=sleep)

    @property
    def state(self) -> SyncState:
        return self.store.state

    async def request_fetch(self) -> FetchOutcome:
        """Refresh immediately with the current filters."""
        return await self.fetcher.run(self.store.state.filters)

    def request_filter_change(self, **partial: Optional[str]) -> None:
        """Update filters and schedule a debounced refetch."""
        self.store.set_filter(**partial)
        self.gate.trigger()

    def request_clear_filters(self) -> None:
        self.store.clear_filters()
        self.gate.trigger()

    async def request_status_update(self, task_id: int, new_status: TaskStatus) -> MutationOutcome:
        """Change a task's status optimistically, capturing the pre-change status first."""
        current = self.store.state.find_task(task_id)
        original_status = current.status if current is not None else None
        return await self.mutator.update_status(task_id, new_status, original_status)

    @timed("create_task")
    async def create_task(self, new_task: NewTask) -> Task:
        """Create a task remotely; errors propagate to the caller."""
        task = await self.service.create_task(new_task)
        logger.info("Task created", task_id=task.id)
        return task

    def dismiss_error(self) -> None:
        self.store.clear_error()

    async def aclose(self) -> None:
        await self.gate.aclose()


# Global sync service instance
_task_sync_service: Optional[TaskSyncService] = None


def get_task_sync_service() -> TaskSyncService:
    """Get or create the global sync service backed by the simulated remote."""
    global _task_sync_service
    if _task_sync_service is None:
        config = SyncConfig.from_env()
        _task_sync_service = TaskSyncService(SimulatedTaskService.from_config(config), config)
        logger.info(
            "TaskSyncService initialized",
            max_retries=config.max_retries,
            retry_base_delay_ms=config.retry_base_delay_ms,
            debounce_window_ms=config.debounce_window_ms
        )
    return _task_sync_service
