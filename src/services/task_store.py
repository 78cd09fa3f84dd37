"""Task store - owns the sync state and applies transitions one at a time."""

import threading
from typing import Any, Callable, Iterable, Optional

from src.models.sync_state import SyncState
from src.models.task import Task, TaskStatus
from src.services import task_reducers
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

Listener = Callable[[SyncState], None]


class TaskStore:
    """
    State-owning actor for the task collection.

    Flows send transitions; the store applies them serially under a lock and
    replaces the whole state, so readers only ever see complete snapshots.
    Listeners are called after each transition, outside the lock.
    """

    def __init__(self, initial: Optional[SyncState] = None):
        self._state = initial if initial is not None else SyncState()
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> SyncState:
        """Current snapshot (read-only by convention)."""
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply(self, transition: Callable[..., SyncState], *args: Any, **kwargs: Any) -> SyncState:
        """Apply a pure transition to the current state and publish the result."""
        with self._lock:
            new_state = transition(self._state, *args, **kwargs)
            self._state = new_state

        logger.debug(
            "Store transition applied",
            transition=transition.__name__,
            loading=new_state.loading,
            filter_loading=new_state.filter_loading,
            retry_count=new_state.retry_count,
            has_error=new_state.error is not None,
        )

        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception as e:
                logger.error(
                    "Store listener failed",
                    transition=transition.__name__,
                    error=str(e),
                    exc_info=True
                )

        return new_state

    # Commands understood by the store

    def begin_fetch(self) -> SyncState:
        return self.apply(task_reducers.begin_fetch)

    def fetch_succeeded(self, tasks: Iterable[Task]) -> SyncState:
        return self.apply(task_reducers.fetch_succeeded, tasks)

    def fetch_failed(self, message: str) -> SyncState:
        return self.apply(task_reducers.fetch_failed, message)

    def begin_mutation(self, task_id: int, new_status: TaskStatus) -> SyncState:
        return self.apply(task_reducers.begin_mutation, task_id, new_status)

    def mutation_succeeded(self, task: Task) -> SyncState:
        return self.apply(task_reducers.mutation_succeeded, task)

    def mutation_failed(self, task_id: int, original_status: Optional[TaskStatus]) -> SyncState:
        return self.apply(task_reducers.mutation_failed, task_id, original_status)

    def set_filter(self, **partial: Optional[str]) -> SyncState:
        return self.apply(task_reducers.set_filter, **partial)

    def clear_filters(self) -> SyncState:
        return self.apply(task_reducers.clear_filters)

    def set_filter_loading(self, value: bool) -> SyncState:
        return self.apply(task_reducers.set_filter_loading, value)

    def clear_error(self) -> SyncState:
        return self.apply(task_reducers.clear_error)

    def increment_retry(self) -> SyncState:
        return self.apply(task_reducers.increment_retry)

    def reset_retry(self) -> SyncState:
        return self.apply(task_reducers.reset_retry)
