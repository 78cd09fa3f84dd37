"""Pure state transitions for the task store.

Every function takes the current SyncState and returns a new one. Inputs are
never mutated, so a snapshot handed to a reader stays valid after later
transitions.
"""

from typing import Callable, Iterable, Optional

from src.models.sync_state import SyncState
from src.models.task import Task, TaskFilters, TaskStatus


def _replace_task(state: SyncState, task_id: int, update: Callable[[Task], Task]) -> SyncState:
    """Apply ``update`` to the task with ``task_id``; unchanged state if absent."""
    for index, task in enumerate(state.tasks):
        if task.id == task_id:
            tasks = list(state.tasks)
            tasks[index] = update(task)
            return state.model_copy(update={"tasks": tasks})
    return state


def begin_fetch(state: SyncState) -> SyncState:
    return state.model_copy(update={"loading": True, "error": None})


def fetch_succeeded(state: SyncState, tasks: Iterable[Task]) -> SyncState:
    return state.model_copy(update={
        "tasks": [task.model_copy() for task in tasks],
        "loading": False,
        "filter_loading": False,
        "error": None,
        "retry_count": 0,
    })


def fetch_failed(state: SyncState, message: str) -> SyncState:
    return state.model_copy(update={
        "loading": False,
        "filter_loading": False,
        "error": message,
    })


def begin_mutation(state: SyncState, task_id: int, new_status: TaskStatus) -> SyncState:
    """Apply the optimistic status. Unknown ids leave the state unchanged."""
    return _replace_task(
        state,
        task_id,
        lambda task: task.model_copy(update={"status": new_status, "is_updating": True}),
    )


def mutation_succeeded(state: SyncState, confirmed: Task) -> SyncState:
    """Commit the server's status; it wins over the locally requested one."""
    return _replace_task(
        state,
        confirmed.id,
        lambda task: task.model_copy(update={"status": confirmed.status, "is_updating": False}),
    )


def mutation_failed(state: SyncState, task_id: int, original_status: Optional[TaskStatus]) -> SyncState:
    """Roll back to the pre-mutation status.

    Task-level failures stay local to the row: the collection-wide ``error``
    is left alone.
    """
    def rollback(task: Task) -> Task:
        update = {"is_updating": False}
        if original_status is not None:
            update["status"] = original_status
        return task.model_copy(update=update)

    return _replace_task(state, task_id, rollback)


def set_filter(state: SyncState, **partial: Optional[str]) -> SyncState:
    """Merge the given filter fields; None clears a field."""
    unknown = set(partial) - set(TaskFilters.model_fields)
    if unknown:
        raise ValueError(f"Unknown filter fields: {sorted(unknown)}")

    merged = state.filters.model_dump()
    merged.update({key: value or "" for key, value in partial.items()})
    return state.model_copy(update={"filters": TaskFilters(**merged), "filter_loading": True})


def clear_filters(state: SyncState) -> SyncState:
    return state.model_copy(update={"filters": TaskFilters(), "filter_loading": True})


def set_filter_loading(state: SyncState, value: bool) -> SyncState:
    return state.model_copy(update={"filter_loading": value})


def clear_error(state: SyncState) -> SyncState:
    return state.model_copy(update={"error": None})


def increment_retry(state: SyncState) -> SyncState:
    return state.model_copy(update={"retry_count": state.retry_count + 1})


def reset_retry(state: SyncState) -> SyncState:
    return state.model_copy(update={"retry_count": 0})
