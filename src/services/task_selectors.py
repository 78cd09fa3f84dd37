"""Read-only projections over the sync state for the presentation layer."""

from typing import Optional

from src.models.sync_state import SyncState
from src.models.task import Task, TaskFilters, TaskStatus


def select_all_tasks(state: SyncState) -> list[Task]:
    return list(state.tasks)


def select_tasks_by_status(state: SyncState, status: str) -> list[Task]:
    """Tasks with the given status; an empty status selects everything."""
    if not status:
        return list(state.tasks)
    return [task for task in state.tasks if task.status.value == status]


def select_filtered_tasks(state: SyncState) -> list[Task]:
    """Apply the active filters locally, e.g. while a refetch is pending."""
    return [task for task in state.tasks if state.filters.matches(task)]


def select_task_stats(state: SyncState) -> dict[str, int]:
    stats = {"total": len(state.tasks)}
    stats.update({status.value: 0 for status in TaskStatus})
    for task in state.tasks:
        stats[task.status.value] += 1
    return stats


def select_unique_assignees(state: SyncState) -> list[str]:
    return sorted({task.assignee for task in state.tasks})


def select_updating_tasks(state: SyncState) -> list[Task]:
    """Tasks with a status change in flight."""
    return [task for task in state.tasks if task.is_updating]


def select_is_loading(state: SyncState) -> bool:
    return state.loading


def select_error(state: SyncState) -> Optional[str]:
    return state.error


def select_filters(state: SyncState) -> TaskFilters:
    return state.filters


def select_retry_count(state: SyncState) -> int:
    return state.retry_count
