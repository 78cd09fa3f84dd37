"""Sync state model - the task collection plus orchestration metadata."""

from typing import Optional
from pydantic import BaseModel, Field

from src.models.task import Task, TaskFilters


class SyncState(BaseModel):
    """Snapshot of the task store. Replaced wholesale on every transition."""
    tasks: list[Task] = Field(default_factory=list, description="Task collection, ids unique")
    loading: bool = Field(default=False, description="A full fetch is in flight")
    filter_loading: bool = Field(default=False, description="A filter-triggered fetch is pending or in flight")
    error: Optional[str] = Field(None, description="Last terminal fetch error")
    retry_count: int = Field(default=0, ge=0, description="Consecutive failed fetch attempts awaiting retry")
    filters: TaskFilters = Field(default_factory=TaskFilters, description="Active filters")

    def find_task(self, task_id: int) -> Optional[Task]:
        """Return the task with the given id, or None."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None
