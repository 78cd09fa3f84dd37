"""Task models."""

from enum import Enum
from typing import Optional
from datetime import date
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task workflow status."""
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority levels."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class NewTask(BaseModel):
    """Payload for creating a task; the service assigns id and created_at."""
    title: str = Field(..., min_length=1, description="Task title")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Task status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    assignee: str = Field(default="", description="Assignee name (free text)")
    due_date: date = Field(..., description="Due date")


class Task(NewTask):
    """Task as known to the remote service and the local store."""
    id: int = Field(..., description="Task ID, stable for the task's lifetime")
    created_at: Optional[str] = Field(None, description="Creation timestamp (ISO 8601)")
    is_updating: bool = Field(default=False, description="True while a status change is in flight")


class TaskFilters(BaseModel):
    """Filter predicate for fetching tasks. Empty string means no constraint."""
    status: str = Field(default="", description="Exact status to match")
    assignee: str = Field(default="", description="Exact assignee to match")

    def as_query(self) -> dict[str, str]:
        """Return only the constrained fields."""
        return {key: value for key, value in self.model_dump().items() if value}

    def matches(self, task: Task) -> bool:
        """Whether a task satisfies every constrained field."""
        if self.status and task.status.value != self.status:
            return False
        if self.assignee and task.assignee != self.assignee:
            return False
        return True
