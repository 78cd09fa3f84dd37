"""Mutation orchestrator - optimistic status changes with commit or rollback."""

from typing import Optional
from pydantic import BaseModel

from src.models.task import TaskStatus
from src.services.remote_task_service import RemoteTaskService
from src.services.task_store import TaskStore
from src.utils.errors import error_message
from src.utils.logging import correlation_context, get_structured_logger, log_timing

logger = get_structured_logger(__name__)


class MutationOutcome(BaseModel):
    """Result of one status change, for surfacing next to the affected row."""
    task_id: int
    requested_status: TaskStatus
    original_status: Optional[TaskStatus] = None
    committed_status: Optional[TaskStatus] = None
    ok: bool
    error: Optional[str] = None


class MutationOrchestrator:
    """
    Apply a status change locally, then confirm it remotely.

    Each call is independent and keeps the pre-mutation status in its own
    frame, never in the store. Mutations are not retried: a failure rolls the
    row back immediately. Two calls racing on the same task are not
    serialized; whichever store write happens last wins.
    """

    def __init__(self, store: TaskStore, service: RemoteTaskService):
        self.store = store
        self.service = service

    async def update_status(
        self,
        task_id: int,
        new_status: TaskStatus,
        original_status: Optional[TaskStatus] = None,
    ) -> MutationOutcome:
        """
        Optimistically set ``task_id`` to ``new_status`` and reconcile.

        ``original_status`` should be captured by the caller before any
        optimistic change; when omitted it is read from the store here.
        """
        new_status = TaskStatus(new_status)

        with correlation_context(prefix="mutation"):
            if original_status is None:
                current = self.store.state.find_task(task_id)
                original_status = current.status if current is not None else None

            self.store.begin_mutation(task_id, new_status)
            logger.info(
                "Status change started",
                task_id=task_id,
                requested_status=new_status.value,
                original_status=original_status.value if original_status else None
            )

            try:
                with log_timing("update_task_status", logger=logger, task_id=task_id):
                    confirmed = await self.service.update_task_status(task_id, new_status)
            except Exception as e:
                message = error_message(e)
                self.store.mutation_failed(task_id, original_status)
                logger.warning(
                    "Status change failed, rolled back",
                    task_id=task_id,
                    requested_status=new_status.value,
                    error=message
                )
                return MutationOutcome(
                    task_id=task_id,
                    requested_status=new_status,
                    original_status=original_status,
                    committed_status=original_status,
                    ok=False,
                    error=message,
                )

            self.store.mutation_succeeded(confirmed)
            if confirmed.status != new_status:
                logger.info(
                    "Server overrode requested status",
                    task_id=task_id,
                    requested_status=new_status.value,
                    committed_status=confirmed.status.value
                )
            else:
                logger.info("Status change committed", task_id=task_id, committed_status=confirmed.status.value)

            return MutationOutcome(
                task_id=task_id,
                requested_status=new_status,
                original_status=original_status,
                committed_status=confirmed.status,
                ok=True,
            )
