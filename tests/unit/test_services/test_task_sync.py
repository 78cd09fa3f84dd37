"""Tests for the task sync service command surface."""

import asyncio
import pytest

from src.models.task import TaskFilters, TaskStatus
from src.services import task_sync
from src.services.remote_task_service import SimulatedTaskService
from src.services.task_sync import TaskSyncService, get_task_sync_service
from src.utils.sync_config import SyncConfig
from tests.utils.assertions import assert_fetch_settled, assert_task_settled
from tests.utils.factories import create_new_task


@pytest.fixture
def sync(gated_service, clock):
    return TaskSyncService(gated_service, SyncConfig(), sleep=clock.sleep)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_request_fetch_loads_board(sync):
    outcome = await sync.request_fetch()

    assert outcome.ok is True
    assert [t.id for t in sync.state.tasks] == [1, 2, 3]
    assert_fetch_settled(sync.state)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_filter_change_is_debounced(sync, gated_service, clock):
    sync.request_filter_change(status="todo")
    assert sync.state.filter_loading is True

    await clock.advance(0.1)
    sync.request_filter_change(assignee="John Doe")
    await clock.advance(0.3)
    await sync.gate.wait_idle()

    assert gated_service.fetch_calls == [TaskFilters(status="todo", assignee="John Doe")]
    assert [t.id for t in sync.state.tasks] == [1]
    assert_fetch_settled(sync.state)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_clear_filters_refetches_everything(sync, gated_service, clock):
    sync.request_filter_change(status="done")
    await clock.advance(0.3)
    await sync.gate.wait_idle()

    sync.request_clear_filters()
    await clock.advance(0.3)
    await sync.gate.wait_idle()

    assert gated_service.fetch_calls[-1] == TaskFilters()
    assert len(sync.state.tasks) == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_status_update_captures_original_status(sync, gated_service, clock):
    """Test rollback uses the status the row had before the command."""
    await sync.request_fetch()

    update = asyncio.create_task(sync.request_status_update(2, TaskStatus.DONE))
    await clock.advance(0)
    gated_service.reject(2)
    outcome = await update

    assert outcome.original_status == TaskStatus.IN_PROGRESS
    assert_task_settled(sync.state, 2, TaskStatus.IN_PROGRESS)
    assert sync.state.error is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_task_does_not_touch_store(sync):
    await sync.request_fetch()
    before = sync.state

    created = await sync.create_task(create_new_task(assignee="Alice Johnson"))

    assert created.id == 4
    assert sync.state is before


@pytest.mark.unit
@pytest.mark.asyncio
async def test_dismiss_error_and_aclose(sync):
    sync.store.fetch_failed("Failed to fetch tasks")
    sync.dismiss_error()
    sync.request_filter_change(status="todo")

    await sync.aclose()

    assert sync.state.error is None
    assert sync.gate.pending is False
    assert sync.state.filter_loading is False


@pytest.mark.unit
def test_get_task_sync_service_is_singleton(monkeypatch):
    monkeypatch.setattr(task_sync, "_task_sync_service", None)
    monkeypatch.setenv("SYNC_DEBOUNCE_WINDOW_MS", "120")

    first = get_task_sync_service()
    second = get_task_sync_service()

    assert first is second
    assert isinstance(first.service, SimulatedTaskService)
    assert first.gate.window_ms == 120
