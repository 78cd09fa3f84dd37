"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import Mock, AsyncMock

from src.models.sync_state import SyncState
from src.services.task_store import TaskStore
from tests.fixtures.tasks import board_tasks
from tests.utils.helpers import GatedTaskService, ManualClock, RecordingSleep

# Set test environment variables
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("SYNC_MAX_RETRIES", "3")
os.environ.setdefault("SYNC_RETRY_BASE_DELAY_MS", "1000")
os.environ.setdefault("SYNC_DEBOUNCE_WINDOW_MS", "300")


@pytest.fixture
def tasks():
    """Small fixed board used across orchestrator tests."""
    return board_tasks()


@pytest.fixture
def store():
    """Empty task store."""
    return TaskStore()


@pytest.fixture
def loaded_store(tasks):
    """Task store already holding the fixed board."""
    return TaskStore(SyncState(tasks=tasks))


@pytest.fixture
def mock_task_service():
    """Mock remote task service; tests set side effects per call."""
    service = Mock()
    service.fetch_tasks = AsyncMock(return_value=[])
    service.update_task_status = AsyncMock()
    service.create_task = AsyncMock()
    return service


@pytest.fixture
def gated_service(tasks):
    """Remote service whose status updates complete only when a test says so."""
    return GatedTaskService(tasks)


@pytest.fixture
def recording_sleep():
    """Sleep replacement that records requested delays without waiting."""
    return RecordingSleep()


@pytest.fixture
def clock():
    """Manually advanced clock for debounce timing."""
    return ManualClock()


@pytest.fixture
def reset_environment(monkeypatch):
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
