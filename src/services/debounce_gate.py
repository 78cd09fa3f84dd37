"""Debounce gate - coalesce bursts of filter changes into one fetch."""

import asyncio
from typing import Awaitable, Callable, Optional

from src.services.fetch_orchestrator import FetchOrchestrator, FetchOutcome
from src.services.task_store import TaskStore
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Default debounce window (milliseconds)
DEFAULT_DEBOUNCE_WINDOW_MS = 300

Sleep = Callable[[float], Awaitable[None]]


class DebounceGate:
    """Single-slot delayed fetch; a newer trigger replaces the pending one."""

    def __init__(
        self,
        store: TaskStore,
        fetcher: FetchOrchestrator,
        window_ms: int = DEFAULT_DEBOUNCE_WINDOW_MS,
        *,
        sleep: Sleep = asyncio.sleep,
    ):
        self.store = store
        self.fetcher = fetcher
        self.window_ms = window_ms
        self._sleep = sleep
        self._timer: Optional[asyncio.Task] = None
        self._runs: set[asyncio.Task] = set()
        self.fired_count = 0
        logger.info(
            "DebounceGate initialized",
            debounce_window_ms=window_ms
        )

    @property
    def pending(self) -> bool:
        """Whether a timer is armed and has not fired yet."""
        return self._timer is not None and not self._timer.done()

    def trigger(self) -> None:
        """(Re)start the debounce timer. Must be called from a running event loop."""
        if self.pending:
            self._timer.cancel()
            logger.debug("Debounce timer reset")

        self._timer = asyncio.create_task(self._fire_after_delay())

    def cancel(self) -> None:
        """Drop the pending timer, if any. Dispatched fetches keep running."""
        if self.pending:
            self._timer.cancel()
            # No refetch will run for the pending filter change
            self.store.set_filter_loading(False)
            logger.debug("Debounce timer cancelled")
        self._timer = None

    async def _fire_after_delay(self) -> None:
        await self._sleep(self.window_ms / 1000)

        # Past this point the fetch belongs to the fetch orchestrator and
        # must not be cancelled by a later trigger.
        self._timer = None
        filters = self.store.state.filters
        self.fired_count += 1
        logger.info(
            "Debounce window elapsed, dispatching fetch",
            filters=filters.as_query(),
            debounce_window_ms=self.window_ms
        )

        run = asyncio.create_task(self.fetcher.run(filters, filter_triggered=True))
        self._runs.add(run)
        run.add_done_callback(self._runs.discard)

    async def wait_idle(self) -> list[FetchOutcome]:
        """Wait for the pending timer and every dispatched fetch to finish."""
        outcomes: list[FetchOutcome] = []

        while self._timer is not None or self._runs:
            timer = self._timer
            if timer is not None:
                await asyncio.wait({timer})
                if self._timer is timer:
                    self._timer = None
                continue

            runs = list(self._runs)
            if runs:
                outcomes.extend(await asyncio.gather(*runs))
                self._runs.difference_update(runs)

        return outcomes

    async def aclose(self) -> None:
        """Cancel the pending timer and wait for dispatched fetches."""
        self.cancel()
        await self.wait_idle()
