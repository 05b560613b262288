"""Recurring refresh task.

The scheduler runs one cycle to completion on start, then fires a new
cycle every period without waiting for the previous one.  Cycles may
overlap when a fetch outlives the period; the store tolerates this since
each update reads the record it replaces at mutation time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

_logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Fire-and-forget periodic runner for an async cycle."""

    def __init__(
        self,
        cycle: Callable[[], Awaitable[object]],
        *,
        interval: float,
        name: str = "pylinestatus-refresh",
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._cycle = cycle
        self._interval = interval
        self._name = name
        self._ticker: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def inflight(self) -> int:
        """Number of cycles currently running in the background."""
        return len(self._inflight)

    async def start(self) -> None:
        """Run the first cycle now, then keep firing every interval."""
        if self.is_running:
            return
        await self._run_cycle()
        self._ticker = asyncio.create_task(self._tick(), name=self._name)

    async def stop(self) -> None:
        """Cancel the ticker and any cycles still in flight."""
        ticker = self._ticker
        self._ticker = None
        pending: list[asyncio.Task[None]] = list(self._inflight)
        if ticker is not None:
            pending.append(ticker)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._inflight.clear()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            task = asyncio.create_task(self._run_cycle(), name=f"{self._name}-cycle")
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _run_cycle(self) -> None:
        try:
            await self._cycle()
        except asyncio.CancelledError:
            raise
        except Exception:
            # The next tick retries unconditionally.
            _logger.exception("Refresh cycle failed")
