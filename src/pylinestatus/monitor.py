"""High-level async line status monitor."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pylinestatus._transport import HttpFeedTransport
from pylinestatus.config import LineStatusConfig, SourceKind
from pylinestatus.exceptions import LineStatusConfigError, LineStatusError
from pylinestatus.ingestion.base import ObservationSource
from pylinestatus.ingestion.feed import FeedObservationSource
from pylinestatus.ingestion.scrape import PageObservationSource
from pylinestatus.scheduler import RefreshScheduler
from pylinestatus.state.events import LineStatus, QueryIndicator, StatusTransition
from pylinestatus.state.store import LineStateStore, _now_ms

_logger = logging.getLogger(__name__)


class LineStatusMonitor:
    """Polls an observation source and answers status/uptime queries.

    Usage::

        async with LineStatusMonitor(LineStatusConfig.from_env()) as monitor:
            monitor.get_status("A")
            monitor.get_uptime("A")

    Entering the context runs one refresh immediately and then refreshes
    every ``config.refresh_interval_ms`` in the background.
    """

    def __init__(
        self,
        config: LineStatusConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        source: ObservationSource | None = None,
        clock: Callable[[], int] = _now_ms,
        on_status_change: Callable[[StatusTransition], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._source = source
        self._store = LineStateStore(
            config.lines,
            clock=clock,
            on_status_change=on_status_change,
        )
        self._scheduler = RefreshScheduler(self.refresh, interval=config.refresh_interval)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LineStatusMonitor:
        if self._source is None:
            self._source = self._build_source()
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _build_source(self) -> ObservationSource:
        config = self._config.validate()
        if config.source == SourceKind.SCRAPE:
            return PageObservationSource(config)
        if config.source == SourceKind.FEED:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            return FeedObservationSource(config, HttpFeedTransport(config, self._http_session))
        raise LineStatusConfigError(f"Unknown source {config.source!r}")

    async def start(self) -> None:
        """Seed state with one refresh and start the background scheduler."""
        self._require_source()
        _logger.info(
            "Monitoring %d lines from %s source every %.0fs",
            len(self._config.lines),
            self._config.source,
            self._config.refresh_interval,
        )
        await self._scheduler.start()

    async def stop(self) -> None:
        await self._scheduler.stop()

    @property
    def is_running(self) -> bool:
        return self._scheduler.is_running

    @property
    def store(self) -> LineStateStore:
        return self._store

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def _require_source(self) -> ObservationSource:
        if self._source is None:
            raise LineStatusError("Monitor not initialized. Use 'async with LineStatusMonitor(...) as monitor:'")
        return self._source

    async def refresh(self) -> bool:
        """Run one fetch-and-apply cycle.

        Returns ``False`` when the fetch produced nothing and the cycle was
        skipped.
        """
        source = self._require_source()
        snapshot = await source.fetch_snapshot()
        if snapshot is None:
            _logger.debug("Refresh skipped: no data from %s source", source.source)
            return False
        self._store.apply(snapshot)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_lines(self) -> list[str]:
        return self._store.lines

    def get_status(self, line: str) -> LineStatus | QueryIndicator:
        return self._store.get_status(line)

    def get_uptime(self, line: str) -> str | QueryIndicator:
        return self._store.get_uptime(line)
