from __future__ import annotations

import pytest

from pylinestatus.config import LineStatusConfig, SourceKind
from pylinestatus.exceptions import LineStatusConfigError, LineStatusError
from pylinestatus.ingestion.feed import FeedObservationSource
from pylinestatus.ingestion.scrape import PageObservationSource
from pylinestatus.monitor import LineStatusMonitor
from pylinestatus.state.events import (
    LineJudgment,
    LineStatus,
    QueryIndicator,
    Snapshot,
    SnapshotSource,
    StatusTransition,
)

T0 = 1_700_000_000_000


class _Clock:
    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class _QueuedSource:
    """Returns queued snapshots in order; ``None`` entries simulate failed fetches."""

    source = SnapshotSource.FEED

    def __init__(self, *snapshots: Snapshot | None) -> None:
        self._snapshots = list(snapshots)
        self.calls = 0

    async def fetch_snapshot(self) -> Snapshot | None:
        self.calls += 1
        if not self._snapshots:
            return Snapshot(source=self.source)
        return self._snapshots.pop(0)


def _config(**overrides: object) -> LineStatusConfig:
    values: dict[str, object] = {"api_key": "k", "lines": ("A", "G"), "refresh_interval_ms": 3_600_000}
    values.update(overrides)
    return LineStatusConfig(**values)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_entering_monitor_runs_first_refresh() -> None:
    clock = _Clock()
    source = _QueuedSource(Snapshot(source=SnapshotSource.FEED, judgments={"A": LineJudgment.DELAYED}))

    async with LineStatusMonitor(_config(), source=source, clock=clock) as monitor:
        assert monitor.is_running
        assert source.calls == 1
        assert monitor.get_status("A") == LineStatus.DELAYED
        assert monitor.get_status("G") == LineStatus.NOT_DELAYED

    assert not monitor.is_running


@pytest.mark.asyncio
async def test_refresh_folds_snapshots_into_uptime() -> None:
    clock = _Clock()
    source = _QueuedSource(
        Snapshot(source=SnapshotSource.FEED),
        Snapshot(source=SnapshotSource.FEED, judgments={"G": LineJudgment.DELAYED}),
        Snapshot(source=SnapshotSource.FEED, judgments={"G": LineJudgment.DELAYED}),
    )
    transitions: list[StatusTransition] = []

    async with LineStatusMonitor(
        _config(), source=source, clock=clock, on_status_change=transitions.append
    ) as monitor:
        clock.now = T0 + 2000
        assert await monitor.refresh() is True
        clock.now = T0 + 5000
        assert await monitor.refresh() is True

        assert monitor.get_uptime("G") == "0.400"
        assert monitor.get_uptime("A") == "1.000"
        assert [t.line for t in transitions] == ["G"]


@pytest.mark.asyncio
async def test_failed_fetch_skips_the_cycle() -> None:
    clock = _Clock()
    source = _QueuedSource(Snapshot(source=SnapshotSource.FEED), None)

    async with LineStatusMonitor(_config(), source=source, clock=clock) as monitor:
        before = monitor.store.get_record("A")
        clock.now = T0 + 4000
        assert await monitor.refresh() is False
        assert monitor.store.get_record("A") == before


@pytest.mark.asyncio
async def test_queries_before_baseline_and_for_unknown_lines() -> None:
    clock = _Clock()

    async with LineStatusMonitor(_config(), source=_QueuedSource(), clock=clock) as monitor:
        assert monitor.get_lines() == ["A", "G"]
        assert monitor.get_uptime("A") == QueryIndicator.NO_BASELINE
        assert monitor.get_status("ZZ") == QueryIndicator.NOT_FOUND
        assert monitor.get_uptime("ZZ") == QueryIndicator.NOT_FOUND


@pytest.mark.asyncio
async def test_refresh_outside_context_raises() -> None:
    monitor = LineStatusMonitor(_config())

    with pytest.raises(LineStatusError, match="not initialized"):
        await monitor.refresh()


@pytest.mark.asyncio
async def test_feed_source_requires_api_key() -> None:
    with pytest.raises(LineStatusConfigError, match="API key"):
        async with LineStatusMonitor(_config(api_key=None)):
            pass


def test_builds_source_from_config() -> None:
    scrape = LineStatusMonitor(_config(source=SourceKind.SCRAPE))
    assert isinstance(scrape._build_source(), PageObservationSource)  # noqa: SLF001


@pytest.mark.asyncio
async def test_builds_feed_source_with_owned_session() -> None:
    monitor = LineStatusMonitor(_config())
    source = monitor._build_source()  # noqa: SLF001
    try:
        assert isinstance(source, FeedObservationSource)
        assert monitor._http_session is not None  # noqa: SLF001
    finally:
        await monitor.__aexit__(None, None, None)
    assert monitor._http_session is None  # noqa: SLF001
