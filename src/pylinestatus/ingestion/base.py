"""Observation source capability shared by the feed and scrape variants."""

from __future__ import annotations

from typing import Protocol

from pylinestatus.state.events import Snapshot, SnapshotSource


class ObservationSource(Protocol):
    """Produces one best-effort snapshot per call.

    Implementations must not raise for upstream trouble.  They return
    ``None`` when nothing usable was fetched, which makes the cycle a no-op.
    """

    source: SnapshotSource

    async def fetch_snapshot(self) -> Snapshot | None:
        ...
