"""Alert feed observation source.

Fans out one request per configured feed, decodes each body into service
alerts and reports every route named by a delay alert as delayed.  Lines
without a delay alert are left out of the snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from pylinestatus._transport import FeedTransport
from pylinestatus.config import LineStatusConfig
from pylinestatus.exceptions import LineStatusTransportError
from pylinestatus.ingestion.decode import decode_feed_message, extract_alerts
from pylinestatus.models.alert import ServiceAlert
from pylinestatus.state.events import LineJudgment, Snapshot, SnapshotSource

_logger = logging.getLogger(__name__)


def judgments_from_alerts(alerts: Iterable[ServiceAlert]) -> dict[str, LineJudgment]:
    """Map every route of every delay alert to ``DELAYED``."""
    judgments: dict[str, LineJudgment] = {}
    for alert in alerts:
        if not alert.is_delay_alert:
            continue
        for route_id in alert.route_ids:
            judgments[route_id] = LineJudgment.DELAYED
    return judgments


class FeedObservationSource:
    """Observation source backed by the GTFS-realtime alerts feed."""

    source = SnapshotSource.FEED

    def __init__(self, config: LineStatusConfig, transport: FeedTransport) -> None:
        self._config = config
        self._transport = transport

    async def fetch_alerts(self, feed_id: str) -> list[ServiceAlert]:
        """Fetch and decode one feed.

        Transport errors propagate; undecodable bodies yield ``[]``.
        """
        payload = await self._transport.get_feed(feed_id)
        return extract_alerts(decode_feed_message(payload))

    async def fetch_snapshot(self) -> Snapshot | None:
        """Fetch every feed in parallel and merge their delay alerts.

        A failed feed contributes nothing.  Returns ``None`` only when every
        feed failed.
        """
        feed_ids = self._config.feed_ids
        results = await asyncio.gather(
            *(self.fetch_alerts(feed_id) for feed_id in feed_ids),
            return_exceptions=True,
        )

        alerts: list[ServiceAlert] = []
        succeeded = 0
        for feed_id, result in zip(feed_ids, results, strict=True):
            if isinstance(result, LineStatusTransportError):
                _logger.warning("Feed %s unavailable: %s", feed_id, result)
                continue
            if isinstance(result, BaseException):
                _logger.warning("Feed %s failed", feed_id, exc_info=result)
                continue
            succeeded += 1
            alerts.extend(result)

        if not succeeded:
            _logger.warning("No feed returned data this cycle")
            return None

        judgments = judgments_from_alerts(alerts)
        _logger.debug(
            "Feed snapshot: %d alerts, delayed lines=%s",
            len(alerts),
            sorted(judgments),
        )
        return Snapshot(source=self.source, judgments=judgments)
