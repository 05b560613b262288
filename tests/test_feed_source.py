from __future__ import annotations

import pytest
from google.transit import gtfs_realtime_pb2

from pylinestatus.config import LineStatusConfig
from pylinestatus.exceptions import LineStatusTransportError
from pylinestatus.ingestion.feed import FeedObservationSource, judgments_from_alerts
from pylinestatus.models.alert import ServiceAlert
from pylinestatus.state.events import LineJudgment, SnapshotSource


def _feed_bytes(*alerts: tuple[str, list[str]]) -> bytes:
    message = gtfs_realtime_pb2.FeedMessage()
    message.header.gtfs_realtime_version = "2.0"
    for idx, (header, routes) in enumerate(alerts):
        entity = message.entity.add()
        entity.id = f"alert:{idx}"
        entity.alert.header_text.translation.add(text=header)
        for route in routes:
            entity.alert.informed_entity.add(route_id=route)
    return message.SerializeToString()


class _FakeTransport:
    def __init__(self, responses: dict[str, bytes | Exception]) -> None:
        self._responses = responses
        self.calls: list[str] = []

    async def get_feed(self, feed_id: str) -> bytes:
        self.calls.append(feed_id)
        response = self._responses[feed_id]
        if isinstance(response, Exception):
            raise response
        return response


def _config(*feed_ids: str) -> LineStatusConfig:
    return LineStatusConfig(api_key="test-key", feed_ids=feed_ids)


@pytest.mark.asyncio
async def test_delay_alerts_become_delayed_judgments() -> None:
    transport = _FakeTransport(
        {"alerts": _feed_bytes(("Delays", ["A", "C"]), ("Planned - Reroute", ["F"]), ("delays", ["SI"]))}
    )
    source = FeedObservationSource(_config("alerts"), transport)

    snapshot = await source.fetch_snapshot()

    assert snapshot is not None
    assert snapshot.source == SnapshotSource.FEED
    assert snapshot.judgments == {
        "A": LineJudgment.DELAYED,
        "C": LineJudgment.DELAYED,
        "SI": LineJudgment.DELAYED,
    }


@pytest.mark.asyncio
async def test_failed_feed_does_not_drop_other_feeds() -> None:
    transport = _FakeTransport(
        {
            "broken": LineStatusTransportError("HTTP 500 from broken", status_code=500, endpoint="broken"),
            "alerts": _feed_bytes(("Delays", ["G"])),
        }
    )
    source = FeedObservationSource(_config("broken", "alerts"), transport)

    snapshot = await source.fetch_snapshot()

    assert sorted(transport.calls) == ["alerts", "broken"]
    assert snapshot is not None
    assert snapshot.judgments == {"G": LineJudgment.DELAYED}


@pytest.mark.asyncio
async def test_unexpected_feed_error_is_contained() -> None:
    transport = _FakeTransport({"odd": RuntimeError("boom"), "alerts": _feed_bytes()})
    source = FeedObservationSource(_config("odd", "alerts"), transport)

    snapshot = await source.fetch_snapshot()

    assert snapshot is not None
    assert snapshot.judgments == {}


@pytest.mark.asyncio
async def test_all_feeds_failing_yields_no_snapshot() -> None:
    transport = _FakeTransport(
        {
            "one": LineStatusTransportError("HTTP 503 from one", status_code=503, endpoint="one"),
            "two": LineStatusTransportError("Request to two failed", endpoint="two"),
        }
    )
    source = FeedObservationSource(_config("one", "two"), transport)

    assert await source.fetch_snapshot() is None


@pytest.mark.asyncio
async def test_undecodable_feed_counts_as_no_alerts() -> None:
    transport = _FakeTransport({"alerts": b"\x00garbage\xff"})
    source = FeedObservationSource(_config("alerts"), transport)

    snapshot = await source.fetch_snapshot()

    assert snapshot is not None
    assert snapshot.judgments == {}


def test_judgments_ignore_non_delay_alerts() -> None:
    alerts = [
        ServiceAlert.model_validate(
            {"headerText": {"translation": [{"text": "Service Change"}]}, "informedEntity": [{"routeId": "L"}]}
        ),
        ServiceAlert.model_validate(
            {"headerText": {"translation": [{"text": "Delays"}]}, "informedEntity": [{"routeId": "M"}]}
        ),
    ]

    assert judgments_from_alerts(alerts) == {"M": LineJudgment.DELAYED}
