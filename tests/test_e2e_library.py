from __future__ import annotations

from dataclasses import dataclass, field

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer
from google.transit import gtfs_realtime_pb2

from pylinestatus._transport import HttpFeedTransport
from pylinestatus.config import LineStatusConfig
from pylinestatus.exceptions import LineStatusTransportError
from pylinestatus.monitor import LineStatusMonitor
from pylinestatus.state.events import LineStatus, QueryIndicator

T0 = 1_700_000_000_000


def _feed_bytes(*alerts: tuple[str, list[str]]) -> bytes:
    message = gtfs_realtime_pb2.FeedMessage()
    message.header.gtfs_realtime_version = "2.0"
    for idx, (header, routes) in enumerate(alerts):
        entity = message.entity.add()
        entity.id = f"alert:{idx}"
        entity.alert.header_text.translation.add(text=header, language="en")
        for route in routes:
            entity.alert.informed_entity.add(route_id=route)
    return message.SerializeToString()


@dataclass
class FakeFeedBackend:
    api_key: str = "test-key"
    feeds: dict[str, bytes] = field(default_factory=dict)
    failing: dict[str, int] = field(default_factory=dict)
    calls: dict[str, int] = field(default_factory=dict)

    async def handle(self, request: web.Request) -> web.Response:
        feed_id = request.match_info["feed_id"]
        self.calls[feed_id] = self.calls.get(feed_id, 0) + 1
        if request.headers.get("x-api-key") != self.api_key:
            return web.Response(status=403, text="forbidden")
        if feed_id in self.failing:
            return web.Response(status=self.failing[feed_id], text="upstream error")
        if feed_id not in self.feeds:
            return web.Response(status=404, text="no such feed")
        return web.Response(body=self.feeds[feed_id], content_type="application/octet-stream")

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/feeds/{feed_id}", self.handle)
        return app


class _Clock:
    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.mark.asyncio
async def test_transport_sends_api_key_and_returns_body() -> None:
    backend = FakeFeedBackend(feeds={"alerts": b"\x0a\x05\x0a\x032.0"})

    async with TestServer(backend.app()) as server, aiohttp.ClientSession() as session:
        config = LineStatusConfig(api_key="test-key", base_url=str(server.make_url("/feeds/")))
        transport = HttpFeedTransport(config, session)

        assert await transport.get_feed("alerts") == b"\x0a\x05\x0a\x032.0"


@pytest.mark.asyncio
async def test_transport_raises_on_non_2xx() -> None:
    backend = FakeFeedBackend(failing={"alerts": 500})

    async with TestServer(backend.app()) as server, aiohttp.ClientSession() as session:
        config = LineStatusConfig(api_key="test-key", base_url=str(server.make_url("/feeds/")))
        transport = HttpFeedTransport(config, session)

        with pytest.raises(LineStatusTransportError) as exc_info:
            await transport.get_feed("alerts")

    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint == "alerts"


@pytest.mark.asyncio
async def test_transport_wraps_connection_errors() -> None:
    async with aiohttp.ClientSession() as session:
        # Port 9 (discard) on localhost is closed in test environments.
        config = LineStatusConfig(api_key="k", base_url="http://127.0.0.1:9/", http_timeout=2.0)
        transport = HttpFeedTransport(config, session)

        with pytest.raises(LineStatusTransportError, match="failed"):
            await transport.get_feed("alerts")


@pytest.mark.asyncio
async def test_monitor_end_to_end_with_one_failing_feed() -> None:
    backend = FakeFeedBackend(
        feeds={"alerts": _feed_bytes(("Delays", ["G"]), ("Planned Work", ["L"]))},
        failing={"broken": 500},
    )
    clock = _Clock()

    async with TestServer(backend.app()) as server:
        config = LineStatusConfig(
            api_key="test-key",
            base_url=str(server.make_url("/feeds/")),
            feed_ids=("broken", "alerts"),
            lines=("G", "L"),
            refresh_interval_ms=3_600_000,
        )
        async with LineStatusMonitor(config, clock=clock) as monitor:
            assert backend.calls == {"broken": 1, "alerts": 1}
            assert monitor.get_status("G") == LineStatus.DELAYED
            assert monitor.get_status("L") == LineStatus.NOT_DELAYED

            backend.feeds["alerts"] = _feed_bytes()
            clock.now = T0 + 3000
            assert await monitor.refresh() is True

            assert monitor.get_status("G") == LineStatus.NOT_DELAYED
            assert monitor.get_uptime("G") == "0.000"
            assert monitor.get_uptime("L") == "1.000"
            assert monitor.get_uptime("ZZ") == QueryIndicator.NOT_FOUND


@pytest.mark.asyncio
async def test_monitor_skips_cycle_when_every_feed_fails() -> None:
    backend = FakeFeedBackend(failing={"alerts": 503})
    clock = _Clock()

    async with TestServer(backend.app()) as server:
        config = LineStatusConfig(
            api_key="test-key",
            base_url=str(server.make_url("/feeds/")),
            lines=("A",),
            refresh_interval_ms=3_600_000,
        )
        async with LineStatusMonitor(config, clock=clock) as monitor:
            clock.now = T0 + 5000
            assert await monitor.refresh() is False
            record = monitor.store.get_record("A")
            assert record.last_updated_ms == T0
            assert record.active_time_ms == 0
