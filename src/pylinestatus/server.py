"""Read-only HTTP surface over a :class:`LineStatusMonitor`.

Routes:
  - ``GET /lines``            JSON list of tracked lines
  - ``GET /status/{line}``    ``DELAYED`` / ``NOT_DELAYED``
  - ``GET /uptime/{line}``    uptime fraction such as ``0.982``
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from aiohttp import web

from pylinestatus.monitor import LineStatusMonitor
from pylinestatus.state.events import QueryIndicator

MONITOR_KEY = web.AppKey("monitor", LineStatusMonitor)


def _text_response(value: str) -> web.Response:
    status = 404 if value == QueryIndicator.NOT_FOUND else 200
    return web.Response(text=str(value), status=status)


async def handle_lines(request: web.Request) -> web.Response:
    return web.json_response(request.app[MONITOR_KEY].get_lines())


async def handle_status(request: web.Request) -> web.Response:
    line = request.match_info["line"]
    return _text_response(request.app[MONITOR_KEY].get_status(line))


async def handle_uptime(request: web.Request) -> web.Response:
    line = request.match_info["line"]
    return _text_response(request.app[MONITOR_KEY].get_uptime(line))


async def _monitor_lifecycle(app: web.Application) -> AsyncIterator[None]:
    async with app[MONITOR_KEY]:
        yield


def create_app(monitor: LineStatusMonitor, *, manage_monitor: bool = True) -> web.Application:
    """Build the application.

    With ``manage_monitor`` the monitor is entered on startup and exited on
    cleanup; pass ``False`` when the caller already runs it.
    """
    app = web.Application()
    app[MONITOR_KEY] = monitor
    app.router.add_get("/lines", handle_lines)
    app.router.add_get("/status/{line}", handle_status)
    app.router.add_get("/uptime/{line}", handle_uptime)
    if manage_monitor:
        app.cleanup_ctx.append(_monitor_lifecycle)
    return app
