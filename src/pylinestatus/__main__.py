"""Run the line status server: ``python -m pylinestatus``.

Configuration comes from ``MTA_*`` environment variables (see
:class:`pylinestatus.config.LineStatusConfig`); command-line options
override them.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from aiohttp import web

from pylinestatus.config import LineStatusConfig, SourceKind
from pylinestatus.exceptions import LineStatusConfigError
from pylinestatus.monitor import LineStatusMonitor
from pylinestatus.server import create_app

_logger = logging.getLogger("pylinestatus")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="pylinestatus", description=__doc__.splitlines()[0])
    parser.add_argument("--port", type=int, help="Listening port (default: $PORT or 3000)")
    parser.add_argument("--source", choices=[s.value for s in SourceKind], help="Observation source")
    parser.add_argument("--refresh-ms", type=int, dest="refresh_interval_ms", help="Refresh period in ms")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {
        key: value
        for key, value in {
            "port": args.port,
            "source": args.source,
            "refresh_interval_ms": args.refresh_interval_ms,
        }.items()
        if value is not None
    }
    try:
        config = LineStatusConfig.from_env(**overrides).validate()
    except LineStatusConfigError as exc:
        _logger.error("Invalid configuration: %s", exc)
        return 2

    app = create_app(LineStatusMonitor(config))
    _logger.info("Listening on port %d", config.port)
    web.run_app(app, port=config.port, print=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
