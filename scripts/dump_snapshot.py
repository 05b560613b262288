#!/usr/bin/env python3
"""Dump one observation snapshot from the configured source.

Fetches the alert feed (or renders the status page) once and prints what
pylinestatus sees: every decoded alert with its routes, and the per-line
judgments the monitor would apply.  Useful for checking that the feed
schema or the page layout still match what the parser expects.

Usage
-----
Set environment variables and run::

    export MTA_KEY="your-api-key"
    python scripts/dump_snapshot.py

Options::

    --source feed|scrape   Override MTA_SOURCE (default: feed)
    --json                 Output as machine-readable JSON
    --tree                 (scrape) also print the flattened accessibility tree
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from pylinestatus import LineStatusConfig, SourceKind  # noqa: E402
from pylinestatus._transport import HttpFeedTransport  # noqa: E402
from pylinestatus.ingestion.feed import FeedObservationSource, judgments_from_alerts  # noqa: E402
from pylinestatus.ingestion.scrape import (  # noqa: E402
    PageObservationSource,
    extract_line_judgments,
    flatten_accessibility_tree,
)


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


async def _dump_feed(config: LineStatusConfig) -> dict[str, Any]:
    result: dict[str, Any] = {"source": "feed", "feeds": {}}
    async with aiohttp.ClientSession() as session:
        source = FeedObservationSource(config, HttpFeedTransport(config, session))
        all_alerts = []
        for feed_id in config.feed_ids:
            try:
                alerts = await source.fetch_alerts(feed_id)
            except Exception as exc:  # noqa: BLE001
                result["feeds"][feed_id] = {"error": str(exc)}
                continue
            all_alerts.extend(alerts)
            result["feeds"][feed_id] = {
                "alerts": [
                    {
                        "id": alert.alert_id,
                        "header": alert.header,
                        "routes": alert.route_ids,
                        "delay": alert.is_delay_alert,
                    }
                    for alert in alerts
                ]
            }
    result["judgments"] = {line: str(j) for line, j in sorted(judgments_from_alerts(all_alerts).items())}
    return result


async def _dump_scrape(config: LineStatusConfig, *, with_tree: bool) -> dict[str, Any]:
    source = PageObservationSource(config)
    tree = await source.load_accessibility_tree()
    nodes = flatten_accessibility_tree(tree)
    judgments = extract_line_judgments(nodes)
    result: dict[str, Any] = {
        "source": "scrape",
        "node_count": len(nodes),
        "judgments": None if judgments is None else {line: str(j) for line, j in sorted(judgments.items())},
    }
    if with_tree:
        result["tree"] = [node.model_dump() for node in nodes]
    return result


def _print_human(result: dict[str, Any]) -> None:
    if result["source"] == "feed":
        for feed_id, feed in result["feeds"].items():
            print(_section(f"Feed {feed_id}"))
            if "error" in feed:
                print(f"  ERROR: {feed['error']}")
                continue
            for alert in feed["alerts"]:
                marker = "*" if alert["delay"] else " "
                print(f"  {marker} [{', '.join(alert['routes']) or '-'}] {alert['header']}")
    else:
        print(_section("Status page"))
        print(f"  accessibility nodes: {result['node_count']}")
        for node in result.get("tree", []):
            indent = "  " * (node["depth"] + 1)
            level = f" (h{node['level']})" if node["level"] else ""
            print(f"{indent}{node['role']}: {node['name']}{level}")

    print(_section("Judgments"))
    judgments = result["judgments"]
    if judgments is None:
        print("  <no 'Service Status' section found>")
    elif not judgments:
        print("  <none: no line is delayed>")
    else:
        for line, judgment in judgments.items():
            print(f"  {line:>3}  {judgment}")


async def _main() -> int:
    parser = argparse.ArgumentParser(description="Dump one pylinestatus observation snapshot")
    parser.add_argument("--source", choices=[s.value for s in SourceKind])
    parser.add_argument("--json", action="store_true", dest="as_json")
    parser.add_argument("--tree", action="store_true")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.source:
        overrides["source"] = args.source
    config = LineStatusConfig.from_env(**overrides).validate()

    if config.source == SourceKind.SCRAPE:
        result = await _dump_scrape(config, with_tree=args.tree)
    else:
        result = await _dump_feed(config)

    if args.as_json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        _print_human(result)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(_main()))
