"""Status page observation source.

Renders the public status page in headless Chromium and reads its
accessibility tree instead of the markup.  Under the ``Service Status``
heading the page groups line buttons by category headings; lines listed
under ``Delays`` are delayed and lines under any other category are not.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from pylinestatus._constants import (
    DELAYS_CATEGORY,
    LINE_BUTTON_PATTERN,
    PAGE_LOAD_TIMEOUT_MS,
    SERVICE_STATUS_HEADING,
)
from pylinestatus.config import LineStatusConfig
from pylinestatus.exceptions import PageScrapeError
from pylinestatus.models.accessibility import AccessibilityNode
from pylinestatus.state.events import LineJudgment, Snapshot, SnapshotSource

_logger = logging.getLogger(__name__)

_FALLBACK_CATEGORY_LEVEL = 3

TreeLoader = Callable[[], Awaitable[Mapping[str, Any] | None]]


def _ax_value(field: Mapping[str, Any] | None) -> Any:
    return (field or {}).get("value")


def accessibility_tree_from_cdp(ax_nodes: Iterable[Mapping[str, Any]]) -> dict[str, Any] | None:
    """Nest the flat ``Accessibility.getFullAXTree`` node list.

    Returns the same ``{role, name, level, children}`` mapping that
    :func:`flatten_accessibility_tree` reads.  Ignored nodes are dropped and
    their children are hoisted into the nearest kept ancestor.
    """
    by_id: dict[str, Mapping[str, Any]] = {}
    roots: list[str] = []
    for node in ax_nodes:
        node_id = node.get("nodeId")
        if node_id is None:
            continue
        by_id[node_id] = node
        if not node.get("parentId"):
            roots.append(node_id)

    def _convert(node_id: str) -> list[dict[str, Any]]:
        node = by_id.get(node_id)
        if node is None:
            return []
        children = [child for child_id in node.get("childIds") or [] for child in _convert(child_id)]
        if node.get("ignored"):
            return children
        converted: dict[str, Any] = {
            "role": _ax_value(node.get("role")) or "",
            "name": _ax_value(node.get("name")) or "",
        }
        for prop in node.get("properties") or []:
            if prop.get("name") == "level":
                converted["level"] = _ax_value(prop.get("value"))
        if children:
            converted["children"] = children
        return [converted]

    top = [node for root_id in roots for node in _convert(root_id)]
    if not top:
        return None
    if len(top) == 1:
        return top[0]
    return {"role": "RootWebArea", "name": "", "children": top}


def flatten_accessibility_tree(tree: Mapping[str, Any] | None) -> list[AccessibilityNode]:
    """Depth-first, document-order list of every node in *tree*."""
    nodes: list[AccessibilityNode] = []
    if not tree:
        return nodes
    stack: list[tuple[Mapping[str, Any], int]] = [(tree, 0)]
    while stack:
        node, depth = stack.pop()
        nodes.append(AccessibilityNode.from_snapshot(node, depth))
        children = node.get("children") or []
        for child in reversed(children):
            if isinstance(child, Mapping):
                stack.append((child, depth + 1))
    return nodes


def extract_line_judgments(
    nodes: Iterable[AccessibilityNode],
    *,
    section_heading: str = SERVICE_STATUS_HEADING,
    delayed_category: str = DELAYS_CATEGORY,
    category_level: int | None = None,
    line_pattern: re.Pattern[str] = LINE_BUTTON_PATTERN,
) -> dict[str, LineJudgment] | None:
    """Read per-line judgments from a flattened accessibility tree.

    Category headings are headings at ``category_level`` (by default one
    level below the section heading).  A heading above that level closes
    the section.  Returns ``None`` if the section heading is missing.
    """
    judgments: dict[str, LineJudgment] = {}
    level: int | None = None
    category: str | None = None

    for node in nodes:
        if level is None:
            if node.is_heading and node.name == section_heading:
                if category_level is not None:
                    level = category_level
                elif node.level is not None:
                    level = node.level + 1
                else:
                    level = _FALLBACK_CATEGORY_LEVEL
            continue

        if node.is_heading:
            if node.level is None:
                continue
            if node.level < level:
                break
            if node.level == level:
                category = node.name
            continue

        if not node.is_button or category is None:
            continue
        match = line_pattern.match(node.name)
        if match is None:
            continue
        if category.casefold() == delayed_category.casefold():
            judgments[match.group("line")] = LineJudgment.DELAYED
        else:
            judgments[match.group("line")] = LineJudgment.UNDELAYED

    if level is None:
        return None
    return judgments


class PageObservationSource:
    """Observation source backed by the rendered status page."""

    source = SnapshotSource.SCRAPE

    def __init__(
        self,
        config: LineStatusConfig,
        *,
        tree_loader: TreeLoader | None = None,
        category_level: int | None = None,
        line_pattern: re.Pattern[str] = LINE_BUTTON_PATTERN,
    ) -> None:
        self._config = config
        self._tree_loader = tree_loader or self.load_accessibility_tree
        self._category_level = category_level
        self._line_pattern = line_pattern

    async def load_accessibility_tree(self) -> Mapping[str, Any] | None:
        """Render the status page and return its accessibility tree.

        The tree is read over a Chromium DevTools session and nested with
        :func:`accessibility_tree_from_cdp`.
        """
        url = self._config.status_page_url
        try:
            async with async_playwright() as playwright:
                browser = await playwright.chromium.launch(headless=True)
                try:
                    page = await browser.new_page()
                    await page.goto(url, wait_until="networkidle", timeout=PAGE_LOAD_TIMEOUT_MS)
                    cdp = await page.context.new_cdp_session(page)
                    result = await cdp.send("Accessibility.getFullAXTree")
                    await cdp.detach()
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            raise PageScrapeError(f"Could not render {url}: {exc.message}") from exc
        except (AttributeError, TypeError) as exc:
            raise PageScrapeError(f"Browser API unavailable for {url}: {exc}") from exc

        try:
            return accessibility_tree_from_cdp(result.get("nodes") or [])
        except (AttributeError, TypeError) as exc:
            raise PageScrapeError(f"Unexpected accessibility payload from {url}: {exc}") from exc

    async def fetch_snapshot(self) -> Snapshot | None:
        try:
            tree = await self._tree_loader()
        except PageScrapeError as exc:
            _logger.warning("Status page scrape failed: %s", exc)
            return None

        if not tree:
            _logger.warning("Status page returned an empty accessibility tree")
            return None

        judgments = extract_line_judgments(
            flatten_accessibility_tree(tree),
            category_level=self._category_level,
            line_pattern=self._line_pattern,
        )
        if judgments is None:
            _logger.warning("No %r heading on the status page", SERVICE_STATUS_HEADING)
            return None

        _logger.debug(
            "Scrape snapshot: delayed=%s undelayed=%s",
            sorted(line for line, j in judgments.items() if j == LineJudgment.DELAYED),
            sorted(line for line, j in judgments.items() if j == LineJudgment.UNDELAYED),
        )
        return Snapshot(source=self.source, judgments=judgments)
