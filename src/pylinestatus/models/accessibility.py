"""Flattened accessibility tree node."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


class AccessibilityNode(BaseModel):
    """One node of a page's accessibility tree.

    Parameters
    ----------
    role : str
        ARIA role (``"heading"``, ``"button"``, ...).
    name : str
        Accessible name.
    level : int or None
        Heading level, when the node carries one.
    depth : int
        Nesting depth in the original tree (root is ``0``).  Only used when
        dumping the tree; category headings are matched on ``level``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    role: str = ""
    name: str = ""
    level: int | None = None
    depth: int = 0

    @classmethod
    def from_snapshot(cls, node: Mapping[str, Any], depth: int) -> AccessibilityNode:
        level = node.get("level")
        return cls(
            role=str(node.get("role") or ""),
            name=str(node.get("name") or "").strip(),
            level=level if isinstance(level, int) else None,
            depth=depth,
        )

    @property
    def is_heading(self) -> bool:
        return self.role == "heading"

    @property
    def is_button(self) -> bool:
        return self.role == "button"
