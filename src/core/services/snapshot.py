"""Depth-limited expansion of the tree into a plain snapshot.

Hosts that cannot expand nodes interactively (the CLI, JSON export) use this
to materialise part of the tree. A failed expansion is recorded on the node
instead of aborting the whole walk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from core.domain.nodes import Node, TreeItem
from core.errors import ExplorerError
from core.services.explorer import TreeDataProvider

logger = logging.getLogger(__name__)


@dataclass
class SnapshotNode:
    item: TreeItem
    children: list[SnapshotNode] = field(default_factory=list)
    expanded: bool = False
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "label": self.item.label,
            "type": self.item.context_value.value if self.item.context_value else None,
        }
        if self.item.tooltip:
            out["tooltip"] = self.item.tooltip
        if self.expanded:
            out["children"] = [c.to_dict() for c in self.children]
        if self.error:
            out["error"] = self.error
        return out


async def expand(provider: TreeDataProvider, node: Node, depth: int) -> SnapshotNode:
    """Render `node` and, while `depth` > 0, its descendants (sequentially)."""

    item = provider.get_tree_item(node)
    snap = SnapshotNode(item=item)
    if depth <= 0 or item.is_leaf:
        return snap
    try:
        kids = await provider.get_children(node)
    except ExplorerError as exc:
        logger.warning("expanding %r failed: %s", item.label, exc)
        snap.error = str(exc)
        return snap
    snap.expanded = True
    for kid in kids:
        snap.children.append(await expand(provider, kid, depth - 1))
    return snap


async def expand_roots(provider: TreeDataProvider, depth: int) -> list[SnapshotNode]:
    roots = await provider.get_children()
    return [await expand(provider, root, depth) for root in roots]
