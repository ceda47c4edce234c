"""CLI UI components (Rich).

Why separate components:
- Command logic stays apart from visual details.
- The same snapshot is drawn as a Rich tree or exported as JSON.
"""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from core.domain.context import Context, ExplorerSession
from core.domain.nodes import NodeTag, TreeItem
from core.services.snapshot import SnapshotNode

_TAG_STYLES: dict[NodeTag, str] = {
    NodeTag.CONTEXT: "bold cyan",
    NodeTag.PROJECT: "bold",
    NodeTag.WORKFLOW_EDIT: "magenta",
    NodeTag.WORKFLOW_RUN: "white",
    NodeTag.APPLICATION: "green",
    NodeTag.PIPELINE: "blue",
    NodeTag.WORKFLOW_STEP: "dim",
}


def item_text(item: TreeItem) -> Text:
    style = _TAG_STYLES.get(item.context_value, "") if item.context_value else "yellow"
    text = Text(item.label, style=style)
    if item.icon:
        text.append("  (current)", style="dim green")
    return text


def _attach(parent: Tree, snap: SnapshotNode) -> None:
    branch = parent.add(item_text(snap.item))
    if snap.error:
        branch.add(Text(f"✗ {snap.error}", style="red"))
        return
    for child in snap.children:
        _attach(branch, child)


def build_tree(title: str, roots: Sequence[SnapshotNode]) -> Tree:
    """Build a Rich tree from expanded snapshots."""

    tree = Tree(Text(title, style="bold"), guide_style="dim")
    for root in roots:
        _attach(tree, root)
    return tree


def build_contexts_table(contexts: Sequence[Context], session: ExplorerSession) -> Table:
    table = Table(title="CDS contexts")
    table.add_column("Context", style="cyan", no_wrap=True)
    table.add_column("Config file", style="dim")
    table.add_column("Current", style="green")
    for ctx in contexts:
        table.add_row(ctx.name, str(ctx.client.config_file), "yes" if session.is_active(ctx.name) else "")
    return table


def print_error(console: Console, message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
