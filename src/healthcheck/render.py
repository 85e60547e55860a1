"""Terminal rendering of summarized results as a rich tree."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

STATUS_STYLES = {
    "OK": "bold green",
    "WARNING": "bold yellow",
    "CRITICAL": "bold red",
    "UNKNOWN": "bold magenta",
}


def _label(result: Mapping[str, Any]) -> Text:
    status = str(result.get("status", "UNKNOWN"))
    text = Text()
    text.append(status, style=STATUS_STYLES.get(status, "dim"))

    name = result.get("label") or result.get("id")
    if name:
        text.append(f" {name}")
    if result.get("label") and result.get("id"):
        text.append(f" ({result['id']})", style="dim")
    if "runtime" in result:
        text.append(f" {result['runtime']}s", style="dim")
    if result.get("info"):
        text.append(f": {result['info']}", style="italic")
    return text


def render_result(result: Mapping[str, Any], parent: Tree | None = None) -> Tree:
    """Build a tree with one node per result, children under their parent."""
    node = Tree(_label(result)) if parent is None else parent.add(_label(result))
    children = result.get("results")
    if isinstance(children, (list, tuple)):
        for child in children:
            if isinstance(child, Mapping):
                render_result(child, node)
    return node


def print_result(result: Mapping[str, Any], console: Console | None = None) -> None:
    (console or Console()).print(render_result(result))
