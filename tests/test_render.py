"""Tests for rich rendering of result trees."""

from __future__ import annotations

from rich.console import Console

from healthcheck.render import print_result, render_result

RESULT = {
    "id": "main",
    "label": "Main",
    "status": "CRITICAL",
    "results": [
        {"id": "db", "status": "OK", "runtime": 0.012},
        {"id": "cache", "status": "CRITICAL", "info": "connection refused"},
        "not a result",
    ],
}


class TestRender:
    def test_tree_shape(self) -> None:
        tree = render_result(RESULT)
        assert len(tree.children) == 2
        assert tree.label.plain == "CRITICAL Main (main)"

    def test_child_labels(self) -> None:
        tree = render_result(RESULT)
        assert tree.children[0].label.plain == "OK db 0.012s"
        assert tree.children[1].label.plain == "CRITICAL cache: connection refused"

    def test_print(self) -> None:
        console = Console(record=True, width=100)
        print_result(RESULT, console=console)
        text = console.export_text()
        assert "Main (main)" in text
        assert "connection refused" in text

    def test_invalid_results_ignored(self) -> None:
        tree = render_result({"status": "UNKNOWN", "results": "nope"})
        assert tree.children == []
