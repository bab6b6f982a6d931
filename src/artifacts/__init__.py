"""Graph document input and result output."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from artifacts.models.graph import Graph


def load_graph(path: Path) -> Graph:
    """Load a graph via lazy import to avoid package import cycles."""
    from artifacts.write import load_graph as _load_graph

    return _load_graph(path)


def write_result(path: Path, graph: Graph) -> Path:
    """Write a result via lazy import to avoid package import cycles."""
    from artifacts.write import write_result as _write_result

    return _write_result(path, graph)


__all__ = ["load_graph", "write_result"]
