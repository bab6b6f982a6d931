from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from pydantic import ValidationError

from artifacts.models.graph import Graph
from artifacts.utils import _dumps, _load_json, _write_json
from contract.validation import GraphContractError

if TYPE_CHECKING:
    from pathlib import Path


def load_graph(path: Path) -> Graph:
    """Read a graph document from a JSON file.

    Raises:
        GraphContractError: If the file is not JSON or not a graph document.
        OSError: If the file cannot be read.
    """
    try:
        data = _load_json(path)
    except orjson.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise GraphContractError(msg) from exc

    try:
        return Graph.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid dependency graph in {path}: {exc}"
        raise GraphContractError(msg) from exc


def render_result(graph: Graph) -> bytes:
    """Serialize an annotated graph with sorted keys, byte-stable across runs."""
    return _dumps(graph)


def write_result(path: Path, graph: Graph) -> Path:
    """Write an annotated graph (violations included) as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _write_json(path, graph)
    return path
