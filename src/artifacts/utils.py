"""Utility functions for reading graphs and writing results."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import orjson

if TYPE_CHECKING:
    from pathlib import Path


def _to_dict(obj: object) -> object:
    """Convert a model to a dict for JSON serialization."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(by_alias=True, exclude_none=True, mode="json")
    return obj


def _dumps(obj: object) -> bytes:
    payload = _to_dict(obj)
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(payload, option=opts)


def _write_json(path: Path, obj: object) -> None:
    path.write_bytes(_dumps(obj))


def _load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())
