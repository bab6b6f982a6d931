"""Determinism verification for depwarden results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import orjson

from artifacts.write import render_result
from validate.engine import evaluate

if TYPE_CHECKING:
    from artifacts.models.graph import Graph
    from rules.config import RuleSet

PARALLEL_WORKERS = 4


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    input_mutated: bool = False


def _top_level_differences(first: bytes, second: bytes) -> list[str]:
    left = orjson.loads(first)
    right = orjson.loads(second)
    keys = sorted(set(left) | set(right))
    differences = [key for key in keys if left.get(key) != right.get(key)]
    if "summary" in differences and left["summary"].get("violations") != right[
        "summary"
    ].get("violations"):
        differences.append("summary.violations")
    return sorted(differences)


def verify_determinism(
    graph: Graph, rule_set: RuleSet, *, workers: int = PARALLEL_WORKERS
) -> DeterminismResult:
    """Verify that evaluating a graph is deterministic and side-effect free.

    Evaluates the graph twice sequentially and once with a thread pool and
    compares the serialized results byte-for-byte. Also checks that the
    input graph is left exactly as it was handed in.

    Args:
        graph: Graph document to evaluate.
        rule_set: Rule set to evaluate it against.
        workers: Thread count for the parallel run.

    Returns:
        DeterminismResult with ok status, the sorted top-level sections that
        differ between runs, and whether the input graph was modified.
    """
    before = render_result(graph)

    first = render_result(evaluate(graph, rule_set, workers=1).graph)
    second = render_result(evaluate(graph, rule_set, workers=1).graph)
    parallel = render_result(evaluate(graph, rule_set, workers=workers).graph)

    mismatches: set[str] = set()
    for other in (second, parallel):
        if other != first:
            mismatches.update(_top_level_differences(first, other) or ["document"])

    input_mutated = render_result(graph) != before
    ok = not mismatches and not input_mutated
    return DeterminismResult(
        ok=ok,
        mismatches=tuple(sorted(mismatches)),
        input_mutated=input_mutated,
    )
