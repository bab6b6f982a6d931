"""Graph validation entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from artifacts.models.graph import Graph
    from rules.config import RuleSet
    from validate.engine import Evaluation


def evaluate(
    graph: Graph, rule_set: RuleSet, *, workers: int | None = None
) -> Evaluation:
    """Evaluate via lazy import to avoid package import cycles."""
    from validate.engine import evaluate as _evaluate

    return _evaluate(graph, rule_set, workers=workers)


__all__ = ["evaluate"]
