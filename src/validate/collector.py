"""Violation aggregation and run summary."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from artifacts.models.graph import Graph, Summary
    from artifacts.models.violations import Violation

SEVERITY_ORDER = {"error": 0, "warn": 1, "info": 2}


def violation_sort_key(
    violation: Violation,
) -> tuple[str, str, str, int, str, tuple[str, ...], tuple[str, ...]]:
    return (
        violation.from_,
        violation.to,
        violation.rule.name,
        SEVERITY_ORDER[violation.rule.severity],
        violation.rule.comment or "",
        tuple(violation.cycle or ()),
        tuple(violation.via or ()),
    )


def collect_violations(partials: Iterable[Iterable[Violation]]) -> list[Violation]:
    """Merge partial violation lists into one deterministically ordered list.

    The order depends only on the violations themselves, never on the order
    (or thread) in which the partial lists were produced.
    """
    merged = [violation for partial in partials for violation in partial]
    merged.sort(key=violation_sort_key)
    return merged


def build_summary(graph: Graph, violations: list[Violation]) -> Summary:
    """Return the graph's summary with violations and counters filled in.

    Keys the upstream steps put in the summary are kept as they are.
    """
    counts = dict.fromkeys(SEVERITY_ORDER, 0)
    for violation in violations:
        counts[violation.rule.severity] += 1

    summary = graph.summary.model_copy(deep=True)
    summary.violations = list(violations)
    summary.error = counts["error"]
    summary.warn = counts["warn"]
    summary.info = counts["info"]
    summary.total_cruised = len(graph.modules)
    summary.total_dependencies_cruised = sum(
        len(module.dependencies) for module in graph.modules
    )
    return summary


__all__ = ["build_summary", "collect_violations", "violation_sort_key"]
