"""Reachability annotation for rules with a ``to.reachable`` clause.

For every such rule the modules matching the rule's ``from`` are start
points. From a start point the first hop follows any local edge; further
hops skip dynamic imports and edges marked not followable, so those only
ever show up as the entry edge.

* ``reachable: true`` rules give the start module a ``reaches`` entry
  listing the reached modules that match the rule's ``to`` path clauses.
* ``reachable: false`` rules give every module matching the ``to`` path
  clauses a ``reachable`` entry telling whether any start point reaches it.

Entries are filed under the rule's name, or ``not-in-allowed`` for nameless
rules. Results are computed into side tables and merged into a copy of the
graph at the end.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from artifacts.models.graph import ReachableEntry, ReachedModule, ReachesEntry
from graph.algos import breadth_first_paths, is_local_edge
from rules.matching import matches_from, matches_module_to

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from artifacts.models.graph import Graph
    from rules.compiled import CompiledRule

logger = logging.getLogger(__name__)


def _neighbor_function(graph: Graph) -> Callable[[str, int], Iterable[str]]:
    sources = frozenset(module.source for module in graph.modules)
    entry_edges: dict[str, list[str]] = {}
    followed_edges: dict[str, list[str]] = {}

    for module in graph.modules:
        entry: list[str] = []
        followed: list[str] = []
        for dependency in module.dependencies:
            if not is_local_edge(dependency, sources):
                continue
            entry.append(dependency.resolved)
            if dependency.followable and not dependency.dynamic:
                followed.append(dependency.resolved)
        entry_edges[module.source] = entry
        followed_edges[module.source] = followed

    def neighbors(node: str, depth: int) -> Iterable[str]:
        if depth == 0:
            return entry_edges.get(node, [])
        return followed_edges.get(node, [])

    return neighbors


def compute_reaches(
    graph: Graph, rules: Sequence[CompiledRule]
) -> tuple[dict[str, list[ReachesEntry]], dict[str, list[ReachableEntry]]]:
    """Compute reachability side tables for the given rules.

    Returns:
        Two mappings keyed by module source: ``reaches`` entries for
        ``reachable: true`` rules and ``reachable`` entries for
        ``reachable: false`` rules
    """
    neighbors = _neighbor_function(graph)
    modules_by_source = {module.source: module for module in graph.modules}
    reaches: dict[str, list[ReachesEntry]] = {}
    reachable: dict[str, list[ReachableEntry]] = {}
    paths_cache: dict[str, dict[str, list[str]]] = {}

    def paths_from(source: str) -> dict[str, list[str]]:
        if source not in paths_cache:
            paths_cache[source] = breadth_first_paths(source, neighbors)
        return paths_cache[source]

    for rule in rules:
        if rule.to.reachable is None:
            continue
        starts = [
            module for module in graph.modules if matches_from(rule.from_, module)
        ]

        if rule.to.reachable:
            for start in starts:
                reached = [
                    ReachedModule(source=target, via=hops)
                    for target, hops in paths_from(start.source).items()
                    if target != start.source
                    and matches_module_to(rule.to, modules_by_source[target])
                ]
                if reached:
                    reaches.setdefault(start.source, []).append(
                        ReachesEntry(modules=reached, as_defined_in_rule=rule.bucket)
                    )
            continue

        matched_from: dict[str, str] = {}
        for start in starts:
            matched_from.setdefault(start.source, start.source)
            for target in paths_from(start.source):
                matched_from.setdefault(target, start.source)

        for module in graph.modules:
            if not matches_module_to(rule.to, module):
                continue
            reachable.setdefault(module.source, []).append(
                ReachableEntry(
                    value=module.source in matched_from,
                    as_defined_in_rule=rule.bucket,
                    matched_from=matched_from.get(module.source),
                )
            )

    return reaches, reachable


def annotate_reachability(graph: Graph, rules: Sequence[CompiledRule]) -> Graph:
    """Return a copy of the graph with reaches/reachable entries merged in."""
    reaches, reachable = compute_reaches(graph, rules)
    annotated = graph.model_copy(deep=True)

    for module in annotated.modules:
        module.reaches = reaches.get(module.source)
        module.reachable = reachable.get(module.source)

    logger.debug(
        "reachability: %d modules reach, %d modules checked for being reachable",
        len(reaches),
        len(reachable),
    )
    return annotated


__all__ = ["annotate_reachability", "compute_reaches"]
