"""Circular dependency annotation.

An edge ``A -> B`` is circular when ``B`` leads back to ``A``, i.e. both
live in the same strongly connected component (a self-import counts). The
edge's ``cycle`` is the shortest way back: it starts at the edge's target,
ends at its origin and never repeats a module. For ``A -> B -> C -> A`` the
three edges get ``[B, C, A]``, ``[C, A, B]`` and ``[A, B, C]``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graph.algos import (
    build_dependency_graph,
    find_cycles,
    is_local_edge,
    shortest_path,
)

if TYPE_CHECKING:
    from artifacts.models.graph import Graph

logger = logging.getLogger(__name__)


def annotate_cycles(graph: Graph) -> Graph:
    """Return a copy of the graph with circular/cycle set on every edge."""
    annotated = graph.model_copy(deep=True)
    adjacency = build_dependency_graph(annotated)
    components = find_cycles(adjacency)
    component_of = {
        source: frozenset(component) for component in components for source in component
    }
    sources = frozenset(adjacency)
    circular_edges = 0

    for module in annotated.modules:
        for dependency in module.dependencies:
            dependency.circular = False
            dependency.cycle = []
            if not is_local_edge(dependency, sources):
                continue

            component = component_of.get(module.source)
            if component is None or dependency.resolved not in component:
                continue

            path = shortest_path(
                adjacency, dependency.resolved, module.source, within=component
            )
            if path is None:
                continue
            dependency.circular = True
            dependency.cycle = path
            circular_edges += 1

    logger.debug(
        "found %d circular edges in %d cycles", circular_edges, len(components)
    )
    return annotated


__all__ = ["annotate_cycles"]
