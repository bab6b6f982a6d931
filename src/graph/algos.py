"""Graph algorithms for depwarden."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from artifacts.models.graph import Dependency, Graph


def is_local_edge(dependency: Dependency, sources: set[str] | frozenset[str]) -> bool:
    """Whether an edge points at a resolved module inside the graph."""
    return (
        not dependency.could_not_resolve
        and bool(dependency.resolved)
        and dependency.resolved in sources
    )


def build_dependency_graph(graph: Graph) -> dict[str, list[str]]:
    """Build an adjacency list of local, resolvable edges.

    Args:
        graph: The dependency graph document

    Returns:
        Mapping of module source to the sources it depends on, in module
        order and dependency declaration order (duplicates dropped)
    """
    sources = {module.source for module in graph.modules}
    adjacency: dict[str, list[str]] = {}

    for module in graph.modules:
        targets: list[str] = []
        for dependency in module.dependencies:
            if not is_local_edge(dependency, sources):
                continue
            if dependency.resolved not in targets:
                targets.append(dependency.resolved)
        adjacency[module.source] = targets

    return adjacency


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Extract a strongly connected component from the stack."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    scc.reverse()
    return scc


def _visit(node: str, state: _TarjanState) -> None:
    state.indices[node] = state.index
    state.low_link[node] = state.index
    state.index += 1
    state.stack.append(node)
    state.on_stack.add(node)


def _strongconnect(root: str, graph: dict[str, list[str]], state: _TarjanState) -> None:
    """Process a root node in Tarjan's algorithm.

    Iterative, with an explicit work stack of (node, next neighbour index),
    so long dependency chains do not hit the interpreter recursion limit.
    """
    _visit(root, state)
    work: list[tuple[str, int]] = [(root, 0)]

    while work:
        node, position = work[-1]
        neighbors = graph.get(node, [])

        if position < len(neighbors):
            work[-1] = (node, position + 1)
            neighbor = neighbors[position]
            if neighbor not in state.indices:
                _visit(neighbor, state)
                work.append((neighbor, 0))
            elif neighbor in state.on_stack:
                state.low_link[node] = min(
                    state.low_link[node], state.indices[neighbor]
                )
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[node])

        if state.low_link[node] == state.indices[node]:
            scc = _extract_scc(state, node)
            if len(scc) > 1 or node in graph.get(node, []):
                state.sccs.append(scc)


def find_cycles(graph: dict[str, list[str]]) -> list[list[str]]:
    """Find cyclic strongly connected components using Tarjan's algorithm.

    Args:
        graph: Adjacency list; iteration order of keys and neighbours is
            the traversal order

    Returns:
        List of components that contain a cycle (more than one node, or a
        single node with a self-loop), each in discovery order
    """
    state = _TarjanState()

    for node in graph:
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return state.sccs


def shortest_path(
    graph: dict[str, list[str]],
    start: str,
    goal: str,
    *,
    within: set[str] | frozenset[str] | None = None,
) -> list[str] | None:
    """Breadth-first shortest path from start to goal, both included.

    Neighbours are expanded in adjacency order, so ties resolve the same way
    on every run. ``within`` restricts the nodes the path may pass through.
    """
    if start == goal:
        return [start]

    previous: dict[str, str] = {}
    seen = {start}
    queue: deque[str] = deque([start])

    while queue:
        node = queue.popleft()
        for neighbor in graph.get(node, []):
            if neighbor in seen or (within is not None and neighbor not in within):
                continue
            previous[neighbor] = node
            if neighbor == goal:
                path = [goal]
                while path[-1] != start:
                    path.append(previous[path[-1]])
                path.reverse()
                return path
            seen.add(neighbor)
            queue.append(neighbor)

    return None


def breadth_first_paths(
    start: str,
    neighbors: Callable[[str, int], Iterable[str]],
) -> dict[str, list[str]]:
    """Every node reachable from start, mapped to the hops leading to it.

    ``neighbors(node, depth)`` yields the successors of ``node`` reached at
    ``depth`` hops from ``start`` (0 for the start's own edges). The hops
    list excludes both the start and the reached node. The start itself is
    only included when a cycle leads back to it.
    """
    reached: dict[str, list[str]] = {}
    queue: deque[tuple[str, list[str], int]] = deque([(start, [], 0)])
    expanded = {start}

    while queue:
        node, hops, depth = queue.popleft()
        for neighbor in neighbors(node, depth):
            if neighbor in reached:
                continue
            reached[neighbor] = hops
            if neighbor not in expanded:
                expanded.add(neighbor)
                queue.append((neighbor, [*hops, neighbor], depth + 1))

    return reached


__all__ = [
    "_TarjanState",
    "_extract_scc",
    "_strongconnect",
    "breadth_first_paths",
    "build_dependency_graph",
    "find_cycles",
    "is_local_edge",
    "shortest_path",
]
