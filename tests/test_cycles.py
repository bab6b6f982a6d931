from __future__ import annotations

import itertools

import pytest

from artifacts.models.graph import Graph
from graph.cycles import annotate_cycles


def _local(target: str) -> dict[str, object]:
    return {"module": f"./{target}", "resolved": target, "dependencyTypes": ["local"]}


def _graph(order: list[str], edges: dict[str, list[str]]) -> Graph:
    return Graph.model_validate(
        {
            "modules": [
                {"source": source, "dependencies": [_local(t) for t in edges.get(source, [])]}
                for source in order
            ]
        }
    )


def _edges(graph: Graph) -> dict[tuple[str, str], tuple[bool, list[str]]]:
    return {
        (module.source, dependency.resolved): (dependency.circular, dependency.cycle)
        for module in graph.modules
        for dependency in module.dependencies
    }


@pytest.mark.parametrize("order", list(itertools.permutations(["a.js", "b.js", "c.js"])))
def test_triangle_cycle_is_independent_of_scan_order(order: tuple[str, ...]) -> None:
    graph = _graph(list(order), {"a.js": ["b.js"], "b.js": ["c.js"], "c.js": ["a.js"]})

    edges = _edges(annotate_cycles(graph))

    assert edges == {
        ("a.js", "b.js"): (True, ["b.js", "c.js", "a.js"]),
        ("b.js", "c.js"): (True, ["c.js", "a.js", "b.js"]),
        ("c.js", "a.js"): (True, ["a.js", "b.js", "c.js"]),
    }
    assert {frozenset(cycle) for _circular, cycle in edges.values()} == {
        frozenset({"a.js", "b.js", "c.js"})
    }


def test_edges_leaving_the_cycle_are_not_circular() -> None:
    graph = _graph(
        ["a.js", "b.js", "c.js"],
        {"a.js": ["b.js", "c.js"], "b.js": ["a.js"]},
    )

    edges = _edges(annotate_cycles(graph))

    assert edges[("a.js", "b.js")] == (True, ["b.js", "a.js"])
    assert edges[("b.js", "a.js")] == (True, ["a.js", "b.js"])
    assert edges[("a.js", "c.js")] == (False, [])


def test_self_import_is_a_cycle_of_one() -> None:
    graph = _graph(["a.js"], {"a.js": ["a.js"]})

    edges = _edges(annotate_cycles(graph))

    assert edges[("a.js", "a.js")] == (True, ["a.js"])


def test_cycle_uses_shortest_way_back() -> None:
    graph = _graph(
        ["a.js", "b.js", "c.js", "d.js"],
        {
            "a.js": ["b.js"],
            "b.js": ["c.js", "a.js"],
            "c.js": ["d.js"],
            "d.js": ["a.js"],
        },
    )

    edges = _edges(annotate_cycles(graph))

    assert edges[("a.js", "b.js")] == (True, ["b.js", "a.js"])
    assert edges[("c.js", "d.js")] == (True, ["d.js", "a.js", "b.js", "c.js"])


def test_unresolvable_and_external_edges_are_not_cycle_eligible() -> None:
    graph = Graph.model_validate(
        {
            "modules": [
                {
                    "source": "a.js",
                    "dependencies": [
                        {
                            "module": "a.js",
                            "resolved": "",
                            "couldNotResolve": True,
                            "dependencyTypes": ["unknown"],
                        },
                        {
                            "module": "lodash",
                            "resolved": "node_modules/lodash/lodash.js",
                            "dependencyTypes": ["npm"],
                        },
                    ],
                }
            ]
        }
    )

    annotated = annotate_cycles(graph)

    assert all(
        not dependency.circular and dependency.cycle == []
        for dependency in annotated.modules[0].dependencies
    )


def test_stale_annotations_are_recomputed_and_input_is_untouched() -> None:
    graph = Graph.model_validate(
        {
            "modules": [
                {
                    "source": "a.js",
                    "dependencies": [
                        {
                            "module": "./b",
                            "resolved": "b.js",
                            "dependencyTypes": ["local"],
                            "circular": True,
                            "cycle": ["b.js", "a.js"],
                        }
                    ],
                },
                {"source": "b.js"},
            ]
        }
    )
    before = graph.model_dump()

    annotated = annotate_cycles(graph)

    assert annotated.modules[0].dependencies[0].circular is False
    assert annotated.modules[0].dependencies[0].cycle == []
    assert graph.model_dump() == before
