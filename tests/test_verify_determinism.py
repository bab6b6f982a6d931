from __future__ import annotations

import pytest

from artifacts.models.graph import Graph
from rules.config import RuleSet
from validate.engine import Evaluation
from verify.verify import DeterminismResult, verify_determinism


def _dep(target: str) -> dict[str, object]:
    return {"module": f"./{target[0]}", "resolved": target, "dependencyTypes": ["local"]}


def _graph() -> Graph:
    return Graph.model_validate(
        {
            "modules": [
                {"source": "c.js", "dependencies": [_dep("a.js")]},
                {"source": "a.js", "dependencies": [_dep("b.js")]},
                {"source": "b.js", "dependencies": [_dep("c.js")]},
                {"source": "orphan.js", "orphan": True},
            ]
        }
    )


RULES = RuleSet.model_validate(
    {
        "forbidden": [
            {"name": "no-circular", "from": {}, "to": {"circular": True}},
            {
                "name": "no-orphans",
                "severity": "warn",
                "from": {},
                "to": {"orphan": True},
            },
            {
                "name": "reach",
                "severity": "info",
                "from": {"path": "^a"},
                "to": {"reachable": True},
            },
        ]
    }
)


def test_verify_determinism_ok_for_engine() -> None:
    assert verify_determinism(_graph(), RULES) == DeterminismResult(ok=True)


def test_verify_determinism_reports_differing_sections(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[int] = []

    def _flaky_evaluate(
        graph: Graph, rule_set: RuleSet, *, workers: int
    ) -> Evaluation:
        calls.append(workers)
        annotated = graph.model_copy(deep=True)
        annotated.summary.info = len(calls)
        return Evaluation(graph=annotated, violations=[])

    monkeypatch.setattr("verify.verify.evaluate", _flaky_evaluate)

    result = verify_determinism(_graph(), RULES, workers=3)

    assert calls == [1, 1, 3]
    assert result == DeterminismResult(ok=False, mismatches=("summary",))


def test_verify_determinism_detects_input_mutation(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _mutating_evaluate(
        graph: Graph, rule_set: RuleSet, *, workers: int
    ) -> Evaluation:
        graph.modules[0].valid = False
        return Evaluation(graph=graph, violations=[])

    monkeypatch.setattr("verify.verify.evaluate", _mutating_evaluate)

    result = verify_determinism(_graph(), RULES)

    assert result.ok is False
    assert result.input_mutated is True
