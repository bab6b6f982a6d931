from __future__ import annotations

import pytest

from artifacts.models.graph import Graph
from artifacts.write import render_result
from contract.validation import GraphContractError
from rules.config import ConfigError, RuleSet
from validate.engine import evaluate


def _dep(target: str, **fields: object) -> dict[str, object]:
    data: dict[str, object] = {
        "module": f"./{target}",
        "resolved": target,
        "dependencyTypes": ["local"],
    }
    data.update(fields)
    return data


def _graph() -> Graph:
    return Graph.model_validate(
        {
            "modules": [
                {
                    "source": "src/index.js",
                    "dependencies": [
                        _dep("src/a.js"),
                        _dep(
                            "node_modules/lodash/lodash.js",
                            module="lodash",
                            dependencyTypes=["npm"],
                            license="MIT",
                        ),
                        _dep(
                            "",
                            module="./ghost",
                            couldNotResolve=True,
                            dependencyTypes=["unknown"],
                        ),
                    ],
                },
                {"source": "src/a.js", "dependencies": [_dep("src/b.js")]},
                {"source": "src/b.js", "dependencies": [_dep("src/a.js")]},
                {"source": "src/lonely.js", "orphan": True},
                {"source": ".eslintrc.js", "orphan": True},
                {"source": "test/a.spec.js", "dependencies": [_dep("src/a.js")]},
            ],
            "summary": {"optionsUsed": {"maxDepth": 0}},
        }
    )


def _rule_set(data: dict[str, object]) -> RuleSet:
    return RuleSet.model_validate(data)


BASIC_RULES = {
    "forbidden": [
        {"name": "no-circular", "severity": "warn", "from": {}, "to": {"circular": True}},
        {"name": "not-to-unresolvable", "from": {}, "to": {"couldNotResolve": True}},
        {"name": "no-orphans", "severity": "warn", "from": {}, "to": {"orphan": True}},
    ]
}


def _summary(violations) -> list[tuple[str, str, str, str]]:
    return [(v.from_, v.to, v.rule.name, v.rule.severity) for v in violations]


def test_forbidden_rules_produce_sorted_violations() -> None:
    result = evaluate(_graph(), _rule_set(BASIC_RULES))

    assert _summary(result.violations) == [
        ("src/a.js", "src/b.js", "no-circular", "warn"),
        ("src/b.js", "src/a.js", "no-circular", "warn"),
        ("src/index.js", "./ghost", "not-to-unresolvable", "error"),
        ("src/lonely.js", "src/lonely.js", "no-orphans", "warn"),
    ]
    assert result.violations[0].cycle == ["src/b.js", "src/a.js"]
    assert result.violations[2].cycle is None


def test_summary_counts_and_passthrough_keys() -> None:
    result = evaluate(_graph(), _rule_set(BASIC_RULES))
    summary = result.graph.summary

    assert summary.violations == result.violations
    assert (summary.error, summary.warn, summary.info) == (1, 3, 0)
    assert summary.total_cruised == 6
    assert summary.total_dependencies_cruised == 6
    assert summary.model_dump(by_alias=True)["optionsUsed"] == {"maxDepth": 0}


def test_modules_and_dependencies_are_marked_valid_or_not() -> None:
    result = evaluate(_graph(), _rule_set(BASIC_RULES))
    by_source = {module.source: module for module in result.graph.modules}

    index = by_source["src/index.js"]
    assert index.valid is True
    assert [d.valid for d in index.dependencies] == [True, True, False]
    ghost_rules = index.dependencies[2].rules
    assert ghost_rules is not None
    assert [(r.name, r.severity) for r in ghost_rules] == [("not-to-unresolvable", "error")]

    assert by_source["src/lonely.js"].valid is False
    assert by_source[".eslintrc.js"].valid is True


def test_universal_rule_flags_every_dependency_as_unnamed() -> None:
    result = evaluate(
        _graph(), _rule_set({"forbidden": [{"severity": "info", "from": {}, "to": {}}]})
    )

    assert len(result.violations) == result.graph.summary.total_dependencies_cruised
    assert {v.rule.name for v in result.violations} == {"unnamed"}
    assert result.graph.summary.info == 6


def test_allowed_rules_report_not_in_allowed_for_governed_modules() -> None:
    rule_set = _rule_set(
        {
            "allowed": [
                {"from": {"path": "^src/"}, "to": {"path": "^src/"}},
                {"from": {"path": "^src/"}, "to": {"dependencyTypes": ["npm"]}},
            ]
        }
    )

    result = evaluate(_graph(), rule_set)

    assert _summary(result.violations) == [
        ("src/index.js", "./ghost", "not-in-allowed", "warn"),
    ]


def test_allowed_severity_is_configurable() -> None:
    rule_set = _rule_set(
        {
            "allowed": [{"from": {}, "to": {"path": "^src/"}}],
            "allowedSeverity": "error",
        }
    )

    result = evaluate(_graph(), rule_set)

    assert {v.rule.severity for v in result.violations} == {"error"}
    assert {(v.from_, v.to) for v in result.violations} == {
        ("src/index.js", "node_modules/lodash/lodash.js"),
        ("src/index.js", "./ghost"),
    }


def test_reachable_true_rule_reports_each_reached_module_with_via() -> None:
    rule_set = _rule_set(
        {
            "forbidden": [
                {
                    "name": "spec-not-reaching-b",
                    "from": {"path": "^test/"},
                    "to": {"path": "^src/b\\.js$", "reachable": True},
                }
            ]
        }
    )

    result = evaluate(_graph(), rule_set)

    assert _summary(result.violations) == [
        ("test/a.spec.js", "src/b.js", "spec-not-reaching-b", "error"),
    ]
    assert result.violations[0].via == ["src/a.js"]
    spec = next(m for m in result.graph.modules if m.source == "test/a.spec.js")
    assert spec.reaches is not None
    assert spec.reaches[0].as_defined_in_rule == "spec-not-reaching-b"


def test_reachable_false_rule_reports_unreachable_modules() -> None:
    rule_set = _rule_set(
        {
            "forbidden": [
                {
                    "name": "no-unreachable",
                    "from": {"path": "^src/index\\.js$"},
                    "to": {"path": "^src/", "reachable": False},
                }
            ]
        }
    )

    result = evaluate(_graph(), rule_set)

    assert _summary(result.violations) == [
        ("src/lonely.js", "src/lonely.js", "no-unreachable", "error"),
    ]


def test_bad_pattern_is_fatal_before_graph_is_looked_at() -> None:
    graph = _graph()
    graph.modules.append(graph.modules[0].model_copy())
    rule_set = _rule_set(
        {
            "forbidden": [
                {"name": "broken", "from": {"path": "("}, "to": {}},
                {"name": "also-broken", "from": {}, "to": {"licenseNot": "[a-"}},
            ]
        }
    )

    with pytest.raises(ConfigError) as exc_info:
        evaluate(graph, rule_set)

    assert "forbidden[0].from.path" in str(exc_info.value)
    assert "forbidden[1].to.licenseNot" in str(exc_info.value)


def test_bad_orphan_exception_is_a_config_error() -> None:
    rule_set = _rule_set({"engine": {"orphanExceptions": ["("]}})

    with pytest.raises(ConfigError):
        evaluate(_graph(), rule_set)


def test_duplicate_sources_are_rejected() -> None:
    graph = _graph()
    graph.modules.append(graph.modules[0].model_copy())

    with pytest.raises(GraphContractError, match="Duplicate module source"):
        evaluate(graph, _rule_set(BASIC_RULES))


def test_input_graph_is_not_mutated() -> None:
    graph = _graph()
    before = render_result(graph)

    evaluate(graph, _rule_set(BASIC_RULES))

    assert render_result(graph) == before


@pytest.mark.parametrize("workers", [2, 4, 16])
def test_results_are_identical_for_any_worker_count(workers: int) -> None:
    rule_set = _rule_set(BASIC_RULES)

    sequential = evaluate(_graph(), rule_set, workers=1)
    again = evaluate(_graph(), rule_set, workers=1)
    parallel = evaluate(_graph(), rule_set, workers=workers)

    assert render_result(sequential.graph) == render_result(again.graph)
    assert render_result(sequential.graph) == render_result(parallel.graph)
    assert sequential.violations == parallel.violations
