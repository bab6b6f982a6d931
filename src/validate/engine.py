"""Rule engine: evaluate a rule set against a dependency graph.

``evaluate`` compiles the rules, annotates a copy of the graph with cycle
and reachability facts, then judges every module and every dependency
against every rule. The input graph is never modified.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from artifacts.models.graph import RuleSummary
from artifacts.models.violations import ViolatedRule, Violation
from contract.validation import ensure_valid_graph
from graph.cycles import annotate_cycles
from graph.reachability import annotate_reachability
from rules.compiled import compile_rule_set
from rules.config import DEFAULT_RULE_NAME, ConfigError
from rules.matching import matches_from, matches_module_to, matches_to
from rules.orphans import DEFAULT_ORPHAN_POLICY, OrphanPolicy, is_orphan_violation
from validate.collector import build_summary, collect_violations

if TYPE_CHECKING:
    from artifacts.models.graph import Dependency, Graph, Module
    from artifacts.models.violations import SeverityType
    from rules.compiled import CompiledRule, CompiledRuleSet
    from rules.config import Rule, RuleSet

logger = logging.getLogger(__name__)


class Evaluation(NamedTuple):
    graph: Graph
    violations: list[Violation]


@dataclass
class _ModuleOutcome:
    """Everything the matching pass learned about one module."""

    index: int
    violations: list[Violation] = field(default_factory=list)
    module_rules: list[RuleSummary] = field(default_factory=list)
    dependency_rules: list[list[RuleSummary]] = field(default_factory=list)


def matches_reaches_rule(rule: Rule | CompiledRule, module: Module) -> bool:
    """Whether the module holds reachability facts recorded for this rule.

    Rules without a ``to.reachable`` clause never match. A nameless rule
    only matches entries filed under ``not-in-allowed``.
    """
    if rule.to.reachable is None:
        return False
    return any(
        entry.as_defined_in_rule == rule.bucket for entry in module.reaches or []
    )


def matches_reachable_rule(rule: Rule | CompiledRule, module: Module) -> bool:
    """Whether the module's reachability outcome for this rule is the one it names."""
    if rule.to.reachable is None:
        return False
    return any(
        entry.as_defined_in_rule == rule.bucket and entry.value == rule.to.reachable
        for entry in module.reachable or []
    )


def _violated(name: str, severity: SeverityType, comment: str | None) -> ViolatedRule:
    return ViolatedRule(name=name, severity=severity, comment=comment)


def _module_rule_violations(
    rule: CompiledRule, module: Module, policy: OrphanPolicy
) -> list[Violation]:
    violated = _violated(rule.display_name, rule.severity, rule.comment)

    if rule.to.orphan is not None:
        if is_orphan_violation(rule, module, policy) and matches_module_to(
            rule.to, module
        ):
            return [Violation(rule=violated, from_=module.source, to=module.source)]
        return []

    if rule.to.reachable:
        if not matches_reaches_rule(rule, module):
            return []
        return [
            Violation(
                rule=violated,
                from_=module.source,
                to=reached.source,
                via=list(reached.via) or None,
            )
            for entry in module.reaches or []
            if entry.as_defined_in_rule == rule.bucket
            for reached in entry.modules
        ]

    if matches_reachable_rule(rule, module):
        return [Violation(rule=violated, from_=module.source, to=module.source)]
    return []


def _dependency_violation(
    rule: CompiledRule, module: Module, dependency: Dependency
) -> Violation:
    return Violation(
        rule=_violated(rule.display_name, rule.severity, rule.comment),
        from_=module.source,
        to=dependency.target,
        cycle=list(dependency.cycle) if dependency.circular else None,
    )


def _breaks_allowed(
    governing: list[CompiledRule], dependency: Dependency
) -> bool:
    return bool(governing) and not any(
        matches_to(rule.to, dependency) for rule in governing
    )


def _evaluate_module(
    index: int, module: Module, rules: CompiledRuleSet, policy: OrphanPolicy
) -> _ModuleOutcome:
    outcome = _ModuleOutcome(index=index)
    dependency_rules = [rule for rule in rules.forbidden if not rule.is_module_rule]

    for rule in rules.forbidden:
        if not rule.is_module_rule:
            continue
        # 'from' of a reachable: false rule selects start points, not the
        # unreached module being reported.
        if rule.to.reachable is not False and not matches_from(rule.from_, module):
            continue
        found = _module_rule_violations(rule, module, policy)
        if found:
            outcome.violations.extend(found)
            outcome.module_rules.append(
                RuleSummary(name=rule.display_name, severity=rule.severity)
            )

    from_matches = [
        rule for rule in dependency_rules if matches_from(rule.from_, module)
    ]
    governing = [rule for rule in rules.allowed if matches_from(rule.from_, module)]

    for dependency in module.dependencies:
        hits: list[RuleSummary] = []
        for rule in from_matches:
            if matches_to(rule.to, dependency):
                outcome.violations.append(
                    _dependency_violation(rule, module, dependency)
                )
                hits.append(
                    RuleSummary(name=rule.display_name, severity=rule.severity)
                )

        if _breaks_allowed(governing, dependency):
            outcome.violations.append(
                Violation(
                    rule=_violated(DEFAULT_RULE_NAME, rules.allowed_severity, None),
                    from_=module.source,
                    to=dependency.target,
                    cycle=list(dependency.cycle) if dependency.circular else None,
                )
            )
            hits.append(
                RuleSummary(name=DEFAULT_RULE_NAME, severity=rules.allowed_severity)
            )

        outcome.dependency_rules.append(hits)

    return outcome


def _run_matching_pass(
    graph: Graph, rules: CompiledRuleSet, policy: OrphanPolicy, workers: int
) -> list[_ModuleOutcome]:
    if workers <= 1 or len(graph.modules) <= 1:
        return [
            _evaluate_module(index, module, rules, policy)
            for index, module in enumerate(graph.modules)
        ]

    outcomes: list[_ModuleOutcome] = []
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(_evaluate_module, index, module, rules, policy)
            for index, module in enumerate(graph.modules)
        ]
        for future in as_completed(futures):
            outcomes.append(future.result())
    return outcomes


def _apply_outcomes(graph: Graph, outcomes: list[_ModuleOutcome]) -> None:
    for outcome in outcomes:
        module = graph.modules[outcome.index]
        module.valid = not outcome.module_rules
        module.rules = outcome.module_rules or None
        for dependency, hits in zip(
            module.dependencies, outcome.dependency_rules, strict=True
        ):
            dependency.valid = not hits
            dependency.rules = hits or None


def _orphan_policy(rule_set: RuleSet, base: OrphanPolicy) -> OrphanPolicy:
    if not rule_set.engine.orphan_exceptions:
        return base
    try:
        return base.extended(rule_set.engine.orphan_exceptions)
    except re.error as exc:
        msg = f"Invalid rule set: engine.orphanExceptions: {exc}"
        raise ConfigError(msg) from exc


def evaluate(
    graph: Graph,
    rule_set: RuleSet,
    *,
    workers: int | None = None,
    orphan_policy: OrphanPolicy = DEFAULT_ORPHAN_POLICY,
) -> Evaluation:
    """Validate a dependency graph against a rule set.

    Args:
        graph: Graph document as produced by extraction and resolution
        rule_set: Forbidden and allowed rules
        workers: Threads for the matching pass; defaults to the rule set's
            ``engine.workers``. The result does not depend on it.
        orphan_policy: Basename exceptions for orphan rules

    Returns:
        The annotated copy of the graph (its summary carries the
        violations) and the sorted violation list.

    Raises:
        ConfigError: If a rule pattern does not compile.
        GraphContractError: If module sources are missing or duplicated.
    """
    rules = compile_rule_set(rule_set)
    policy = _orphan_policy(rule_set, orphan_policy)
    ensure_valid_graph(graph)

    annotated = annotate_cycles(graph)
    annotated = annotate_reachability(annotated, rules.reachability_rules)

    worker_count = workers if workers is not None else rule_set.engine.workers
    outcomes = _run_matching_pass(annotated, rules, policy, worker_count)
    _apply_outcomes(annotated, outcomes)

    violations = collect_violations(outcome.violations for outcome in outcomes)
    annotated.summary = build_summary(annotated, violations)

    logger.info(
        "evaluated %d modules: %d errors, %d warnings, %d informational",
        len(annotated.modules),
        annotated.summary.error,
        annotated.summary.warn,
        annotated.summary.info,
    )
    return Evaluation(graph=annotated, violations=violations)


__all__ = [
    "Evaluation",
    "evaluate",
    "matches_reachable_rule",
    "matches_reaches_rule",
]
