"""Rule precompilation.

Every regular expression in a rule set is compiled exactly once, before any
module is evaluated. A pattern that fails to compile is a configuration
error; all failures of a rule set are reported together in one
``ConfigError``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from rules.config import DEFAULT_RULE_NAME, UNNAMED_RULE, ConfigError

if TYPE_CHECKING:
    from artifacts.models.violations import SeverityType
    from rules.config import Restriction, Rule, RuleSet, ToRestriction

logger = logging.getLogger(__name__)

RuleKind = Literal["forbidden", "allowed"]


@dataclass(frozen=True)
class CompiledRestriction:
    path: re.Pattern[str] | None = None
    path_not: re.Pattern[str] | None = None


@dataclass(frozen=True)
class CompiledToRestriction(CompiledRestriction):
    could_not_resolve: bool | None = None
    circular: bool | None = None
    dependency_types: frozenset[str] | None = None
    more_than_one_dependency_type: bool | None = None
    license: re.Pattern[str] | None = None
    license_not: re.Pattern[str] | None = None
    reachable: bool | None = None
    orphan: bool | None = None


@dataclass(frozen=True)
class CompiledRule:
    """A rule with its patterns compiled, tagged with the list it came from."""

    kind: RuleKind
    name: str | None
    severity: SeverityType
    comment: str | None
    from_: CompiledRestriction
    to: CompiledToRestriction

    @property
    def bucket(self) -> str:
        return self.name or DEFAULT_RULE_NAME

    @property
    def display_name(self) -> str:
        return self.name or UNNAMED_RULE

    @property
    def is_module_rule(self) -> bool:
        """True for rules judged per module (orphans, reachability)."""
        return self.to.orphan is not None or self.to.reachable is not None


@dataclass(frozen=True)
class CompiledRuleSet:
    forbidden: tuple[CompiledRule, ...]
    allowed: tuple[CompiledRule, ...]
    allowed_severity: SeverityType

    @property
    def reachability_rules(self) -> tuple[CompiledRule, ...]:
        return tuple(rule for rule in self.forbidden if rule.to.reachable is not None)


class _PatternCompiler:
    """Compiles patterns, collecting errors instead of raising on the first."""

    def __init__(self) -> None:
        self.errors: list[str] = []

    def compile(self, pattern: str | None, where: str) -> re.Pattern[str] | None:
        if pattern is None:
            return None
        try:
            return re.compile(pattern)
        except re.error as exc:
            self.errors.append(
                f"{where}: invalid regular expression {pattern!r} ({exc})"
            )
            return None


def _compile_from(
    restriction: Restriction, compiler: _PatternCompiler, where: str
) -> CompiledRestriction:
    return CompiledRestriction(
        path=compiler.compile(restriction.path, f"{where}.from.path"),
        path_not=compiler.compile(restriction.path_not, f"{where}.from.pathNot"),
    )


def _compile_to(
    restriction: ToRestriction, compiler: _PatternCompiler, where: str
) -> CompiledToRestriction:
    return CompiledToRestriction(
        path=compiler.compile(restriction.path, f"{where}.to.path"),
        path_not=compiler.compile(restriction.path_not, f"{where}.to.pathNot"),
        could_not_resolve=restriction.could_not_resolve,
        circular=restriction.circular,
        dependency_types=(
            frozenset(restriction.dependency_types)
            if restriction.dependency_types is not None
            else None
        ),
        more_than_one_dependency_type=restriction.more_than_one_dependency_type,
        license=compiler.compile(restriction.license, f"{where}.to.license"),
        license_not=compiler.compile(restriction.license_not, f"{where}.to.licenseNot"),
        reachable=restriction.reachable,
        orphan=restriction.orphan,
    )


def _compile(
    rule: Rule, kind: RuleKind, compiler: _PatternCompiler, where: str
) -> CompiledRule:
    return CompiledRule(
        kind=kind,
        name=rule.name,
        severity=rule.severity,
        comment=rule.comment,
        from_=_compile_from(rule.from_, compiler, where),
        to=_compile_to(rule.to, compiler, where),
    )


def _raise_if_errors(compiler: _PatternCompiler) -> None:
    if compiler.errors:
        msg = "Invalid rule set:\n  " + "\n  ".join(compiler.errors)
        raise ConfigError(msg)


def compile_rule(rule: Rule, kind: RuleKind = "forbidden") -> CompiledRule:
    """Compile a single rule; raises ConfigError on a bad pattern."""
    compiler = _PatternCompiler()
    compiled = _compile(rule, kind, compiler, rule.name or UNNAMED_RULE)
    _raise_if_errors(compiler)
    return compiled


def compile_rule_set(rule_set: RuleSet) -> CompiledRuleSet:
    """Compile every rule of a rule set, reporting all bad patterns at once."""
    compiler = _PatternCompiler()
    forbidden = tuple(
        _compile(rule, "forbidden", compiler, f"forbidden[{index}]")
        for index, rule in enumerate(rule_set.forbidden)
    )
    allowed = tuple(
        _compile(rule, "allowed", compiler, f"allowed[{index}]")
        for index, rule in enumerate(rule_set.allowed)
    )
    _raise_if_errors(compiler)

    logger.debug(
        "compiled %d forbidden and %d allowed rules", len(forbidden), len(allowed)
    )
    return CompiledRuleSet(
        forbidden=forbidden,
        allowed=allowed,
        allowed_severity=rule_set.allowed_severity,
    )


__all__ = [
    "CompiledRestriction",
    "CompiledRule",
    "CompiledRuleSet",
    "CompiledToRestriction",
    "compile_rule",
    "compile_rule_set",
]
