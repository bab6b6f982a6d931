"""Rule definitions, compilation and matching for depwarden."""

from rules.compiled import CompiledRule, CompiledRuleSet, compile_rule, compile_rule_set
from rules.config import (
    ConfigError,
    Restriction,
    Rule,
    RuleSet,
    ToRestriction,
    load_rule_set,
)
from rules.matching import matches_from, matches_module_to, matches_to
from rules.orphans import OrphanPolicy, is_orphan_violation

__all__ = [
    "CompiledRule",
    "CompiledRuleSet",
    "ConfigError",
    "OrphanPolicy",
    "Restriction",
    "Rule",
    "RuleSet",
    "ToRestriction",
    "compile_rule",
    "compile_rule_set",
    "is_orphan_violation",
    "load_rule_set",
    "matches_from",
    "matches_module_to",
    "matches_to",
]
