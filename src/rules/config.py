from __future__ import annotations

from pathlib import Path
from typing import Any, get_args

import orjson
import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from artifacts.models.graph import DependencyType
from artifacts.models.violations import SeverityType

DEFAULT_RULE_NAME = "not-in-allowed"
UNNAMED_RULE = "unnamed"

VALID_DEPENDENCY_TYPES = frozenset(get_args(DependencyType))

RULE_SET_SUFFIXES = (".json", ".toml")

# Clauses that only make sense on a dependency edge. Module-level rules
# (orphan, reachable) are judged per module and cannot honor them.
DEPENDENCY_ONLY_CLAUSES = (
    "could_not_resolve",
    "circular",
    "dependency_types",
    "more_than_one_dependency_type",
    "license",
    "license_not",
)


class _RuleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class Restriction(_RuleModel):
    """Criteria the 'from' end of a dependency should match."""

    path: str | None = Field(
        default=None,
        description="Regular expression the module source should match",
    )
    path_not: str | None = Field(
        default=None,
        alias="pathNot",
        description="Regular expression the module source should NOT match",
    )


class ToRestriction(Restriction):
    """Criteria the 'to' end of a dependency (or the module itself) should match."""

    could_not_resolve: bool | None = Field(default=None, alias="couldNotResolve")
    circular: bool | None = None
    dependency_types: list[DependencyType] | None = Field(
        default=None,
        alias="dependencyTypes",
        description="Matches when the dependency has any of these types",
    )
    more_than_one_dependency_type: bool | None = Field(
        default=None, alias="moreThanOneDependencyType"
    )
    license: str | None = Field(
        default=None,
        description="Regular expression the dependency license should match",
    )
    license_not: str | None = Field(
        default=None,
        alias="licenseNot",
        description="Regular expression a present license should NOT match",
    )
    reachable: bool | None = Field(
        default=None,
        description="Required reachability outcome; absent = not a reachability rule",
    )
    orphan: bool | None = None

    @field_validator("dependency_types", mode="before")
    @classmethod
    def validate_dependency_types(cls, v: Any) -> Any:
        """Report unknown dependency types with the list of valid ones.

        Note: runs in `mode="before"` so the message quotes the raw value.
        """
        if v is None:
            return None
        if not isinstance(v, list):
            msg = "dependencyTypes must be a list of dependency types"
            raise ValueError(msg)
        for dependency_type in v:
            if dependency_type not in VALID_DEPENDENCY_TYPES:
                msg = (
                    f"Invalid dependency type '{dependency_type}'. "
                    f"Valid types: {', '.join(sorted(VALID_DEPENDENCY_TYPES))}"
                )
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_module_clauses(self) -> ToRestriction:
        """Reject module-level clauses combined with edge-only ones."""
        if self.orphan is not None and self.reachable is not None:
            msg = "'orphan' and 'reachable' cannot be combined in one rule"
            raise ValueError(msg)
        if self.orphan is None and self.reachable is None:
            return self

        module_clause = "orphan" if self.orphan is not None else "reachable"
        fields = type(self).model_fields
        mixed = [
            fields[name].alias or name
            for name in DEPENDENCY_ONLY_CLAUSES
            if getattr(self, name) is not None
        ]
        if mixed:
            msg = (
                f"'{module_clause}' rules are judged per module and only accept "
                f"path/pathNot next to it; remove: {', '.join(mixed)}"
            )
            raise ValueError(msg)
        return self


class Rule(_RuleModel):
    """A forbidden or allowed rule: a pair of restrictions plus metadata."""

    name: str | None = Field(
        default=None,
        description="Short eslint-style name shown in reports",
    )
    severity: SeverityType = Field(default="error")
    comment: str | None = None
    from_: Restriction = Field(default_factory=Restriction, alias="from")
    to: ToRestriction = Field(default_factory=ToRestriction)

    @property
    def bucket(self) -> str:
        """Name under which reachability facts for this rule are recorded."""
        return self.name or DEFAULT_RULE_NAME


class EngineOptions(_RuleModel):
    """Knobs for the validation run itself."""

    workers: int = Field(
        default=1,
        ge=1,
        description="Threads used for the module x rule matching pass",
    )
    orphan_exceptions: list[str] = Field(
        default_factory=list,
        alias="orphanExceptions",
        description="Extra basename regexes exempt from orphan rules",
    )


class RuleSet(_RuleModel):
    """Forbidden and allowed rules plus pass-through options."""

    forbidden: list[Rule] = Field(default_factory=list)
    allowed: list[Rule] = Field(default_factory=list)
    allowed_severity: SeverityType = Field(default="warn", alias="allowedSeverity")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Cruise options consumed upstream; carried, never interpreted",
    )
    engine: EngineOptions = Field(default_factory=EngineOptions)

    @model_validator(mode="after")
    def validate_allowed_rules(self) -> RuleSet:
        # allowed rules are matched against dependency edges only
        for index, rule in enumerate(self.allowed):
            if rule.to.orphan is not None or rule.to.reachable is not None:
                msg = (
                    f"allowed[{index}]: 'orphan' and 'reachable' are only "
                    "supported in forbidden rules"
                )
                raise ValueError(msg)
        return self


class ConfigError(Exception):
    """Raised when a rule set cannot be read, parsed or compiled."""


def _read_rule_set_data(path: Path) -> Any:
    try:
        raw = path.read_bytes()
    except OSError as e:
        msg = f"Cannot read rule set {path}: {e}"
        raise ConfigError(msg) from e

    if path.suffix == ".toml":
        try:
            return tomllib.loads(raw.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            msg = f"Invalid TOML in {path}: {e}"
            raise ConfigError(msg) from e

    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        msg = f"Invalid JSON in {path}: {e}"
        raise ConfigError(msg) from e


def load_rule_set(path: Path) -> RuleSet:
    """Load and validate a rule set from a .json or .toml file."""
    if path.suffix not in RULE_SET_SUFFIXES:
        msg = (
            f"Unsupported rule set format '{path.suffix}' for {path}; "
            f"expected one of {', '.join(RULE_SET_SUFFIXES)}"
        )
        raise ConfigError(msg)

    data = _read_rule_set_data(path)
    if not isinstance(data, dict):
        msg = f"Rule set in {path} must be a mapping"
        raise ConfigError(msg)

    try:
        return RuleSet.model_validate(data)
    except Exception as e:
        msg = f"Invalid rule set in {path}: {e}"
        raise ConfigError(msg) from e


__all__ = [
    "DEFAULT_RULE_NAME",
    "UNNAMED_RULE",
    "ConfigError",
    "EngineOptions",
    "Restriction",
    "Rule",
    "RuleSet",
    "ToRestriction",
    "load_rule_set",
]
