"""Dependency graph models.

This module contains the models for the graph document handed over by the
extraction and resolution steps, plus the annotations the engine adds to it
(cycles, reachability, validity).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from artifacts.models.violations import SeverityType, Violation

DependencyType = Literal[
    "local",
    "npm",
    "npm-dev",
    "npm-optional",
    "npm-peer",
    "npm-bundled",
    "npm-no-pkg",
    "npm-unknown",
    "core",
    "unknown",
    "undetermined",
    "deprecated",
]


class _GraphModel(BaseModel):
    # Upstream collaborators attach keys the engine does not interpret
    # (e.g. dependency-level "matchesDoNotFollow"); they round-trip untouched.
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class RuleSummary(_GraphModel):
    """Name and severity of a rule an edge or module violated."""

    name: str
    severity: SeverityType


class Dependency(_GraphModel):
    """A resolved (or unresolvable) dependency of a module."""

    module: str
    resolved: str = ""
    dependency_types: list[DependencyType] = Field(
        default_factory=lambda: ["undetermined"],
        alias="dependencyTypes",
        min_length=1,
    )
    dynamic: bool = False
    circular: bool = False
    cycle: list[str] = Field(default_factory=list)
    could_not_resolve: bool = Field(default=False, alias="couldNotResolve")
    license: str | None = None
    exotically_required: bool = Field(default=False, alias="exoticallyRequired")
    exotic_require: str | None = Field(default=None, alias="exoticRequire")
    followable: bool = True
    valid: bool | None = None
    rules: list[RuleSummary] | None = None

    @property
    def target(self) -> str:
        """Path used for matching and reporting: resolved, else the raw specifier."""
        return self.resolved or self.module


class ReachedModule(_GraphModel):
    source: str
    via: list[str] = Field(default_factory=list)


class ReachesEntry(_GraphModel):
    """Modules reachable from a module, as demanded by one named rule."""

    modules: list[ReachedModule]
    as_defined_in_rule: str = Field(alias="asDefinedInRule")


class ReachableEntry(_GraphModel):
    """Whether a module is reachable from the start set of one rule."""

    value: bool
    as_defined_in_rule: str = Field(alias="asDefinedInRule")
    matched_from: str | None = Field(default=None, alias="matchedFrom")


class Module(_GraphModel):
    """A module (file) in the dependency graph."""

    source: str
    orphan: bool = False
    dependencies: list[Dependency] = Field(default_factory=list)
    dependents: list[str] | None = None
    reaches: list[ReachesEntry] | None = None
    reachable: list[ReachableEntry] | None = None
    valid: bool | None = None
    rules: list[RuleSummary] | None = None


class Summary(_GraphModel):
    """Run summary; the engine owns the violation list and counters."""

    violations: list[Violation] = Field(default_factory=list)
    error: int = 0
    warn: int = 0
    info: int = 0
    total_cruised: int = Field(default=0, alias="totalCruised")
    total_dependencies_cruised: int = Field(
        default=0, alias="totalDependenciesCruised"
    )

    @field_validator("violations", mode="before")
    @classmethod
    def _coerce_violations(cls, v: Any) -> Any:
        if v is None:
            return []
        return v


class Graph(_GraphModel):
    """The full graph document: modules, optional folder rollups, summary."""

    modules: list[Module] = Field(default_factory=list)
    folders: list[dict[str, Any]] | None = None
    summary: Summary = Field(default_factory=Summary)


__all__ = [
    "Dependency",
    "DependencyType",
    "Graph",
    "Module",
    "ReachableEntry",
    "ReachedModule",
    "ReachesEntry",
    "RuleSummary",
    "SeverityType",
    "Summary",
]
