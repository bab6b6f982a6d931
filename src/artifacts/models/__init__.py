"""Model namespace for depwarden graph and violation schemas."""

from artifacts.models.graph import (
    Dependency,
    DependencyType,
    Graph,
    Module,
    ReachableEntry,
    ReachedModule,
    ReachesEntry,
    RuleSummary,
    Summary,
)
from artifacts.models.violations import SeverityType, ViolatedRule, Violation

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
    "ViolatedRule",
    "Violation",
]
