"""Graph and violation models exposed at the engine boundary."""

from artifacts.models.graph import Dependency, Graph, Module, ReachesEntry, Summary
from artifacts.models.violations import Violation

__all__ = ["Dependency", "Graph", "Module", "ReachesEntry", "Summary", "Violation"]
