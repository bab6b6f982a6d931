"""Validation helpers for incoming dependency graph documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from artifacts.models.graph import Graph


@dataclass(frozen=True)
class ValidationMessage:
    location: str
    message: str


@dataclass
class ValidationResult:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class GraphContractError(Exception):
    """Raised when a graph document cannot be evaluated."""

    def __init__(self, message: str, result: ValidationResult | None = None) -> None:
        super().__init__(message)
        self.result = result or ValidationResult()


def _validate_module_sources(graph: Graph, result: ValidationResult) -> None:
    seen: set[str] = set()
    for index, module in enumerate(graph.modules):
        if not module.source:
            result.errors.append(
                ValidationMessage(
                    location=f"modules[{index}]",
                    message="Module source must be a non-empty path.",
                )
            )
            continue
        if module.source in seen:
            result.errors.append(
                ValidationMessage(
                    location=f"modules[{index}]",
                    message=f"Duplicate module source: {module.source}.",
                )
            )
        seen.add(module.source)


def _validate_dependencies(graph: Graph, result: ValidationResult) -> None:
    for index, module in enumerate(graph.modules):
        for dep_index, dependency in enumerate(module.dependencies):
            location = f"modules[{index}].dependencies[{dep_index}]"
            if dependency.could_not_resolve and dependency.resolved:
                # Some extractors echo the specifier into 'resolved' for
                # unresolvable modules; matching falls back to it anyway.
                result.warnings.append(
                    ValidationMessage(
                        location=location,
                        message="Unresolvable dependency carries a resolved path.",
                    )
                )
            elif not dependency.could_not_resolve and not dependency.resolved:
                result.warnings.append(
                    ValidationMessage(
                        location=location,
                        message=(
                            "Dependency has no resolved path but is not marked "
                            "couldNotResolve."
                        ),
                    )
                )
            if dependency.circular != bool(dependency.cycle):
                result.warnings.append(
                    ValidationMessage(
                        location=location,
                        message="Stale circular/cycle annotation will be recomputed.",
                    )
                )


def validate_graph(graph: Graph) -> ValidationResult:
    """Check a graph document against the invariants the engine relies on.

    Duplicate or empty module sources are errors: they make modules
    indistinguishable. Everything else is reported as a warning because the
    engine recomputes or tolerates it.
    """
    result = ValidationResult()
    _validate_module_sources(graph, result)
    _validate_dependencies(graph, result)
    return result


def ensure_valid_graph(graph: Graph) -> ValidationResult:
    """Validate a graph and raise GraphContractError when it has errors."""
    result = validate_graph(graph)
    if not result.ok:
        details = "; ".join(f"{e.location}: {e.message}" for e in result.errors)
        msg = f"Invalid dependency graph: {details}"
        raise GraphContractError(msg, result)
    return result


__all__ = [
    "GraphContractError",
    "ValidationMessage",
    "ValidationResult",
    "ensure_valid_graph",
    "validate_graph",
]
