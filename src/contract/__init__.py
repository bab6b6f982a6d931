"""Stable surface of the depwarden graph contract.

Upstream extraction steps and downstream reporters depend on these names
only. Treat the exports as the authoritative boundary of the engine.
"""


def __getattr__(name: str) -> object:
    if name in {
        "Dependency",
        "Graph",
        "Module",
        "ReachesEntry",
        "Summary",
        "Violation",
    }:
        from contract.models import (
            Dependency,
            Graph,
            Module,
            ReachesEntry,
            Summary,
            Violation,
        )

        return {
            "Dependency": Dependency,
            "Graph": Graph,
            "Module": Module,
            "ReachesEntry": ReachesEntry,
            "Summary": Summary,
            "Violation": Violation,
        }[name]

    if name in {
        "GraphContractError",
        "ValidationMessage",
        "ValidationResult",
        "validate_graph",
    }:
        from contract.validation import (
            GraphContractError,
            ValidationMessage,
            ValidationResult,
            validate_graph,
        )

        return {
            "GraphContractError": GraphContractError,
            "ValidationMessage": ValidationMessage,
            "ValidationResult": ValidationResult,
            "validate_graph": validate_graph,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "Dependency",
    "Graph",
    "GraphContractError",
    "Module",
    "ReachesEntry",
    "Summary",
    "ValidationMessage",
    "ValidationResult",
    "Violation",
    "validate_graph",
]
