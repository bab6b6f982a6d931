"""Restriction matching for modules and dependencies.

All predicates here are pure and total: a clause that refers to a field the
candidate does not carry (e.g. ``license`` on an unlicensed dependency)
simply does not match.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import re

    from artifacts.models.graph import Dependency, Module
    from rules.compiled import CompiledRestriction, CompiledToRestriction


def matches_path(restriction: CompiledRestriction, path: str) -> bool:
    """Check the path/pathNot clauses of a restriction against a path."""
    if restriction.path is not None and not restriction.path.search(path):
        return False
    return not (restriction.path_not is not None and restriction.path_not.search(path))


def _matches_license(
    pattern: re.Pattern[str] | None, license_: str | None, *, negate: bool
) -> bool:
    if pattern is None:
        return True
    if not license_:
        return False
    found = pattern.search(license_) is not None
    return not found if negate else found


def matches_from(restriction: CompiledRestriction, module: Module) -> bool:
    """Check a 'from' restriction against a module's source."""
    return matches_path(restriction, module.source)


def matches_module_to(restriction: CompiledToRestriction, module: Module) -> bool:
    """Check the path clauses of a module-level rule's 'to' against a module."""
    return matches_path(restriction, module.source)


def matches_to(restriction: CompiledToRestriction, dependency: Dependency) -> bool:
    """Check a 'to' restriction against a dependency edge.

    Every clause present in the restriction must hold; absent clauses are
    vacuously true, so an empty restriction matches every dependency.
    """
    if not matches_path(restriction, dependency.target):
        return False

    if (
        restriction.could_not_resolve is not None
        and dependency.could_not_resolve != restriction.could_not_resolve
    ):
        return False

    if restriction.circular is not None and dependency.circular != restriction.circular:
        return False

    wanted_types = restriction.dependency_types
    if wanted_types is not None and wanted_types.isdisjoint(
        dependency.dependency_types
    ):
        return False

    if restriction.more_than_one_dependency_type is not None and (
        len(dependency.dependency_types) > 1
    ) != restriction.more_than_one_dependency_type:
        return False

    if not _matches_license(restriction.license, dependency.license, negate=False):
        return False

    return _matches_license(restriction.license_not, dependency.license, negate=True)


__all__ = ["matches_from", "matches_module_to", "matches_path", "matches_to"]
