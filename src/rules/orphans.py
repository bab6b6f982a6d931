"""Orphan rule exceptions.

Some files legitimately have no dependencies and no dependents: dotfiles,
TypeScript declaration files and build/tool configuration files. The
exceptions are matched on the basename only, so directory depth never
matters.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from utils import basename

if TYPE_CHECKING:
    from collections.abc import Iterable

    from artifacts.models.graph import Module
    from rules.compiled import CompiledRule

DOTFILE_PATTERN = r"^\."

DECLARATION_FILE_PATTERN = r"\.d\.ts$"

# Basename stems of well-known build and tool configuration files; each one
# matches "<stem>.<any extension>", e.g. babel.config.mjs or jest.config.ts.
CONFIG_FILE_STEMS: tuple[str, ...] = (
    "babel.config",
    "jest.config",
    "webpack.config",
    "rollup.config",
    "vite.config",
    "vitest.config",
    "eslint.config",
    "prettier.config",
    "postcss.config",
    "tailwind.config",
    "svelte.config",
    "next.config",
    "nuxt.config",
    "karma.conf",
    "gulpfile",
    "Gruntfile",
    "commitlint.config",
    "lint-staged.config",
    "stylelint.config",
    "playwright.config",
    "cypress.config",
    "astro.config",
    "tsup.config",
    "tsconfig",
    "jsconfig",
)


def _config_file_pattern(stem: str) -> str:
    return rf"^{re.escape(stem)}\.[^.]+$"


DEFAULT_EXCEPTION_PATTERNS: tuple[str, ...] = (
    DOTFILE_PATTERN,
    DECLARATION_FILE_PATTERN,
    *(_config_file_pattern(stem) for stem in CONFIG_FILE_STEMS),
)


@dataclass(frozen=True)
class OrphanPolicy:
    """Basename patterns of modules exempt from orphan rules."""

    patterns: tuple[re.Pattern[str], ...] = field(
        default_factory=lambda: tuple(re.compile(p) for p in DEFAULT_EXCEPTION_PATTERNS)
    )

    def extended(self, extra_patterns: Iterable[str]) -> OrphanPolicy:
        """Return a policy with additional basename regexes appended."""
        return OrphanPolicy(
            patterns=(*self.patterns, *(re.compile(p) for p in extra_patterns))
        )

    def is_excepted(self, path: str) -> bool:
        name = basename(path)
        return any(pattern.search(name) for pattern in self.patterns)


DEFAULT_ORPHAN_POLICY = OrphanPolicy()


def is_orphan_violation(
    rule: CompiledRule,
    module: Module,
    policy: OrphanPolicy = DEFAULT_ORPHAN_POLICY,
) -> bool:
    """Check whether an orphan module breaks an orphan rule.

    Only rules with ``to.orphan`` set to true govern orphans, and only
    modules flagged as orphans can break them. Excepted basenames never do.
    """
    if not rule.to.orphan or not module.orphan:
        return False
    return not policy.is_excepted(module.source)


__all__ = [
    "CONFIG_FILE_STEMS",
    "DEFAULT_EXCEPTION_PATTERNS",
    "DEFAULT_ORPHAN_POLICY",
    "OrphanPolicy",
    "is_orphan_violation",
]
