"""Shared utilities for depwarden."""

from __future__ import annotations


def basename(path: str) -> str:
    """Return the final segment of a module path.

    Both separators are accepted so Windows-style sources produced upstream
    are treated the same as POSIX ones.

    Examples:
        >>> basename("packages/thing/babel.config.mjs")
        'babel.config.mjs'
        >>> basename(".eslintrc.json")
        '.eslintrc.json'
        >>> basename("src\\\\lib\\\\index.ts")
        'index.ts'
    """
    normalized = path.replace("\\", "/").rstrip("/")
    return normalized.rsplit("/", 1)[-1]
