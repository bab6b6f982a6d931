"""Violation models.

This module contains the models for rule violations reported in the run
summary.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SeverityType = Literal["error", "warn", "info"]


class ViolatedRule(BaseModel):
    """The rule a violation was raised for."""

    name: str
    severity: SeverityType
    comment: str | None = None


class Violation(BaseModel):
    """A module or dependency that breaks a rule."""

    model_config = ConfigDict(populate_by_name=True)

    rule: ViolatedRule
    from_: str = Field(alias="from")
    to: str
    cycle: list[str] | None = None
    via: list[str] | None = None


__all__ = ["SeverityType", "ViolatedRule", "Violation"]
