"""Casbin rule records and the filter used to load a subset of them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

POLICY_SEPARATOR = ", "
FIELD_COUNT = 6


@dataclass
class Filter:
    """Filtering rules for loading policies.

    Empty values are ignored; every other value must match (SQL ``LIKE``).
    """

    p: list[str] = field(default_factory=list)
    g: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CasbinRule:
    """One stored policy or grouping rule."""

    ptype: str = ""
    v0: str = ""
    v1: str = ""
    v2: str = ""
    v3: str = ""
    v4: str = ""
    v5: str = ""

    def _values(self) -> tuple[str, ...]:
        return (self.v0, self.v1, self.v2, self.v3, self.v4, self.v5)

    def to_list(self) -> list[str]:
        """Return the policy type followed by the non-empty values."""
        return [self.ptype, *(value for value in self._values() if value)]

    def to_policy_line(self) -> str:
        """Return the rule as a comma separated casbin policy line."""
        return POLICY_SEPARATOR.join(self.to_list())


def rule_from_values(ptype: str, rule: Iterable[str]) -> CasbinRule:
    """Build a rule from a policy type and up to six values; extras are ignored."""
    values = list(rule)[:FIELD_COUNT]
    return CasbinRule(ptype, *values)


def rule_from_filter(ptype: str, field_index: int, *args: str) -> CasbinRule:
    """Build a rule whose values start at ``field_index``; other fields stay empty."""
    end = field_index + len(args)
    values = [
        args[position - field_index] if field_index <= position < end else ""
        for position in range(FIELD_COUNT)
    ]
    return CasbinRule(ptype, *values)