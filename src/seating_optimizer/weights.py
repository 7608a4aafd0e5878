"""Weight tables and heuristic switches for the optimizer.

Default relationship weights for seating two guests together:
    partner: +10
    family: +5
    friend: +3
    colleague: +1
    avoid: -20
Apart adjustments used by the headline score when both guests are seated
but at different tables:
    partner: -5
    avoid: +5
    everything else: 0
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Tuple

from .models import Priority, RelationshipType


def _default_relationships() -> Dict[RelationshipType, int]:
    return {
        RelationshipType.PARTNER: 10,
        RelationshipType.FAMILY: 5,
        RelationshipType.FRIEND: 3,
        RelationshipType.COLLEAGUE: 1,
        RelationshipType.AVOID: -20,
    }


def _default_apart() -> Dict[RelationshipType, int]:
    return {
        RelationshipType.PARTNER: -5,
        RelationshipType.FAMILY: 0,
        RelationshipType.FRIEND: 0,
        RelationshipType.COLLEAGUE: 0,
        RelationshipType.AVOID: 5,
    }


def _default_constraint_bonus() -> Dict[Priority, int]:
    return {
        Priority.REQUIRED: 50,
        Priority.PREFERRED: 20,
        Priority.OPTIONAL: 5,
    }


def _coerce_table(raw: Mapping[Any, int], enum_cls, label: str) -> Dict[Any, int]:
    table = {}
    for key, value in raw.items():
        try:
            member = enum_cls(key)
        except ValueError:
            raise ValueError(f"Unknown {label} key: {key!r}") from None
        table[member] = int(value)
    return table


@dataclass
class OptimizationWeights:
    """Tunable weights for placement and reporting."""

    relationships: Dict[RelationshipType, int] = field(default_factory=_default_relationships)
    apart: Dict[RelationshipType, int] = field(default_factory=_default_apart)
    group_cohesion: int = 2
    interest_match: int = 2
    industry_match: int = 1
    constraint_bonus: Dict[Priority, int] = field(default_factory=_default_constraint_bonus)
    # breakdown penalties
    violation_penalty: int = 20
    avoid_together_penalty: int = 15
    apart_penalty: int = 5

    def __post_init__(self) -> None:
        self.relationships = _coerce_table(self.relationships, RelationshipType, "relationship")
        self.apart = _coerce_table(self.apart, RelationshipType, "apart")
        self.constraint_bonus = _coerce_table(self.constraint_bonus, Priority, "priority")
        for label, table in (("relationships", self.relationships), ("apart", self.apart)):
            missing = [t.value for t in RelationshipType if t not in table]
            if missing:
                raise ValueError(f"Weight table {label} is missing: {', '.join(missing)}")
        missing = [p.value for p in Priority if p not in self.constraint_bonus]
        if missing:
            raise ValueError(f"Weight table constraint_bonus is missing: {', '.join(missing)}")

    def together(self, relation: object) -> int:
        """Weight for seating together. Types outside the enum weigh zero."""
        return self.relationships.get(relation, 0)

    def apart_adjustment(self, relation: object) -> int:
        return self.apart.get(relation, 0)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OptimizationWeights":
        """Build weights from a plain mapping, overriding the defaults.

        Nested tables (``relationships``, ``apart``, ``constraint_bonus``)
        are merged key by key so a partial override keeps the rest.
        """
        base = cls()
        known = set(base.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown weight settings: {', '.join(sorted(unknown))}")
        updates: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "relationships":
                updates[key] = {**base.relationships, **_coerce_table(value, RelationshipType, "relationship")}
            elif key == "apart":
                updates[key] = {**base.apart, **_coerce_table(value, RelationshipType, "apart")}
            elif key == "constraint_bonus":
                updates[key] = {**base.constraint_bonus, **_coerce_table(value, Priority, "priority")}
            else:
                updates[key] = int(value)
        return replace(base, **updates)


@dataclass
class EngineOptions:
    """Switches for the optional placement heuristics.

    All off reproduces the plain relationship driven greedy pass.
    """

    group_cohesion: bool = False
    interest_match: bool = False
    enforce_constraints: bool = False


PRESETS = ("balanced", "wedding", "corporate")


def preset(name: str) -> Tuple[OptimizationWeights, EngineOptions]:
    """Return the weights and options for a named preset."""
    if name == "balanced":
        return OptimizationWeights(), EngineOptions()
    if name == "wedding":
        return OptimizationWeights(group_cohesion=3), EngineOptions(group_cohesion=True, enforce_constraints=True)
    if name == "corporate":
        weights = OptimizationWeights.from_mapping(
            {"relationships": {"family": 2, "colleague": 2}, "interest_match": 3}
        )
        return weights, EngineOptions(interest_match=True, enforce_constraints=True)
    raise ValueError(f"Unknown preset: {name}")
