"""
Relationship aware scoring.

Pair compatibility reads only the first guest's own edge list, so it is
directional. The headline score walks every edge of every seated guest and
halves the sum because mutual edges are seen from both ends.

Tables are graded from a 0 to 100 compatibility score:
    Excellent: 90 and above
    Good: 70 and above
    Fair: 50 and above
    Needs Work: below 50
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from .models import (
    APART_TYPES,
    TOGETHER_TYPES,
    Constraint,
    Guest,
    Priority,
    RelationshipType,
    Table,
)
from .violations import detect_violations
from .weights import EngineOptions, OptimizationWeights

DEFAULT_WEIGHTS = OptimizationWeights()


# ----------------------------- pair scoring -----------------------------
def compatibility(guest_a: Guest, guest_b: Guest, weights: OptimizationWeights = DEFAULT_WEIGHTS) -> int:
    """Signed score for seating ``guest_b`` next to ``guest_a``, seen from ``guest_a``."""
    edge = guest_a.edge_to(guest_b.id)
    if edge is None:
        return 0
    return weights.together(edge.type)


def _shared_interests(a: Guest, b: Guest) -> int:
    mine = {i.strip().lower() for i in a.interests if i.strip()}
    theirs = {i.strip().lower() for i in b.interests if i.strip()}
    return len(mine & theirs)


def _industry_mix(member: Guest, occupants: Sequence[Guest]) -> int:
    """1 when some, but under half, of the tablemates share the member's industry."""
    if not member.industry:
        return 0
    same = sum(1 for o in occupants if o.industry == member.industry)
    return 1 if 0 < same < len(occupants) / 2 else 0


def _constraint_adjustment(
    member: Guest,
    occupants: Sequence[Guest],
    constraints: Iterable[Constraint],
    weights: OptimizationWeights,
) -> int:
    """Soft bonus or penalty for non required constraints touching ``member``."""
    occupant_ids = {o.id for o in occupants}
    total = 0
    for c in constraints:
        if c.priority is Priority.REQUIRED or member.id not in c.guest_ids:
            continue
        co_members = sum(1 for gid in set(c.guest_ids) if gid != member.id and gid in occupant_ids)
        if not co_members:
            continue
        if c.type in TOGETHER_TYPES:
            total += weights.constraint_bonus[c.priority] * co_members
        elif c.type in APART_TYPES:
            total -= weights.constraint_bonus[c.priority] * co_members
    return total


def placement_score(
    unit: Sequence[Guest],
    occupants: Sequence[Guest],
    weights: OptimizationWeights = DEFAULT_WEIGHTS,
    options: Optional[EngineOptions] = None,
    constraints: Sequence[Constraint] = (),
) -> int:
    """Score of seating a whole placement unit with a table's current occupants."""
    options = options or EngineOptions()
    total = 0
    for member in unit:
        for occupant in occupants:
            total += compatibility(member, occupant, weights)
            if options.group_cohesion and member.group and member.group == occupant.group:
                total += weights.group_cohesion
            if options.interest_match:
                total += _shared_interests(member, occupant) * weights.interest_match
        if options.interest_match:
            total += _industry_mix(member, occupants) * weights.industry_match
        if options.enforce_constraints and constraints:
            total += _constraint_adjustment(member, occupants, constraints, weights)
    return total


# ----------------------------- headline score -----------------------------
def calculate_score(guests: Sequence[Guest], weights: OptimizationWeights = DEFAULT_WEIGHTS) -> int:
    """Overall seating score for the current ``table_id`` values.

    Edges whose target is unknown or unseated are ignored. The sum is halved
    and truncated toward zero, so the result does not depend on guest order.
    """
    by_id = {g.id: g for g in guests}
    total = 0
    for guest in guests:
        if guest.table_id is None:
            continue
        for edge in guest.relationships:
            other = by_id.get(edge.target_id)
            if other is None or other.table_id is None:
                continue
            if other.table_id == guest.table_id:
                total += weights.together(edge.type)
            else:
                total += weights.apart_adjustment(edge.type)
    return int(total / 2)


# ----------------------------- breakdown -----------------------------
@dataclass(frozen=True)
class ScoreBreakdown:
    """Four independent percentages for user facing reporting."""

    constraints: int
    relationships: int
    groups: int
    capacity: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "constraints": self.constraints,
            "relationships": self.relationships,
            "groups": self.groups,
            "capacity": self.capacity,
        }


def _clamp(value: float) -> int:
    return int(max(0, min(100, round(value))))


def score_breakdown(
    guests: Sequence[Guest],
    tables: Sequence[Table],
    constraints: Sequence[Constraint] = (),
    weights: OptimizationWeights = DEFAULT_WEIGHTS,
) -> ScoreBreakdown:
    eligible = [g for g in guests if g.is_eligible]
    by_id = {g.id: g for g in eligible}

    total_capacity = sum(max(0, t.capacity) for t in tables)
    if not eligible:
        capacity = 100
    else:
        capacity = _clamp(total_capacity / len(eligible) * 100)

    clusters: Dict[str, List[Guest]] = {}
    for g in eligible:
        if g.group:
            clusters.setdefault(g.group, []).append(g)
    if clusters:
        together = 0
        for members in clusters.values():
            seats = {m.table_id for m in members}
            if len(seats) == 1 and None not in seats:
                together += 1
        groups = _clamp(together / len(clusters) * 100)
    else:
        groups = 100

    if constraints:
        required = [v for v in detect_violations(guests, constraints) if v.priority is Priority.REQUIRED]
        constraint_pct = _clamp(100 - weights.violation_penalty * len(required))
    else:
        constraint_pct = 100

    relationships = 100
    for g in eligible:
        for edge in g.relationships:
            other = by_id.get(edge.target_id)
            if other is None:
                continue
            same = g.table_id is not None and g.table_id == other.table_id
            if edge.type == RelationshipType.AVOID:
                if same:
                    relationships -= weights.avoid_together_penalty
            elif not same:
                relationships -= weights.apart_penalty

    return ScoreBreakdown(
        constraints=constraint_pct,
        relationships=_clamp(relationships),
        groups=groups,
        capacity=capacity,
    )


# ----------------------------- per table report -----------------------------
def compute_table_stats(
    guests: Sequence[Guest],
    tables: Sequence[Table],
    weights: OptimizationWeights = DEFAULT_WEIGHTS,
) -> List[Dict[str, object]]:
    """Per table totals, a 0 to 100 compatibility score and issues."""
    stats = []
    for table in tables:
        members = [g for g in guests if g.table_id == table.id]
        member_ids = {m.id for m in members}
        total = 0
        issues: List[str] = []
        compat = 100
        for m in members:
            for edge in m.relationships:
                if edge.target_id not in member_ids or edge.target_id == m.id:
                    continue
                total += weights.together(edge.type)
                if edge.type == RelationshipType.AVOID:
                    compat -= 20
                    other = next(o for o in members if o.id == edge.target_id)
                    issues.append(f"{m.name} avoids {other.name}")
        labels = {m.group for m in members if m.group}
        if len(labels) > 2:
            compat -= 5
        if len(members) > table.capacity:
            issues.insert(0, "Over capacity")
        stats.append({
            "table": table.id,
            "name": table.name or table.id,
            "guest_count": len(members),
            "capacity": table.capacity,
            "total_score": total,
            "compatibility": max(0, compat),
            "issues": issues,
            "members": [m.id for m in members],
        })
    return stats


def grade_tables(stats: List[Dict[str, object]]) -> List[Dict[str, object]]:
    """Label each table record from its compatibility score."""
    graded = []
    for s in stats:
        c = s["compatibility"]
        if c >= 90:
            g = "Excellent"
        elif c >= 70:
            g = "Good"
        elif c >= 50:
            g = "Fair"
        else:
            g = "Needs Work"
        out = dict(s)
        out["grade"] = g
        graded.append(out)
    return graded
