"""Constraint violation detection against the guests' current ``table_id`` values."""
from __future__ import annotations

from typing import Dict, List, Sequence

from .models import APART_TYPES, TOGETHER_TYPES, Constraint, ConstraintViolation, Guest


def _unique(values) -> List[str]:
    seen: Dict[str, None] = {}
    for v in values:
        seen.setdefault(v, None)
    return list(seen)


def detect_violations(guests: Sequence[Guest], constraints: Sequence[Constraint]) -> List[ConstraintViolation]:
    """Evaluate every constraint from scratch.

    Constraints with fewer than two known guests are skipped. ``near_front``
    and ``accessibility`` need table positions and never produce violations.
    """
    by_id = {g.id: g for g in guests}
    violations: List[ConstraintViolation] = []

    for constraint in constraints:
        members = [by_id[gid] for gid in _unique(constraint.guest_ids) if gid in by_id]
        if len(members) < 2:
            continue
        seated = [m for m in members if m.table_id is not None]
        if len(seated) < 2:
            continue

        if constraint.type in TOGETHER_TYPES:
            table_ids = _unique(m.table_id for m in seated)
            if len(table_ids) > 1:
                violations.append(ConstraintViolation(
                    constraint_id=constraint.id,
                    constraint_type=constraint.type,
                    priority=constraint.priority,
                    description=constraint.description
                    or f"{', '.join(m.name for m in members)} should be seated together",
                    guest_ids=tuple(m.id for m in members),
                    table_ids=tuple(table_ids),
                ))

        elif constraint.type in APART_TYPES:
            by_table: Dict[str, List[Guest]] = {}
            for m in seated:
                by_table.setdefault(m.table_id, []).append(m)
            for table_id, together in by_table.items():
                if len(together) < 2:
                    continue
                violations.append(ConstraintViolation(
                    constraint_id=constraint.id,
                    constraint_type=constraint.type,
                    priority=constraint.priority,
                    description=constraint.description
                    or f"{' and '.join(m.name for m in together)} should not be seated together",
                    guest_ids=tuple(m.id for m in together),
                    table_ids=(table_id,),
                ))

    return violations


def detect_violations_for_table(
    guests: Sequence[Guest], constraints: Sequence[Constraint], table_id: str
) -> List[ConstraintViolation]:
    return [v for v in detect_violations(guests, constraints) if table_id in v.table_ids]
