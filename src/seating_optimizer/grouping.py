"""Placement units: guests that must be seated at the same table."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .models import TOGETHER_TYPES, Constraint, Guest, Priority, RelationshipType
from .weights import EngineOptions

logger = logging.getLogger(__name__)


def _pair_partners(eligible: Sequence[Guest]) -> List[List[str]]:
    by_id = {g.id: g for g in eligible}
    partners_of: Dict[str, List[str]] = {
        g.id: [
            e.target_id for e in g.relationships
            if e.type == RelationshipType.PARTNER and e.target_id != g.id and e.target_id in by_id
        ]
        for g in eligible
    }
    pair_of: Dict[str, List[str]] = {}

    # mutual pairs first, so a one-way edge cannot split them
    for mutual_only in (True, False):
        for guest in eligible:
            if guest.id in pair_of:
                continue
            for target in partners_of[guest.id]:
                if target in pair_of:
                    continue
                if mutual_only and guest.id not in partners_of[target]:
                    continue
                pair = [guest.id, target]
                pair_of[guest.id] = pair_of[target] = pair
                break

    emitted = set()
    units: List[List[str]] = []
    for guest in eligible:
        if guest.id in emitted:
            continue
        unit = pair_of.get(guest.id, [guest.id])
        emitted.update(unit)
        units.append(list(unit))
    return units


def _merge_required(units: List[List[str]], constraints: Sequence[Constraint]) -> List[List[str]]:
    """Union units chained by required together constraints."""
    unit_of: Dict[str, int] = {}
    for idx, unit in enumerate(units):
        for gid in unit:
            unit_of[gid] = idx
    parent = list(range(len(units)))

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(a: int, b: int) -> None:
        pa, pb = find(a), find(b)
        if pa != pb:
            # keep the earliest unit as root so output order is stable
            if pa < pb:
                parent[pb] = pa
            else:
                parent[pa] = pb

    for c in constraints:
        if c.priority is not Priority.REQUIRED or c.type not in TOGETHER_TYPES:
            continue
        idxs = [unit_of[gid] for gid in c.guest_ids if gid in unit_of]
        for other in idxs[1:]:
            union(idxs[0], other)

    merged: Dict[int, List[str]] = {}
    for idx, unit in enumerate(units):
        merged.setdefault(find(idx), []).extend(unit)
    return [merged[root] for root in sorted(merged)]


def form_units(
    guests: Sequence[Guest],
    constraints: Sequence[Constraint] = (),
    options: Optional[EngineOptions] = None,
) -> List[List[str]]:
    """Partition eligible guests into placement units.

    Declined guests are left out. A partner edge pairs two guests only when
    both are eligible, and each guest joins at most one pair. Mutual partners
    are paired before one-way edges. Everyone else becomes a singleton.
    Units come out in first encounter order.
    """
    options = options or EngineOptions()
    eligible = [g for g in guests if g.is_eligible]
    units = _pair_partners(eligible)
    if options.enforce_constraints and constraints:
        units = _merge_required(units, constraints)
    logger.debug(
        "Formed %d units from %d eligible guests (%d declined)",
        len(units), len(eligible), len(guests) - len(eligible),
    )
    return units
