"""
Greedy table assignment.

Tables are visited largest first. Each placement unit goes to the table with
the highest placement score among those with enough free seats; the first
table seen wins ties. There is no backtracking, so the running time stays at
units x tables and the result can be a local optimum.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from .models import APART_TYPES, Constraint, Guest, Priority, Table
from .scoring import placement_score
from .weights import EngineOptions, OptimizationWeights

logger = logging.getLogger(__name__)


class TableAssigner:
    """Single pass greedy bin packer for placement units."""

    def __init__(
        self,
        weights: Optional[OptimizationWeights] = None,
        options: Optional[EngineOptions] = None,
        constraints: Sequence[Constraint] = (),
    ) -> None:
        self.weights = weights or OptimizationWeights()
        self.options = options or EngineOptions()
        self.constraints = list(constraints)
        # Units that fit nowhere during the last assign call
        self.unassigned_units: List[List[str]] = []

    # ----------------------------- internals -----------------------------
    def _separated(self) -> List[set]:
        if not self.options.enforce_constraints:
            return []
        return [
            set(c.guest_ids) for c in self.constraints
            if c.priority is Priority.REQUIRED and c.type in APART_TYPES
        ]

    @staticmethod
    def _blocked(unit: Sequence[str], occupants: Sequence[str], separated: List[set]) -> bool:
        """True when a required apart constraint links a unit member to an occupant."""
        for members in separated:
            if any(g in members for g in unit) and any(o in members for o in occupants):
                return True
        return False

    # ----------------------------- main assign -----------------------------
    def assign(
        self,
        units: Sequence[Sequence[str]],
        tables: Sequence[Table],
        guests: Sequence[Guest],
        held: Optional[Mapping[str, int]] = None,
    ) -> Dict[str, List[str]]:
        """Return table id -> ordered guest ids for the given units.

        ``held`` counts seats per table already taken by guests this pass
        does not move. They reduce free capacity but are not listed.
        """
        held = held or {}
        by_id = {g.id: g for g in guests}
        ordered = sorted(tables, key=lambda t: -t.capacity)
        seating: Dict[str, List[str]] = {t.id: [] for t in ordered}
        separated = self._separated()
        self.unassigned_units = []

        for unit in units:
            members = [by_id[gid] for gid in unit if gid in by_id]
            best_table: Optional[str] = None
            best_score: Optional[int] = None
            for table in ordered:
                occupants = seating[table.id]
                if table.capacity - held.get(table.id, 0) - len(occupants) < len(unit):
                    continue
                if separated and self._blocked(unit, occupants, separated):
                    continue
                score = placement_score(
                    members,
                    [by_id[o] for o in occupants],
                    self.weights,
                    self.options,
                    self.constraints,
                )
                if best_score is None or score > best_score:
                    best_score = score
                    best_table = table.id

            if best_table is None:
                logger.warning("No table can seat unit %s", ", ".join(unit))
                self.unassigned_units.append(list(unit))
                continue
            seating[best_table].extend(unit)
            logger.debug("Placed %s at %s (score %d)", ", ".join(unit), best_table, best_score)

        return seating
