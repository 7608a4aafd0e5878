"""Optimization passes with one level of undo."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from .grouping import form_units
from .models import Constraint, ConstraintViolation, Guest, OptimizationSnapshot, SnapshotEntry, Table
from .scoring import ScoreBreakdown, calculate_score, score_breakdown
from .solver import TableAssigner
from .violations import detect_violations
from .weights import EngineOptions, OptimizationWeights

logger = logging.getLogger(__name__)

NO_TABLES_AVAILABLE = "No tables available"


class InvalidSnapshotError(ValueError):
    """Raised when a snapshot does not have the expected shape."""


@dataclass
class OptimizationResult:
    before_score: int
    after_score: int
    moved_guest_ids: List[str]
    assignment: Dict[str, List[str]]
    guests: List[Guest]
    unassigned_guest_ids: List[str] = field(default_factory=list)
    breakdown: Optional[ScoreBreakdown] = None
    violations: List[ConstraintViolation] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    no_tables_available: bool = False
    snapshot: Optional[OptimizationSnapshot] = None

    @property
    def score_improvement(self) -> int:
        return self.after_score - self.before_score


@dataclass
class RollbackResult:
    guests: List[Guest]
    moved_guest_ids: List[str]


def _validate_snapshot(snapshot: OptimizationSnapshot) -> None:
    if not isinstance(snapshot, OptimizationSnapshot):
        raise InvalidSnapshotError(f"Expected OptimizationSnapshot, got {type(snapshot).__name__}")
    seen = set()
    for entry in snapshot.entries:
        if not isinstance(entry, SnapshotEntry):
            raise InvalidSnapshotError(f"Snapshot entry has the wrong shape: {entry!r}")
        if not isinstance(entry.guest_id, str):
            raise InvalidSnapshotError(f"Snapshot guest id must be a string: {entry.guest_id!r}")
        if entry.table_id is not None and not isinstance(entry.table_id, str):
            raise InvalidSnapshotError(f"Snapshot table id must be a string or None: {entry.table_id!r}")
        if entry.guest_id in seen:
            raise InvalidSnapshotError(f"Duplicate guest in snapshot: {entry.guest_id}")
        seen.add(entry.guest_id)


def restore_snapshot(guests: Sequence[Guest], snapshot: OptimizationSnapshot) -> List[Guest]:
    """Return copies of ``guests`` with table and seat restored from ``snapshot``.

    Guests missing from the snapshot are returned untouched, and snapshot
    entries for guests that no longer exist are ignored.
    """
    _validate_snapshot(snapshot)
    saved = {e.guest_id: e for e in snapshot.entries}
    restored = []
    for g in guests:
        entry = saved.get(g.id)
        if entry is None:
            restored.append(g)
        else:
            restored.append(replace(g, table_id=entry.table_id, seat_index=entry.seat_index))
    return restored


def _moved(before: Sequence[Guest], after: Sequence[Guest]) -> List[str]:
    old = {g.id: g.table_id for g in before}
    return [g.id for g in after if g.id in old and old[g.id] != g.table_id]


class OptimizationSession:
    """Runs optimization passes and keeps the last pre-run snapshot.

    Each session owns its own snapshot slot, so independent events can use
    independent sessions. A new ``run`` overwrites the held snapshot.
    """

    def __init__(
        self,
        weights: Optional[OptimizationWeights] = None,
        options: Optional[EngineOptions] = None,
    ) -> None:
        self.weights = weights or OptimizationWeights()
        self.options = options or EngineOptions()
        self.snapshot: Optional[OptimizationSnapshot] = None

    def has_snapshot(self) -> bool:
        return self.snapshot is not None

    def run(
        self,
        guests: Sequence[Guest],
        tables: Sequence[Table],
        constraints: Sequence[Constraint] = (),
    ) -> OptimizationResult:
        """Reassign eligible guests and report before and after scores.

        The input guests are not modified; updated copies are returned on
        the result.
        """
        guests = list(guests)
        before_score = calculate_score(guests, self.weights)

        if not tables:
            logger.warning("Optimization skipped: %s", NO_TABLES_AVAILABLE)
            return OptimizationResult(
                before_score=before_score,
                after_score=before_score,
                moved_guest_ids=[],
                assignment={},
                guests=guests,
                unassigned_guest_ids=[g.id for g in guests if g.is_eligible and g.table_id is None],
                breakdown=score_breakdown(guests, tables, constraints, self.weights),
                violations=detect_violations(guests, constraints),
                issues=[NO_TABLES_AVAILABLE],
                no_tables_available=True,
            )

        self.snapshot = OptimizationSnapshot.capture(guests)

        units = form_units(guests, constraints, self.options)
        assigner = TableAssigner(self.weights, self.options, constraints)
        held: Dict[str, int] = {}
        for g in guests:
            if not g.is_eligible and g.table_id is not None:
                held[g.table_id] = held.get(g.table_id, 0) + 1
        assignment = assigner.assign(units, tables, guests, held)

        seat_of: Dict[str, tuple] = {}
        for table_id, seated in assignment.items():
            for idx, gid in enumerate(seated):
                seat_of[gid] = (table_id, idx)

        updated = []
        for g in guests:
            if not g.is_eligible:
                updated.append(g)
                continue
            table_id, seat_index = seat_of.get(g.id, (None, None))
            updated.append(replace(g, table_id=table_id, seat_index=seat_index))

        moved = _moved(guests, updated)
        after_score = calculate_score(updated, self.weights)
        unassigned = [gid for unit in assigner.unassigned_units for gid in unit]

        issues = []
        if unassigned:
            issues.append(f"{len(unassigned)} guest(s) could not be assigned")

        logger.info(
            "Optimized %d guests over %d tables: score %d -> %d, %d moved",
            len(guests), len(tables), before_score, after_score, len(moved),
        )
        return OptimizationResult(
            before_score=before_score,
            after_score=after_score,
            moved_guest_ids=moved,
            assignment=assignment,
            guests=updated,
            unassigned_guest_ids=unassigned,
            breakdown=score_breakdown(updated, tables, constraints, self.weights),
            violations=detect_violations(updated, constraints),
            issues=issues,
            snapshot=self.snapshot,
        )

    def rollback(self, guests: Sequence[Guest]) -> RollbackResult:
        """Restore the snapshot taken by the last ``run`` and discard it.

        Does nothing when no snapshot is held.
        """
        guests = list(guests)
        if self.snapshot is None:
            return RollbackResult(guests=guests, moved_guest_ids=[])
        restored = restore_snapshot(guests, self.snapshot)
        moved = _moved(guests, restored)
        self.snapshot = None
        logger.info("Rolled back optimization: %d guests moved back", len(moved))
        return RollbackResult(guests=restored, moved_guest_ids=moved)


def optimize(
    guests: Sequence[Guest],
    tables: Sequence[Table],
    constraints: Sequence[Constraint] = (),
    weights: Optional[OptimizationWeights] = None,
    options: Optional[EngineOptions] = None,
) -> OptimizationResult:
    """One-off pass; keep ``result.snapshot`` to undo it with :func:`restore_snapshot`."""
    return OptimizationSession(weights, options).run(guests, tables, constraints)
