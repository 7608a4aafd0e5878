"""Seating optimizer package."""
import logging

from .models import (
    Constraint,
    ConstraintType,
    ConstraintViolation,
    Guest,
    OptimizationSnapshot,
    Priority,
    RelationshipEdge,
    RelationshipType,
    RsvpStatus,
    SnapshotEntry,
    Table,
)
from .weights import EngineOptions, OptimizationWeights, preset
from .scoring import calculate_score, compatibility, placement_score, score_breakdown, ScoreBreakdown
from .grouping import form_units
from .solver import TableAssigner
from .violations import detect_violations, detect_violations_for_table
from .session import (
    InvalidSnapshotError,
    OptimizationResult,
    OptimizationSession,
    RollbackResult,
    optimize,
    restore_snapshot,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Constraint",
    "ConstraintType",
    "ConstraintViolation",
    "Guest",
    "OptimizationSnapshot",
    "Priority",
    "RelationshipEdge",
    "RelationshipType",
    "RsvpStatus",
    "SnapshotEntry",
    "Table",
    "EngineOptions",
    "OptimizationWeights",
    "preset",
    "calculate_score",
    "compatibility",
    "placement_score",
    "score_breakdown",
    "ScoreBreakdown",
    "form_units",
    "TableAssigner",
    "detect_violations",
    "detect_violations_for_table",
    "InvalidSnapshotError",
    "OptimizationResult",
    "OptimizationSession",
    "RollbackResult",
    "optimize",
    "restore_snapshot",
]
