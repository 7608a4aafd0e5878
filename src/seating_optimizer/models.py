"""Data models for the seating optimizer."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import math


def parse_pipe_list(value: object) -> List[str]:
    """Split a pipe separated string into a list.

    Empty values such as ``""`` or ``None`` return an empty list.
    ``pandas`` often provides ``float('nan')`` for missing values which is
    also treated as empty.
    """
    if value is None:
        return []
    if isinstance(value, float) and math.isnan(value):
        return []
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return []
    return [part.strip() for part in text.split("|") if part.strip()]


def parse_optional(value: object) -> Optional[str]:
    """Return a stripped string or ``None`` for blank and NaN cells."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    if not text or text.lower() == "nan":
        return None
    return text


class RelationshipType(str, Enum):
    PARTNER = "partner"
    FAMILY = "family"
    FRIEND = "friend"
    COLLEAGUE = "colleague"
    AVOID = "avoid"


class RsvpStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class ConstraintType(str, Enum):
    SAME_TABLE = "same_table"
    DIFFERENT_TABLE = "different_table"
    MUST_SIT_TOGETHER = "must_sit_together"
    MUST_NOT_SIT_TOGETHER = "must_not_sit_together"
    NEAR_FRONT = "near_front"
    ACCESSIBILITY = "accessibility"


class Priority(str, Enum):
    REQUIRED = "required"
    PREFERRED = "preferred"
    OPTIONAL = "optional"


TOGETHER_TYPES = frozenset({ConstraintType.SAME_TABLE, ConstraintType.MUST_SIT_TOGETHER})
APART_TYPES = frozenset({ConstraintType.DIFFERENT_TABLE, ConstraintType.MUST_NOT_SIT_TOGETHER})


@dataclass
class RelationshipEdge:
    """Directed relationship from the owning guest to ``target_id``.

    Known type strings are coerced to :class:`RelationshipType`. Anything
    else is kept as given and scores zero.
    """

    target_id: str
    type: RelationshipType
    strength: int = 3

    def __post_init__(self) -> None:
        if not isinstance(self.type, RelationshipType):
            try:
                self.type = RelationshipType(self.type)
            except ValueError:
                pass


@dataclass
class Guest:
    """A person to be seated."""

    id: str
    name: str
    relationships: List[RelationshipEdge] = field(default_factory=list)
    group: Optional[str] = None
    rsvp: RsvpStatus = RsvpStatus.PENDING
    table_id: Optional[str] = None
    seat_index: Optional[int] = None
    interests: List[str] = field(default_factory=list)
    industry: Optional[str] = None
    email: Optional[str] = None
    notes: str = ""

    def __post_init__(self) -> None:
        self.rsvp = RsvpStatus(self.rsvp)

    @property
    def is_eligible(self) -> bool:
        """Declined guests are never moved by the optimizer."""
        return self.rsvp is not RsvpStatus.DECLINED

    def edge_to(self, other_id: str) -> Optional[RelationshipEdge]:
        for edge in self.relationships:
            if edge.target_id == other_id:
                return edge
        return None


@dataclass
class Table:
    """Capacity limited seating group. Zero capacity seats nobody."""

    id: str
    capacity: int
    name: str = ""


@dataclass
class Constraint:
    """User declared placement rule over two or more guests."""

    id: str
    type: ConstraintType
    guest_ids: List[str]
    priority: Priority = Priority.REQUIRED
    description: Optional[str] = None

    def __post_init__(self) -> None:
        self.type = ConstraintType(self.type)
        self.priority = Priority(self.priority)


@dataclass(frozen=True)
class ConstraintViolation:
    """A detected breach of a constraint under the current assignment."""

    constraint_id: str
    constraint_type: ConstraintType
    priority: Priority
    description: str
    guest_ids: Tuple[str, ...]
    table_ids: Tuple[str, ...]


@dataclass(frozen=True)
class SnapshotEntry:
    guest_id: str
    table_id: Optional[str]
    seat_index: Optional[int] = None


@dataclass(frozen=True)
class OptimizationSnapshot:
    """Assignment state captured right before an optimization pass."""

    entries: Tuple[SnapshotEntry, ...]

    @classmethod
    def capture(cls, guests: List[Guest]) -> "OptimizationSnapshot":
        return cls(tuple(SnapshotEntry(g.id, g.table_id, g.seat_index) for g in guests))

    def table_for(self, guest_id: str) -> Optional[str]:
        for entry in self.entries:
            if entry.guest_id == guest_id:
                return entry.table_id
        return None

    def __len__(self) -> int:
        return len(self.entries)
