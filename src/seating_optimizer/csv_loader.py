"""CSV loading and writing utilities."""
from __future__ import annotations

from pathlib import Path
from typing import IO, Any, Iterable, List, Sequence, Tuple

import pandas as pd

from .models import (
    Constraint,
    ConstraintType,
    Guest,
    Priority,
    RelationshipEdge,
    RelationshipType,
    RsvpStatus,
    Table,
    parse_optional,
    parse_pipe_list,
)

Source = Path | str | IO[Any]


def _read(path: Source, required: Iterable[str], label: str) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.columns = [c.strip() for c in df.columns]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{label}: missing columns: {', '.join(missing)}")
    return df


def _enum(enum_cls, value: str, label: str):
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(f"Unknown {label} {value!r}; expected one of: {allowed}") from None


def load_guests(path: Source) -> List[Guest]:
    """Load guests from ``guests.csv``.

    Only ``id`` and ``name`` are required. Guest ids must be unique.
    """
    df = _read(path, ["id", "name"], "guests.csv")
    guests: List[Guest] = []
    for _, row in df.iterrows():
        rsvp = parse_optional(row.get("rsvp", ""))
        seat = parse_optional(row.get("seat_index", ""))
        guests.append(
            Guest(
                id=str(row["id"]).strip(),
                name=str(row["name"]).strip(),
                group=parse_optional(row.get("group", "")),
                rsvp=_enum(RsvpStatus, rsvp, "rsvp status") if rsvp else RsvpStatus.PENDING,
                table_id=parse_optional(row.get("table_id", "")),
                seat_index=int(seat) if seat is not None else None,
                interests=parse_pipe_list(row.get("interests", "")),
                industry=parse_optional(row.get("industry", "")),
                email=parse_optional(row.get("email", "")),
                notes=str(row.get("notes", "")),
            )
        )

    seen = set()
    for g in guests:
        if g.id in seen:
            raise ValueError(f"Duplicate guest id: {g.id}")
        seen.add(g.id)
    return guests


def load_relationships(path: Source, guests: Sequence[Guest]) -> List[Guest]:
    """Attach directed relationship edges to their owning guests.

    Rows read ``guest_id -> target_id``. Both ends must be known guests.
    Strength defaults to 3 and is clamped to 1..5.
    """
    df = _read(path, ["guest_id", "target_id", "type"], "relationships.csv")
    by_id = {g.id: g for g in guests}
    for _, row in df.iterrows():
        owner = str(row["guest_id"]).strip()
        target = str(row["target_id"]).strip()
        if owner not in by_id or target not in by_id:
            raise ValueError(f"Relationship references unknown guest: {owner}, {target}")
        raw_strength = parse_optional(row.get("strength", ""))
        strength = int(raw_strength) if raw_strength is not None else 3
        by_id[owner].relationships.append(
            RelationshipEdge(
                target_id=target,
                type=_enum(RelationshipType, row["type"], "relationship type"),
                strength=min(5, max(1, strength)),
            )
        )
    return list(guests)


def load_tables(path: Source) -> List[Table]:
    """Load table definitions."""
    df = _read(path, ["id", "capacity"], "tables.csv")
    tables: List[Table] = []
    for _, row in df.iterrows():
        capacity = int(row["capacity"])
        if capacity < 0:
            raise ValueError(f"Table {row['id']} has negative capacity")
        tables.append(
            Table(
                id=str(row["id"]).strip(),
                capacity=capacity,
                name=str(row.get("name", "")).strip(),
            )
        )
    return tables


def load_constraints(path: Source) -> List[Constraint]:
    """Load placement constraints. ``guest_ids`` is pipe separated."""
    df = _read(path, ["id", "type", "guest_ids"], "constraints.csv")
    constraints: List[Constraint] = []
    for _, row in df.iterrows():
        priority = parse_optional(row.get("priority", ""))
        constraints.append(
            Constraint(
                id=str(row["id"]).strip(),
                type=_enum(ConstraintType, row["type"], "constraint type"),
                guest_ids=parse_pipe_list(row["guest_ids"]),
                priority=_enum(Priority, priority, "priority") if priority else Priority.REQUIRED,
                description=parse_optional(row.get("description", "")),
            )
        )
    return constraints


def load_all(
    guests_path: Source,
    relationships_path: Source,
    tables_path: Source,
    constraints_path: Source | None = None,
) -> Tuple[List[Guest], List[Table], List[Constraint]]:
    """Convenience wrapper returning guests (with edges), tables and constraints."""
    guests = load_guests(guests_path)
    load_relationships(relationships_path, guests)
    tables = load_tables(tables_path)
    constraints = load_constraints(constraints_path) if constraints_path is not None else []
    return guests, tables, constraints


def assignments_frame(guests: Sequence[Guest]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "guest_id": [g.id for g in guests],
            "name": [g.name for g in guests],
            "table_id": [g.table_id or "" for g in guests],
            "seat_index": [g.seat_index if g.seat_index is not None else "" for g in guests],
        }
    )


def write_assignments(guests: Sequence[Guest], path: Path | str) -> Path:
    """Write ``guest_id,name,table_id,seat_index`` rows to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    assignments_frame(guests).to_csv(path, index=False)
    return path
