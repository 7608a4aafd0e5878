"""Command line interface for the seating optimizer."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

from .csv_loader import load_all, write_assignments
from .scoring import compute_table_stats, grade_tables
from .session import OptimizationSession
from .weights import PRESETS, preset


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Optimize guest seating across tables")
    parser.add_argument("--guests", required=True, help="Path to guests.csv")
    parser.add_argument("--relationships", required=True, help="Path to relationships.csv")
    parser.add_argument("--tables", required=True, help="Path to tables.csv")
    parser.add_argument("--constraints", help="Path to constraints.csv")
    parser.add_argument("--preset", choices=PRESETS, default="balanced",
                        help="Starting weights and heuristics.")
    parser.add_argument("--group-cohesion", action="store_true",
                        help="Favor tables holding guests of the same group.")
    parser.add_argument("--interest-match", action="store_true",
                        help="Favor tables with shared interests.")
    parser.add_argument("--enforce-constraints", action="store_true",
                        help="Use constraints while placing, not only when reporting.")
    parser.add_argument("--out-assignments", type=Path,
                        help="Write assignments CSV: guest_id,name,table_id,seat_index.")
    parser.add_argument("--out-report", type=Path,
                        help="Write per-table report CSV with scores and grades.")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by ``seating-optimizer`` and ``python -m seating_optimizer.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    guests, tables, constraints = load_all(
        args.guests, args.relationships, args.tables, args.constraints
    )

    weights, options = preset(args.preset)
    options.group_cohesion = options.group_cohesion or args.group_cohesion
    options.interest_match = options.interest_match or args.interest_match
    options.enforce_constraints = options.enforce_constraints or args.enforce_constraints

    session = OptimizationSession(weights, options)
    result = session.run(guests, tables, constraints)

    for issue in result.issues:
        print(f"[ISSUE] {issue}")
    if result.no_tables_available:
        return 1

    for guest in sorted(result.guests, key=lambda g: g.id):
        print(f"{guest.id},{guest.table_id or ''}")

    print(f"[SCORE] {result.before_score} -> {result.after_score} "
          f"moved={len(result.moved_guest_ids)} unassigned={len(result.unassigned_guest_ids)}")
    b = result.breakdown
    print(f"[BREAKDOWN] constraints={b.constraints}% relationships={b.relationships}% "
          f"groups={b.groups}% capacity={b.capacity}%")

    graded = grade_tables(compute_table_stats(result.guests, tables, weights))
    for s in graded:
        print(f"[REPORT] {s['table']} grade={s['grade']} compatibility={s['compatibility']} "
              f"seated={s['guest_count']}/{s['capacity']} total={s['total_score']}")

    for v in result.violations:
        print(f"[VIOLATION] {v.priority.value} {v.constraint_type.value}: {v.description}")

    if args.out_assignments:
        write_assignments(result.guests, args.out_assignments)

    if args.out_report:
        args.out_report.parent.mkdir(parents=True, exist_ok=True)
        report = pd.DataFrame(
            [
                {
                    "table": s["table"],
                    "grade": s["grade"],
                    "compatibility": s["compatibility"],
                    "total_score": s["total_score"],
                    "guest_count": s["guest_count"],
                    "capacity": s["capacity"],
                    "issues": "|".join(s["issues"]),
                    "members": "|".join(s["members"]),
                }
                for s in graded
            ]
        )
        report.to_csv(args.out_report, index=False)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
