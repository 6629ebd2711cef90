"""Command line interface for SeatHall."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from .config import get_settings
from .csv_loader import load_students, roster_frame
from .engine import Request, SeatingEngine
from .logging_config import setup_logging
from .models import HallSnapshot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Exam hall seat allocation")
    parser.add_argument("--data-file", type=Path, help="Binary state file (default from settings).")
    parser.add_argument("--log-file", type=Path, help="Allocation event log (default from settings).")
    parser.add_argument("--log-level", help="Diagnostic log level, e.g. DEBUG.")
    parser.add_argument("--rows", type=int, help="Resize the hall to this many rows.")
    parser.add_argument("--cols", type=int, help="Resize the hall to this many columns.")
    action = parser.add_mutually_exclusive_group()
    action.add_argument("--allocate", type=int, metavar="ROLL", help="Seat a student.")
    action.add_argument("--deallocate", type=int, metavar="ROLL", help="Free a student's seat.")
    action.add_argument("--search", type=int, metavar="ROLL", help="Show where a student sits.")
    action.add_argument("--import-csv", type=Path, metavar="PATH",
                        help="Seat every roll,name pair from a CSV file.")
    parser.add_argument("--name", default="", help="Student name for --allocate.")
    parser.add_argument("--show-hall", action="store_true", help="Print the seat grid.")
    parser.add_argument("--show-log", action="store_true", help="Print the allocation log.")
    parser.add_argument("--out-roster", type=Path, help="Write the roster CSV: roll,name,row,col,seated.")
    return parser


def render_hall(snapshot: HallSnapshot) -> str:
    if snapshot.rows <= 0 or snapshot.cols <= 0:
        return "Hall not initialized. Allocate a student to start."
    lines = [f"Hall ({snapshot.rows} x {snapshot.cols})"]
    for r in range(snapshot.rows):
        cells = []
        for c in range(snapshot.cols):
            student = snapshot.occupant(r, c)
            cells.append(f"[{student.roll}]" if student else "[ ]")
        lines.append(" ".join(cells))
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point used by ``seat-hall`` and ``python -m seat_hall.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.allocate is not None and not args.name:
        parser.error("--allocate requires --name")

    settings = get_settings(data_file=args.data_file, log_file=args.log_file, log_level=args.log_level)
    setup_logging(settings.log_level)

    engine = SeatingEngine.from_settings(settings)
    engine.load_state()

    request = Request(rows=args.rows, cols=args.cols)
    if args.allocate is not None:
        request.action, request.roll, request.name = "allocate", args.allocate, args.name
    elif args.deallocate is not None:
        request.action, request.roll = "deallocate", args.deallocate
    msg = engine.handle(request)

    for error in engine.guard.resets:
        print(f"System Reset: {error.message}")
    if msg:
        print(msg)

    if args.import_csv:
        for roll, name in load_students(args.import_csv):
            print(engine.handle(Request(action="allocate", roll=roll, name=name)))

    if args.search is not None:
        s = engine.find(args.search)
        if s:
            print(f"Found: {s.name} (Roll {s.roll}) at Row {s.row}, Col {s.col}")
        else:
            print("Student not found")

    if args.show_hall:
        print(render_hall(engine.current_state()))

    if args.show_log:
        text = engine.event_log.read_text()
        print(text.rstrip("\n") if text else "Log empty!")

    if args.out_roster:
        args.out_roster.parent.mkdir(parents=True, exist_ok=True)
        snapshot = engine.current_state()
        roster_frame(snapshot.roster, snapshot.rows, snapshot.cols).to_csv(args.out_roster, index=False)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
