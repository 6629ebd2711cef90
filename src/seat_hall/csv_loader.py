"""CSV import of students and DataFrame views of the hall."""
from __future__ import annotations

import math
from pathlib import Path
from typing import IO, Any, Iterable, List, Tuple

import pandas as pd

from .models import MAX_ROLL, HallSnapshot, Student


def parse_roll(value: object) -> int:
    """Parse a roll cell; blanks and non-integers raise ``ValueError``."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        raise ValueError("missing roll")
    text = str(value).strip()
    if text.endswith(".0"):
        # pandas reads integer columns with gaps as floats
        text = text[:-2]
    roll = int(text)
    if not 0 < roll <= MAX_ROLL:
        raise ValueError(f"roll must be between 1 and {MAX_ROLL}, got {roll}")
    return roll


def load_students(path: Path | str | IO[Any]) -> List[Tuple[int, str]]:
    """Load ``roll,name`` pairs in file order.

    Validates that every roll is a positive integer and appears once.
    """
    df = pd.read_csv(path)
    missing = [c for c in ("roll", "name") if c not in df.columns]
    if missing:
        raise ValueError(f"missing columns: {', '.join(missing)}")

    students: List[Tuple[int, str]] = []
    seen = set()
    for idx, row in df.iterrows():
        try:
            roll = parse_roll(row["roll"])
        except ValueError as exc:
            raise ValueError(f"row {idx + 2}: {exc}") from exc
        if roll in seen:
            raise ValueError(f"row {idx + 2}: duplicate roll {roll}")
        seen.add(roll)
        name = row["name"]
        name = "" if isinstance(name, float) and math.isnan(name) else str(name).strip()
        students.append((roll, name))
    return students


def roster_frame(roster: Iterable[Student], rows: int | None = None, cols: int | None = None) -> pd.DataFrame:
    """Roster in allocation order. With dimensions given, flags orphans."""
    records = []
    for s in roster:
        record = {"roll": s.roll, "name": s.name, "row": s.row, "col": s.col}
        if rows is not None and cols is not None:
            record["seated"] = 0 <= s.row < rows and 0 <= s.col < cols
        records.append(record)
    columns = ["roll", "name", "row", "col"]
    if rows is not None and cols is not None:
        columns.append("seated")
    return pd.DataFrame(records, columns=columns)


def hall_frame(snapshot: HallSnapshot) -> pd.DataFrame:
    """Seat labels as a rows x cols frame; empty string for free seats."""
    labels = []
    for r in range(snapshot.rows):
        line = []
        for c in range(snapshot.cols):
            student = snapshot.occupant(r, c)
            line.append(f"{student.name} ({student.roll})" if student else "")
        labels.append(line)
    return pd.DataFrame(labels, columns=[f"col {c}" for c in range(snapshot.cols)],
                        index=[f"row {r}" for r in range(snapshot.rows)])
