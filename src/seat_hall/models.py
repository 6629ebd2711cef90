"""Data models for SeatHall."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Tuple

MAX_ROWS = 100
MAX_COLS = 100
MAX_STUDENTS = 500
# Rolls are stored as int32.
MAX_ROLL = 2**31 - 1
# Fixed byte width of a persisted name, terminator included.
NAME_WIDTH = 50


def fit_name(name: str, width: int = NAME_WIDTH) -> str:
    """Trim ``name`` so its UTF-8 form fits ``width - 1`` bytes.

    Truncation never splits a multi-byte character.
    """
    raw = name.encode("utf-8")
    limit = width - 1
    if len(raw) <= limit:
        return name
    return raw[:limit].decode("utf-8", errors="ignore")


@dataclass
class Student:
    """A roster entry. ``row``/``col`` is the last seat it was given."""

    roll: int
    name: str
    row: int
    col: int

    @property
    def position(self) -> Tuple[int, int]:
        return (self.row, self.col)


@dataclass
class Seat:
    """One grid cell."""

    occupied: bool = False
    roll: int = 0


class Roster:
    """Insertion ordered students with unique rolls."""

    def __init__(self, students: Optional[List[Student]] = None) -> None:
        self._students: List[Student] = list(students or [])

    def __iter__(self) -> Iterator[Student]:
        return iter(self._students)

    def __len__(self) -> int:
        return len(self._students)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Roster):
            return NotImplemented
        return self._students == other._students

    def __repr__(self) -> str:
        return f"Roster({self._students!r})"

    def find(self, roll: int) -> Optional[Student]:
        return next((s for s in self._students if s.roll == roll), None)

    def append(self, student: Student) -> None:
        self._students.append(student)

    def remove(self, roll: int) -> Optional[Student]:
        """Drop the entry for ``roll`` keeping the order of the survivors."""
        for i, student in enumerate(self._students):
            if student.roll == roll:
                return self._students.pop(i)
        return None

    def clear(self) -> None:
        self._students.clear()

    def snapshot(self) -> List[Student]:
        return [replace(s) for s in self._students]


class Grid:
    """A rows x cols matrix of seats."""

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols
        self.seats: List[List[Seat]] = [[Seat() for _ in range(cols)] for _ in range(rows)]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return (self.rows, self.cols, self.seats) == (other.rows, other.cols, other.seats)

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def seat(self, row: int, col: int) -> Seat:
        return self.seats[row][col]

    def occupy(self, row: int, col: int, roll: int) -> None:
        self.seats[row][col] = Seat(occupied=True, roll=roll)

    def release(self, row: int, col: int) -> None:
        self.seats[row][col] = Seat()

    def first_free(self) -> Optional[Tuple[int, int]]:
        """Row-major scan for the first unoccupied seat."""
        for r, seat_row in enumerate(self.seats):
            for c, seat in enumerate(seat_row):
                if not seat.occupied:
                    return (r, c)
        return None

    def occupied_count(self) -> int:
        return sum(1 for seat_row in self.seats for seat in seat_row if seat.occupied)

    def snapshot(self) -> List[List[Seat]]:
        return [[replace(seat) for seat in seat_row] for seat_row in self.seats]


@dataclass
class HallState:
    """Everything the engine persists: dimensions, roster and derived grid."""

    rows: int = 0
    cols: int = 0
    roster: Roster = field(default_factory=Roster)
    grid: Optional[Grid] = None

    @property
    def count(self) -> int:
        return len(self.roster)

    @property
    def configured(self) -> bool:
        return self.rows > 0 and self.cols > 0

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols


@dataclass
class HallSnapshot:
    """Read-only copy of the state handed to front ends."""

    rows: int
    cols: int
    seats: List[List[Seat]]
    roster: List[Student]

    def occupant(self, row: int, col: int) -> Optional[Student]:
        if not (0 <= row < len(self.seats) and 0 <= col < len(self.seats[row])):
            return None
        seat = self.seats[row][col]
        if not seat.occupied:
            return None
        return next((s for s in self.roster if s.roll == seat.roll), None)
