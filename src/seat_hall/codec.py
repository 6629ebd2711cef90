"""Binary encoding of the hall state.

Layout, little endian::

    int32 rows
    int32 cols
    int32 count
    count x (int32 roll, byte[50] name, 2 pad bytes, int32 row, int32 col)

The two pad bytes keep records at 64 bytes, matching the files written by the
original C tool from its in-memory struct.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from loguru import logger

from .errors import CorruptPersistedState
from .models import MAX_COLS, MAX_ROWS, MAX_STUDENTS, NAME_WIDTH, HallState, Student

HEADER = struct.Struct("<iii")
RECORD = struct.Struct(f"<i{NAME_WIDTH}s2xii")


@dataclass
class DecodedState:
    """Dimensions and roster read back from disk. No grid: it is derived."""

    rows: int = 0
    cols: int = 0
    students: List[Student] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.students)


def encode_name(name: str) -> bytes:
    # struct pads short values with NUL bytes
    return name.encode("utf-8")[:NAME_WIDTH]


def decode_name(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def encode(state: HallState) -> bytes:
    students = list(state.roster)
    parts = [HEADER.pack(state.rows, state.cols, len(students))]
    for s in students:
        parts.append(RECORD.pack(s.roll, encode_name(s.name), s.row, s.col))
    return b"".join(parts)


def _check_header(rows: int, cols: int, count: int) -> None:
    if not 0 <= rows <= MAX_ROWS:
        raise CorruptPersistedState(f"rows={rows} outside [0, {MAX_ROWS}]")
    if not 0 <= cols <= MAX_COLS:
        raise CorruptPersistedState(f"cols={cols} outside [0, {MAX_COLS}]")
    if not 0 <= count <= MAX_STUDENTS:
        raise CorruptPersistedState(f"count={count} outside [0, {MAX_STUDENTS}]")


def decode(data: bytes) -> DecodedState:
    """Parse ``data`` into dimensions and roster.

    Raises :class:`CorruptPersistedState` for out-of-range header fields or
    records that break roster invariants. A file cut short inside the record
    area yields only the complete records; a file too short for the header
    decodes as an empty state.
    """
    if len(data) < HEADER.size:
        logger.warning("State file shorter than its header ({} bytes), ignoring", len(data))
        return DecodedState()

    rows, cols, count = HEADER.unpack_from(data, 0)
    _check_header(rows, cols, count)

    available = (len(data) - HEADER.size) // RECORD.size
    if available < count:
        logger.warning("State file declares {} students but holds {}, trimming", count, available)
        count = available

    students: List[Student] = []
    rolls: Set[int] = set()
    positions: Set[Tuple[int, int]] = set()
    for i in range(count):
        roll, raw_name, row, col = RECORD.unpack_from(data, HEADER.size + i * RECORD.size)
        if roll <= 0:
            raise CorruptPersistedState(f"record {i} has roll {roll}")
        if roll in rolls:
            raise CorruptPersistedState(f"roll {roll} stored twice")
        if (row, col) in positions:
            raise CorruptPersistedState(f"seat ({row}, {col}) stored twice")
        rolls.add(roll)
        positions.add((row, col))
        students.append(Student(roll=roll, name=decode_name(raw_name), row=row, col=col))

    return DecodedState(rows=rows, cols=cols, students=students)
