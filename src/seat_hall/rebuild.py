"""Recompute seat occupancy from the roster."""
from __future__ import annotations

from typing import List

from loguru import logger

from .guard import CorruptionGuard
from .lifecycle import ensure_grid
from .models import HallState, Student


def rebuild_grid(state: HallState) -> List[Student]:
    """Seat every roster entry that fits the current grid.

    The grid is cleared first, so nothing it held before survives. Returns
    the orphaned students: those whose stored seat lies outside the grid.
    They stay on the roster with their old position.
    """
    grid = state.grid
    if grid is None:
        return list(state.roster)
    for r in range(grid.rows):
        for c in range(grid.cols):
            grid.release(r, c)

    orphans: List[Student] = []
    for student in state.roster:
        if grid.contains(student.row, student.col):
            grid.occupy(student.row, student.col, student.roll)
        else:
            orphans.append(student)
    return orphans


def resize(state: HallState, rows: int, cols: int, guard: CorruptionGuard) -> bool:
    """Switch to a ``rows`` x ``cols`` hall.

    Only acts on positive dimensions that differ from the current ones. The
    old grid is dropped, never migrated. Returns True when the state changed,
    including a reset caused by oversized dimensions.
    """
    if rows <= 0 or cols <= 0:
        return False
    if (rows, cols) == (state.rows, state.cols):
        return False

    state.grid = None
    state.rows, state.cols = rows, cols
    if ensure_grid(state, guard) is None:
        return True
    orphans = rebuild_grid(state)
    logger.info("Hall resized to {}x{}", rows, cols)
    if orphans:
        logger.info("Students without a seat after resize: {}", [s.roll for s in orphans])
    return True
