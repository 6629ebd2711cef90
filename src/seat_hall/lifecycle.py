"""Grid backing store allocation."""
from __future__ import annotations

from typing import Optional

from .errors import DimensionsOutOfBounds
from .guard import CorruptionGuard
from .models import MAX_COLS, MAX_ROWS, MAX_STUDENTS, Grid, HallState


def ensure_grid(state: HallState, guard: CorruptionGuard) -> Optional[Grid]:
    """Allocate an empty grid for the current dimensions if there is none.

    Returns the grid, or None when the state has no usable dimensions.
    Dimensions beyond the hall limits reset the whole state through ``guard``.
    """
    if state.grid is not None:
        return state.grid
    rows, cols = state.rows, state.cols
    if rows <= 0 or cols <= 0:
        return None
    if rows > MAX_ROWS or cols > MAX_COLS or rows * cols > MAX_STUDENTS:
        guard.recover(state, DimensionsOutOfBounds(rows, cols))
        return None
    state.grid = Grid(rows, cols)
    return state.grid
