"""Seat assignment and release on an explicit :class:`HallState`.

Both operations validate before touching anything, so a raised
:class:`~seat_hall.errors.OperationError` always leaves the state as it was.
"""
from __future__ import annotations

from loguru import logger

from .errors import DuplicateRoll, HallFull, InvalidRoll, NoHallConfigured, RollNotFound
from .guard import CorruptionGuard
from .lifecycle import ensure_grid
from .models import MAX_ROLL, MAX_STUDENTS, HallState, Student, fit_name


def allocate(state: HallState, roll: int, name: str, guard: CorruptionGuard) -> Student:
    """Give ``roll`` the first free seat in row-major order."""
    if not 0 < roll <= MAX_ROLL:
        raise InvalidRoll(roll)
    if not state.configured:
        raise NoHallConfigured()
    grid = ensure_grid(state, guard)
    if grid is None:
        raise NoHallConfigured()
    if state.roster.find(roll) is not None:
        raise DuplicateRoll(roll)
    # Orphans count towards the roster even without a seat.
    if state.count >= MAX_STUDENTS:
        raise HallFull()

    seat = grid.first_free()
    if seat is None:
        raise HallFull()

    stored_name = fit_name(name)
    if stored_name != name:
        logger.warning("Name for roll {} truncated to {!r}", roll, stored_name)

    row, col = seat
    student = Student(roll=roll, name=stored_name, row=row, col=col)
    state.roster.append(student)
    grid.occupy(row, col, roll)
    return student


def deallocate(state: HallState, roll: int) -> Student:
    """Remove ``roll`` from the roster, freeing its seat when it has one.

    Orphaned students are removed too; their recorded position is returned
    even though it lies outside the grid.
    """
    student = state.roster.find(roll)
    if student is None:
        raise RollNotFound(roll)
    if state.grid is not None and state.grid.contains(student.row, student.col):
        state.grid.release(student.row, student.col)
    state.roster.remove(roll)
    return student
