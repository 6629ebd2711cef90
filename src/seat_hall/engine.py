"""The seat hall engine: load, mutate and persist one explicit state."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from loguru import logger

from . import codec
from .allocation import allocate, deallocate
from .config import Settings
from .errors import CorruptPersistedState, OperationError
from .events import Action, EventLog, SeatEvent
from .guard import CorruptionGuard
from .lifecycle import ensure_grid
from .models import HallSnapshot, HallState, Roster, Student
from .rebuild import rebuild_grid, resize
from .store import StateStore


def load_state(guard: CorruptionGuard) -> HallState:
    """Build a state from ``guard.store``; a missing or bad file gives an empty one."""
    state = HallState()
    data = guard.store.read_bytes()
    if data is None:
        logger.info("No state file at {}, starting empty", guard.store.path)
        return state

    try:
        decoded = codec.decode(data)
    except CorruptPersistedState as exc:
        return guard.recover(state, exc)

    state.rows = decoded.rows
    state.cols = decoded.cols
    state.roster = Roster(decoded.students)
    # Occupancy is always derived from the roster, never read from disk.
    if ensure_grid(state, guard) is not None:
        rebuild_grid(state)
    logger.info("Loaded {}x{} hall with {} students", state.rows, state.cols, state.count)
    return state


@dataclass
class Request:
    """One invocation's worth of input."""

    action: str = ""
    rows: Optional[int] = None
    cols: Optional[int] = None
    roll: int = 0
    name: str = ""


class SeatingEngine:
    """Entry points used by the front ends.

    Every mutating call persists the whole state before returning.
    """

    def __init__(self, store: StateStore, event_log: EventLog) -> None:
        self.store = store
        self.event_log = event_log
        self.guard = CorruptionGuard(store)
        self.state = HallState()

    @classmethod
    def from_settings(cls, settings: Settings) -> "SeatingEngine":
        return cls(StateStore(settings.data_file), EventLog(settings.log_file))

    # ----------------------------- lifecycle -----------------------------
    def load_state(self) -> HallState:
        self.state = load_state(self.guard)
        return self.state

    def persist(self) -> bool:
        return self.store.write(self.state)

    def ensure_grid(self) -> bool:
        return ensure_grid(self.state, self.guard) is not None

    def resize(self, rows: int, cols: int) -> HallState:
        """Apply new dimensions and persist them straight away."""
        changed = resize(self.state, rows, cols, self.guard)
        if changed and self.state.configured:
            self.persist()
        return self.state

    # ----------------------------- operations -----------------------------
    def allocate(self, roll: int, name: str) -> Student:
        student = allocate(self.state, roll, name, self.guard)
        self.persist()
        self.event_log.record(SeatEvent(Action.ALLOCATED, student.roll, student.row, student.col))
        logger.info("Allocated roll {} at ({}, {})", student.roll, student.row, student.col)
        return replace(student)

    def deallocate(self, roll: int) -> Student:
        student = deallocate(self.state, roll)
        self.persist()
        self.event_log.record(SeatEvent(Action.DEALLOCATED, student.roll, student.row, student.col))
        logger.info("Deallocated roll {} from ({}, {})", student.roll, student.row, student.col)
        return student

    # ----------------------------- queries -----------------------------
    def find(self, roll: int) -> Optional[Student]:
        student = self.state.roster.find(roll)
        return replace(student) if student else None

    def find_occupant(self, row: int, col: int) -> Optional[Student]:
        grid = self.state.grid
        if grid is None or not grid.contains(row, col):
            return None
        seat = grid.seat(row, col)
        return self.find(seat.roll) if seat.occupied else None

    def current_state(self) -> HallSnapshot:
        grid = self.state.grid
        return HallSnapshot(
            rows=self.state.rows,
            cols=self.state.cols,
            seats=grid.snapshot() if grid else [],
            roster=self.state.roster.snapshot(),
        )

    # ----------------------------- invocation -----------------------------
    def handle(self, request: Request) -> str:
        """Run one request against the loaded state and return its message.

        Resizing happens first and only for positive dimensions that differ
        from the current ones; then at most one allocate or deallocate.
        """
        msg = ""
        new_rows = request.rows if request.rows is not None else self.state.rows
        new_cols = request.cols if request.cols is not None else self.state.cols
        if new_rows > 0 and new_cols > 0 and (new_rows, new_cols) != (self.state.rows, self.state.cols):
            self.resize(new_rows, new_cols)
            if self.state.configured:
                msg += "Hall dimensions updated. "
        elif self.state.configured:
            self.ensure_grid()

        try:
            if request.action == "allocate" and request.roll > 0:
                s = self.allocate(request.roll, request.name)
                msg += f"Allocated {s.name} ({s.roll}) at ({s.row}, {s.col})"
            elif request.action == "deallocate" and request.roll > 0:
                s = self.deallocate(request.roll)
                msg += f"Deallocated Roll {s.roll} from ({s.row}, {s.col})."
        except OperationError as exc:
            msg += exc.message
        return msg
