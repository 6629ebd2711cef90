"""SeatHall package."""
from .models import Student, Seat, Roster, Grid, HallState, HallSnapshot
from .errors import (
    SeatHallError,
    NoHallConfigured,
    DuplicateRoll,
    HallFull,
    RollNotFound,
    DimensionsOutOfBounds,
    CorruptPersistedState,
)
from .engine import SeatingEngine, Request, load_state

__all__ = [
    "Student",
    "Seat",
    "Roster",
    "Grid",
    "HallState",
    "HallSnapshot",
    "SeatHallError",
    "NoHallConfigured",
    "DuplicateRoll",
    "HallFull",
    "RollNotFound",
    "DimensionsOutOfBounds",
    "CorruptPersistedState",
    "SeatingEngine",
    "Request",
    "load_state",
]
