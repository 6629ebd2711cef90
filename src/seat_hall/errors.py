"""Exceptions raised by the seat hall core."""
from __future__ import annotations

from .models import MAX_COLS, MAX_ROWS, MAX_STUDENTS


class SeatHallError(Exception):
    """Base error with a message fit for showing to a user."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class OperationError(SeatHallError):
    """A rejected request. State is left untouched."""


class NoHallConfigured(OperationError):
    def __init__(self) -> None:
        super().__init__("Please set Rows and Columns first.")


class InvalidRoll(OperationError):
    def __init__(self, roll: int) -> None:
        self.roll = roll
        super().__init__(f"Roll {roll} is not a valid roll number.")


class DuplicateRoll(OperationError):
    def __init__(self, roll: int) -> None:
        self.roll = roll
        super().__init__(f"Roll {roll} is already allocated!")


class HallFull(OperationError):
    def __init__(self) -> None:
        super().__init__("Hall is full! Increase rows/cols to add more.")


class RollNotFound(OperationError):
    def __init__(self, roll: int) -> None:
        self.roll = roll
        super().__init__("Roll number not found!")


class ResetError(SeatHallError):
    """Untrusted data. Handled by a full reset, never raised to callers."""


class DimensionsOutOfBounds(ResetError):
    def __init__(self, rows: int, cols: int) -> None:
        self.rows = rows
        self.cols = cols
        super().__init__(
            f"Dimensions {rows}x{cols} exceed the hall limits "
            f"({MAX_ROWS}x{MAX_COLS}, {MAX_STUDENTS} seats)."
        )


class CorruptPersistedState(ResetError):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Corrupt data detected in file: {reason}. Starting fresh.")
