"""Append-only allocation event log."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from loguru import logger

TIMESTAMP_FORMAT = "%d-%m-%Y %H:%M:%S"


class Action(str, Enum):
    ALLOCATED = "ALLOCATED"
    DEALLOCATED = "DEALLOCATED"


@dataclass
class SeatEvent:
    action: Action
    roll: int
    row: int
    col: int
    timestamp: datetime = field(default_factory=datetime.now)

    def format_line(self) -> str:
        return (
            f"{self.timestamp.strftime(TIMESTAMP_FORMAT)} - {self.action.value}: "
            f"Roll={self.roll} at ({self.row},{self.col})"
        )


class EventLog:
    """One line per event, opened and closed for every write."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def record(self, event: SeatEvent) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(event.format_line() + "\n")
        except OSError as exc:
            logger.error("Could not append to event log {}: {}", self.path, exc)

    def read_text(self) -> str | None:
        """Whole log for display, ``None`` when nothing was logged yet."""
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
