"""On-disk home of the hall state."""
from __future__ import annotations

from pathlib import Path

from loguru import logger

from . import codec
from .models import HallState


class StateStore:
    """Reads and writes the whole state file in one go."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read_bytes(self) -> bytes | None:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("Could not read state from {}: {}", self.path, exc)
            return None

    def write(self, state: HallState) -> bool:
        """Persist ``state``. An unwritable file is logged, not raised."""
        data = codec.encode(state)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(data)
        except OSError as exc:
            logger.error("Could not write state to {}: {}", self.path, exc)
            return False
        logger.debug("Persisted {}x{} hall with {} students to {}", state.rows, state.cols, state.count, self.path)
        return True

    def delete(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.error("Could not delete {}: {}", self.path, exc)
