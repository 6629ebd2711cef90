"""Full-reset policy for state that cannot be trusted."""
from __future__ import annotations

from typing import List

from loguru import logger

from .errors import ResetError
from .models import HallState
from .store import StateStore


def reset(state: HallState, store: StateStore) -> HallState:
    """Empty ``state`` in place and remove the persisted file."""
    state.rows = 0
    state.cols = 0
    state.roster.clear()
    state.grid = None
    store.delete()
    return state


class CorruptionGuard:
    """Applies :func:`reset` and remembers why it happened."""

    def __init__(self, store: StateStore) -> None:
        self.store = store
        self.resets: List[ResetError] = []

    def recover(self, state: HallState, error: ResetError) -> HallState:
        logger.warning("System reset: {}", error.message)
        self.resets.append(error)
        return reset(state, self.store)
