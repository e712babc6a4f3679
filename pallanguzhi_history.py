"""Linear undo/redo history of game states."""

from __future__ import annotations

from typing import List, Optional

from pallanguzhi_engine import EmptyHistoryError, State


class History:
    """
    Two stacks of snapshots taken before each move.

    ``State`` is a frozen dataclass of tuples, so a stored snapshot can never
    be altered by a later move; pushing the value itself is a full copy.
    """

    def __init__(self) -> None:
        self._past: List[State] = []
        self._future: List[State] = []

    def record(self, state: State) -> None:
        self._past.append(state)
        self._future.clear()

    def step_back(self, current: State) -> State:
        if not self._past:
            raise EmptyHistoryError("nothing to undo")
        previous = self._past.pop()
        self._future.append(current)
        return previous

    def step_forward(self, current: State) -> State:
        if not self._future:
            raise EmptyHistoryError("nothing to redo")
        following = self._future.pop()
        self._past.append(current)
        return following

    def undo(self, current: State) -> Optional[State]:
        try:
            return self.step_back(current)
        except EmptyHistoryError:
            return None

    def redo(self, current: State) -> Optional[State]:
        try:
            return self.step_forward(current)
        except EmptyHistoryError:
            return None

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def past_depth(self) -> int:
        return len(self._past)

    @property
    def future_depth(self) -> int:
        return len(self._future)

    def snapshot(self) -> tuple[tuple[State, ...], tuple[State, ...]]:
        return tuple(self._past), tuple(self._future)

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
