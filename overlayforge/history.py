"""Undo/redo history with batching for segment edits."""

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class EditHistory(Generic[T]):
    """Bounded undo/redo stack over immutable state snapshots.

    Between ``begin_batch`` and ``commit_batch`` updates replace the present
    state without touching history; the commit then pushes the pre-batch
    snapshot as a single undo entry (only if the state actually changed).
    """

    def __init__(self, initial: T, max_history: int = 20):
        self.present = initial
        self.max_history = max_history
        self._past: list[T] = []
        self._future: list[T] = []
        self._batch_snapshot: T | None = None
        self._in_batch = False

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def _push_past(self, state: T) -> None:
        self._past.append(state)
        if len(self._past) > self.max_history:
            self._past.pop(0)

    def set(self, state: T | Callable[[T], T], with_history: bool = True) -> None:
        new_state = state(self.present) if callable(state) else state
        if new_state is self.present:
            return

        if self._in_batch:
            self.present = new_state
            return

        if with_history:
            self._push_past(self.present)
            self._future.clear()
        self.present = new_state

    def begin_batch(self) -> None:
        if not self._in_batch:
            self._in_batch = True
            self._batch_snapshot = self.present

    def commit_batch(self) -> None:
        if not self._in_batch:
            return
        snapshot = self._batch_snapshot
        self._in_batch = False
        self._batch_snapshot = None
        if snapshot is self.present:
            return
        self._push_past(snapshot)
        self._future.clear()

    def undo(self) -> None:
        if not self._past:
            return
        self._future.insert(0, self.present)
        self.present = self._past.pop()

    def redo(self) -> None:
        if not self._future:
            return
        self._past.append(self.present)
        self.present = self._future.pop(0)
