from collections import deque

from .state import CombatSession


class SessionHistory:
    """Bounded undo/redo stack of session snapshots.

    Owned by whoever holds the session (a UI store, a request handler). The
    engine itself has no notion of undo; this only remembers snapshots that
    facade calls already produced.
    """

    def __init__(self, max_depth: int = 50):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._undo: deque[CombatSession] = deque(maxlen=max_depth)
        self._redo: list[CombatSession] = []

    @property
    def undo_count(self) -> int:
        return len(self._undo)

    @property
    def redo_count(self) -> int:
        return len(self._redo)

    @property
    def current(self) -> CombatSession | None:
        return self._undo[-1] if self._undo else None

    def push(self, snapshot: CombatSession) -> None:
        """Record a new snapshot. Any redo branch is discarded."""
        self._undo.append(snapshot)
        self._redo.clear()

    def undo(self) -> CombatSession | None:
        """Step back one snapshot.

        Returns the snapshot that is now current. Undoing the only snapshot
        left moves it to the redo stack and returns it.
        """
        if not self._undo:
            return None
        snapshot = self._undo.pop()
        self._redo.append(snapshot)
        return self._undo[-1] if self._undo else snapshot

    def redo(self) -> CombatSession | None:
        if not self._redo:
            return None
        snapshot = self._redo.pop()
        self._undo.append(snapshot)
        return snapshot

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
