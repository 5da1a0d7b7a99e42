"""In-memory state store.

Holds the snapshot and session record as plain attributes. Values are deep
copied on the way in and out so callers cannot mutate what is "persisted",
which keeps it behaviourally identical to the JSON file store.
"""

from __future__ import annotations

from codetracker.core.contracts.inventory import Snapshot
from codetracker.core.contracts.session import SessionRecord
from codetracker.core.result import Failure, Result, ok

from .base import StateStore


class MemoryStateStore(StateStore):
    """Volatile :class:`StateStore` for tests and dry runs.

    Attributes
    ----------
    writes : int
        Number of successful mutations, handy for asserting that a failed
        trigger left the store untouched.
    """

    __slots__ = ("_snapshot", "_session", "writes")

    def __init__(
        self,
        snapshot: Snapshot | None = None,
        session: SessionRecord | None = None,
    ) -> None:
        self._snapshot: Snapshot | None = None
        self._session: SessionRecord | None = None
        if snapshot is not None:
            self._snapshot = snapshot.model_copy(deep=True)
        if session is not None:
            self._session = session.model_copy()
        self.writes: int = 0

    def load_snapshot(self) -> Snapshot | None:
        return self._snapshot.model_copy(deep=True) if self._snapshot is not None else None

    def save_snapshot(self, snapshot: Snapshot) -> Result[None, Failure]:
        self._snapshot = snapshot.model_copy(deep=True)
        self.writes += 1
        return ok(None)

    def load_session(self) -> SessionRecord | None:
        return self._session.model_copy() if self._session is not None else None

    def save_session(self, record: SessionRecord) -> Result[None, Failure]:
        self._session = record.model_copy()
        self.writes += 1
        return ok(None)

    def clear_session(self) -> Result[None, Failure]:
        if self._session is not None:
            self._session = None
            self.writes += 1
        return ok(None)

    def clear_snapshot(self) -> Result[None, Failure]:
        if self._snapshot is not None:
            self._snapshot = None
            self.writes += 1
        return ok(None)


__all__ = ["MemoryStateStore"]
