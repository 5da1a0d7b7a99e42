"""State store interface.

The agent keeps exactly two pieces of local state between process
invocations: the last reported :class:`Snapshot` and the pending
:class:`SessionRecord`. Everything that touches them goes through a
:class:`StateStore`, so the correlator can run against disk in production and
against memory in tests.

Contract
--------
- ``load_*`` never raise. Absent *or unreadable* state returns ``None``; an
  unreadable snapshot therefore means a full re-baseline on the next scan.
- ``save_*`` / ``clear_session`` return a :class:`Result`; a write that fails
  leaves the previous state in place.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from codetracker.core.contracts.inventory import Snapshot
from codetracker.core.contracts.session import SessionRecord
from codetracker.core.result import Failure, Result


class StateStore(ABC):
    """Read/write contract for the snapshot cache and the session record."""

    @abstractmethod
    def load_snapshot(self) -> Snapshot | None:
        """Return the cached snapshot, or ``None`` on first run / bad cache."""

    @abstractmethod
    def save_snapshot(self, snapshot: Snapshot) -> Result[None, Failure]:
        """Replace the cached snapshot."""

    @abstractmethod
    def load_session(self) -> SessionRecord | None:
        """Return the pending session record, if any."""

    @abstractmethod
    def save_session(self, record: SessionRecord) -> Result[None, Failure]:
        """Replace the pending session record."""

    @abstractmethod
    def clear_session(self) -> Result[None, Failure]:
        """Delete the pending session record (no-op when absent)."""

    @abstractmethod
    def clear_snapshot(self) -> Result[None, Failure]:
        """Delete the cached snapshot (no-op when absent)."""


__all__ = ["StateStore"]
