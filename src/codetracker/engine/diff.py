"""Diff engine: compare the current inventory with the last reported snapshot.

Rules
-----
- No previous snapshot (first run): every current file is ``added``.
- Otherwise, for each current path: absent before → ``added``; different
  hash → ``modified`` (carrying the previous hash); same hash → nothing.
- Every previous path missing now → ``deleted`` (carrying the previous hash).

Output order is deterministic: current paths in sorted order, then deleted
paths in sorted order. The engine never hashes anything; it trusts the
SHA-256 digests produced by the scanner and stored in the snapshot.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping

from codetracker.core.contracts.change import (
    AddedChange,
    ChangeRecord,
    DeletedChange,
    ModifiedChange,
)
from codetracker.core.contracts.inventory import FileState, TrackedFile


def diff_inventories(
    current: Mapping[str, TrackedFile],
    previous: Mapping[str, FileState] | None,
) -> list[ChangeRecord]:
    """Return the change records that turn ``previous`` into ``current``."""
    changes: list[ChangeRecord] = []
    if previous is None:
        previous = {}

    for path in sorted(current):
        now = current[path]
        before = previous.get(path)
        if before is None:
            changes.append(
                AddedChange(
                    path=path,
                    content_hash=now.content_hash,
                    content=now.content,
                    size=now.size,
                )
            )
        elif before.content_hash != now.content_hash:
            changes.append(
                ModifiedChange(
                    path=path,
                    content_hash=now.content_hash,
                    content=now.content,
                    size=now.size,
                    previous_hash=before.content_hash,
                )
            )

    for path in sorted(previous.keys() - current.keys()):
        changes.append(DeletedChange(path=path, previous_hash=previous[path].content_hash))

    return changes


def summarize(changes: list[ChangeRecord]) -> dict[str, int]:
    """Count change records per type: ``{"added": n, "modified": n, "deleted": n}``."""
    counts = Counter(c.change_type for c in changes)
    return {kind: counts.get(kind, 0) for kind in ("added", "modified", "deleted")}


__all__ = ["diff_inventories", "summarize"]
