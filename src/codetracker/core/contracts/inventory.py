"""Inventory contracts: what a scan produces and what the cache keeps.

- :class:`TrackedFile` is the in-memory record built by the scanner. It holds
  the decoded file content so the diff can put it on the wire, and it never
  outlives one trigger.
- :class:`FileState` is the persisted form (hash + size, no content).
- :class:`Snapshot` is the single cached inventory the agent last reported,
  together with the id the service assigned to it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from pydantic import BaseModel, Field

from codetracker.core.clock import format_timestamp, utc_now


@dataclass(frozen=True, slots=True)
class TrackedFile:
    """One accepted file from the current scan.

    Attributes
    ----------
    relative_path : str
        Path relative to the scan root, always ``/``-separated. Unique key.
    content_hash : str
        SHA-256 hex digest of the raw bytes.
    size : int
        Size in bytes.
    content : str
        UTF-8 decoded content (undecodable bytes replaced).
    """

    relative_path: str
    content_hash: str
    size: int
    content: str


Inventory = dict[str, TrackedFile]


class FileState(BaseModel):
    """Persisted per-file state: enough to detect a change, nothing more."""

    content_hash: str
    size: int = Field(ge=0)


def _utc_now() -> str:
    return format_timestamp(utc_now())


class Snapshot(BaseModel):
    """The last inventory successfully reported to the service."""

    snapshot_id: str | None = Field(default=None, description="Id returned by the service")
    created_at: str = Field(default_factory=_utc_now, description="UTC ISO-8601 with 'Z'")
    files: dict[str, FileState] = Field(default_factory=dict)

    @classmethod
    def from_inventory(cls, inventory: Mapping[str, TrackedFile], snapshot_id: str) -> Snapshot:
        """Strip content from a scan result to get its persistable form."""
        files = {
            path: FileState(content_hash=f.content_hash, size=f.size)
            for path, f in sorted(inventory.items())
        }
        return cls(snapshot_id=snapshot_id, files=files)

    def __len__(self) -> int:
        return len(self.files)


__all__ = ["TrackedFile", "Inventory", "FileState", "Snapshot"]
