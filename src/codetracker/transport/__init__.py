from __future__ import annotations

from .client import INTERACTIONS_PATH, SNAPSHOTS_PATH, TrackerClient, TransportError

__all__ = ["TrackerClient", "TransportError", "SNAPSHOTS_PATH", "INTERACTIONS_PATH"]
