"""CodeTracker: a local change-tracking agent for AI coding sessions.

The agent snapshots a working directory when a prompt is submitted and again
when the assistant stops, diffs each snapshot against the last one it
reported, and submits the change records to the CodeTracker service.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
