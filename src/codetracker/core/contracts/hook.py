"""Hook event contracts: the JSON the host tool writes to our stdin.

Only the fields the agent uses are declared; everything else the host sends
(``transcript_path``, ``permission_mode`` ...) is ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class EntryEvent(BaseModel):
    """Payload of the prompt-submit trigger."""

    model_config = ConfigDict(extra="ignore")

    prompt: str = ""
    session_id: str | None = None
    cwd: str | None = None
    hook_event_name: str | None = None


class ExitEvent(BaseModel):
    """Payload of the stop trigger."""

    model_config = ConfigDict(extra="ignore")

    session_id: str | None = None
    timestamp: str | int | float | None = None
    cwd: str | None = None
    hook_event_name: str | None = None
    stop_hook_active: bool = False


__all__ = ["EntryEvent", "ExitEvent"]
