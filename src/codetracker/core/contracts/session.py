"""Session record: the bridge between the Entry and Exit triggers.

Entry writes one after its submission succeeds; Exit reads it, submits the
interaction, and deletes it. No record at Exit time simply means there was no
matching Entry (for instance a prompt filtered by a skip pattern).
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SessionRecord(BaseModel):
    """Correlation state persisted between Entry and Exit."""

    pre_snapshot_id: str = Field(description="Snapshot id returned for the Entry submission")
    prompt_text: str = Field(description="Prompt that started the interaction")
    session_id: str | None = Field(default=None, description="Host tool session id")
    started_at: str = Field(description="UTC ISO-8601 timestamp of the Entry trigger")


__all__ = ["SessionRecord"]
