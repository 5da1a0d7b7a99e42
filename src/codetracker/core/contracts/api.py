"""Wire contracts for the CodeTracker service.

Requests
--------
- :class:`SnapshotRequest`    → ``POST /api/snapshots``
- :class:`InteractionRequest` → ``POST /api/interactions``

Responses
---------
Every endpoint answers with the same envelope::

    {"success": true, "data": {"snapshot_id": 42}, "error": null, "code": null}

Only ``success`` and ``data.snapshot_id`` matter to the agent. The id may come
back as an integer or a string; it is normalized to ``str``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from codetracker.core.contracts.change import ChangeRecord


class SnapshotRequest(BaseModel):
    """Register a snapshot: the change records since the parent snapshot."""

    project_hash: str
    session_id: str | None = None
    parent_snapshot_id: str | None = None
    prompt_text: str | None = None
    trigger: Literal["entry", "exit"] = "entry"
    changes: list[ChangeRecord] = Field(default_factory=list)


class InteractionRequest(BaseModel):
    """Register an interaction: the post-snapshot linked to its pre-snapshot."""

    project_hash: str
    session_id: str | None = None
    pre_snapshot_id: str
    parent_snapshot_id: str | None = None
    prompt_text: str
    started_at: str
    ended_at: str
    duration_seconds: float = Field(ge=0.0)
    changes: list[ChangeRecord] = Field(default_factory=list)


class SnapshotReceipt(BaseModel):
    """The ``data`` member of a successful response."""

    model_config = ConfigDict(extra="ignore")

    snapshot_id: str

    @field_validator("snapshot_id", mode="before")
    @classmethod
    def _coerce_id(cls, v: object) -> object:
        if isinstance(v, bool):
            raise ValueError("snapshot_id must be a string or an integer")
        if isinstance(v, int):
            return str(v)
        if isinstance(v, str) and not v.strip():
            raise ValueError("snapshot_id is blank")
        return v


class ApiEnvelope(BaseModel):
    """Response wrapper shared by all endpoints."""

    model_config = ConfigDict(extra="ignore")

    success: bool
    data: SnapshotReceipt | None = None
    error: str | None = None
    code: str | None = None


__all__ = ["SnapshotRequest", "InteractionRequest", "SnapshotReceipt", "ApiEnvelope"]
