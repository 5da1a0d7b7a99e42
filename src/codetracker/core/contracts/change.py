"""Change record contracts: the per-file delta put on the wire.

A change record is a discriminated union over ``change_type``:

- ``added``    : path, content_hash, content, size
- ``modified`` : path, content_hash, content, size, previous_hash
- ``deleted``  : path, previous_hash

The previous hash lets the service look up the last content it stored for
that path when it computes removed-line counts.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter


class AddedChange(BaseModel):
    """A path present now but absent from the previous snapshot."""

    change_type: Literal["added"] = "added"
    path: str
    content_hash: str
    content: str
    size: int = Field(ge=0)


class ModifiedChange(BaseModel):
    """A path present in both snapshots with a different content hash."""

    change_type: Literal["modified"] = "modified"
    path: str
    content_hash: str
    content: str
    size: int = Field(ge=0)
    previous_hash: str


class DeletedChange(BaseModel):
    """A path present in the previous snapshot but gone now."""

    change_type: Literal["deleted"] = "deleted"
    path: str
    previous_hash: str


ChangeRecord = Annotated[
    AddedChange | ModifiedChange | DeletedChange,
    Field(discriminator="change_type"),
]

ChangeList: TypeAdapter[list[ChangeRecord]] = TypeAdapter(list[ChangeRecord])


def dump_changes(changes: list[ChangeRecord]) -> list[dict[str, object]]:
    """Return JSON-ready dicts for a list of change records."""
    return ChangeList.dump_python(changes, mode="json")


__all__ = [
    "AddedChange",
    "ModifiedChange",
    "DeletedChange",
    "ChangeRecord",
    "ChangeList",
    "dump_changes",
]
