"""Disk-backed state store.

Persists the snapshot and session record as pretty-printed JSON files under
the workspace cache directory:

- ``last_snapshot.json``   → :class:`Snapshot`
- ``current_session.json`` → :class:`SessionRecord`

Writes are atomic: the payload goes to a temporary file in the same directory
which is then moved over the target with ``os.replace``. A process killed
mid-write leaves either the old file or the new one, never half of each.

Usage
-----
>>> store = JsonStateStore(Path(".codetracker/cache"))
>>> store.load_snapshot()  # None on first run
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from codetracker.core.contracts.inventory import Snapshot
from codetracker.core.contracts.session import SessionRecord
from codetracker.core.result import Failure, FailureKind, Result, failure, ok
from codetracker.core.settings import get_logger

from .base import StateStore

logger = get_logger(__name__)

SNAPSHOT_FILE = "last_snapshot.json"
SESSION_FILE = "current_session.json"

M = TypeVar("M", bound=BaseModel)


class JsonStateStore(StateStore):
    """Persist agent state to JSON files in ``cache_dir``."""

    def __init__(self, cache_dir: Path) -> None:
        self.cache_dir: Path = cache_dir

    @property
    def snapshot_path(self) -> Path:
        return self.cache_dir / SNAPSHOT_FILE

    @property
    def session_path(self) -> Path:
        return self.cache_dir / SESSION_FILE

    def load_snapshot(self) -> Snapshot | None:
        return self._read(self.snapshot_path, Snapshot)

    def save_snapshot(self, snapshot: Snapshot) -> Result[None, Failure]:
        return self._write(self.snapshot_path, snapshot)

    def load_session(self) -> SessionRecord | None:
        return self._read(self.session_path, SessionRecord)

    def save_session(self, record: SessionRecord) -> Result[None, Failure]:
        return self._write(self.session_path, record)

    def clear_session(self) -> Result[None, Failure]:
        return self._remove(self.session_path)

    def clear_snapshot(self) -> Result[None, Failure]:
        return self._remove(self.snapshot_path)

    # ------------------------------------------------------------------ #
    # File helpers
    # ------------------------------------------------------------------ #
    def _read(self, path: Path, model: type[M]) -> M | None:
        """Load ``path`` into ``model``; missing or corrupt files read as ``None``."""
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("%s: cannot read %s: %s", FailureKind.CORRUPT_STATE.value, path, exc)
            return None
        try:
            return model.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.info("Discarding corrupt state file %s (%s)", path, type(exc).__name__)
            return None

    def _write(self, path: Path, payload: BaseModel) -> Result[None, Failure]:
        """Atomically replace ``path`` with the JSON form of ``payload``."""
        tmp_name: str | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.cache_dir,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(payload.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            return failure(FailureKind.FILESYSTEM, f"cannot write {path}: {exc}")
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        return ok(None)

    @staticmethod
    def _remove(path: Path) -> Result[None, Failure]:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            return failure(FailureKind.FILESYSTEM, f"cannot delete {path}: {exc}")
        return ok(None)


__all__ = ["JsonStateStore", "SNAPSHOT_FILE", "SESSION_FILE"]
