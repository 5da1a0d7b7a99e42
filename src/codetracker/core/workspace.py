"""Project workspace: where the tracked tree and the agent's state live.

Layout (relative to the project root)::

    .codetracker/
        config.json            tracking configuration (read-only)
        credentials.json       api key + project hash (read-only)
        cache/
            last_snapshot.json last reported inventory
            current_session.json pending Entry → Exit correlation

The root is resolved from, in order: an explicit argument, the host tool's
``CLAUDE_PROJECT_DIR``, the ``cwd`` reported in the hook payload, and the
process working directory.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from codetracker.core.contracts.config import Credentials, TrackerConfig
from codetracker.core.result import Failure, FailureKind, Result, failure, ok
from codetracker.core.settings import get_logger, load_settings

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

CONFIG_FILE = "config.json"
CREDENTIALS_FILE = "credentials.json"
CACHE_DIR = "cache"


def resolve_root(explicit: str | Path | None = None, hook_cwd: str | None = None) -> Path:
    """Pick the project root following the documented precedence."""
    if explicit is not None:
        return Path(explicit).expanduser().resolve()
    current = load_settings()
    if current.project_dir is not None:
        return current.project_dir.expanduser().resolve()
    if hook_cwd:
        return Path(hook_cwd).expanduser().resolve()
    return Path.cwd().resolve()


@dataclass(frozen=True, slots=True)
class Workspace:
    """Paths and loaders for one tracked project."""

    root: Path
    state_dir_name: str = ".codetracker"

    @classmethod
    def locate(cls, explicit: str | Path | None = None, hook_cwd: str | None = None) -> Workspace:
        """Build a workspace for the resolved project root."""
        return cls(
            root=resolve_root(explicit, hook_cwd),
            state_dir_name=load_settings().state_dir_name,
        )

    @property
    def state_dir(self) -> Path:
        return self.root / self.state_dir_name

    @property
    def config_path(self) -> Path:
        return self.state_dir / CONFIG_FILE

    @property
    def credentials_path(self) -> Path:
        return self.state_dir / CREDENTIALS_FILE

    @property
    def cache_dir(self) -> Path:
        return self.state_dir / CACHE_DIR

    def load_config(self) -> Result[TrackerConfig, Failure]:
        """Read ``config.json``; a missing or invalid file is ``config_missing``."""
        return _load_model(self.config_path, TrackerConfig)

    def load_credentials(self) -> Result[Credentials, Failure]:
        """Read ``credentials.json``; incomplete credentials are ``config_missing``."""
        loaded = _load_model(self.credentials_path, Credentials)
        if loaded.is_err():
            return loaded
        creds = loaded.unwrap()
        if not creds.is_complete:
            return failure(
                FailureKind.CONFIG_MISSING,
                f"{self.credentials_path} lacks api_key or current_project_hash",
            )
        return ok(creds)


def _load_model(path: Path, model: type[M]) -> Result[M, Failure]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return failure(FailureKind.CONFIG_MISSING, f"{path} not found")
    except (OSError, UnicodeDecodeError) as exc:
        return failure(FailureKind.CONFIG_MISSING, f"cannot read {path}: {exc}")
    try:
        return ok(model.model_validate(json.loads(raw)))
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.debug("Ignoring invalid %s: %s", path, exc)
        return failure(FailureKind.CONFIG_MISSING, f"invalid {path.name}")


__all__ = ["Workspace", "resolve_root", "CONFIG_FILE", "CREDENTIALS_FILE", "CACHE_DIR"]
