"""Process-level configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files in the working directory: .env, .env.local

These are knobs of the *process* (log level, where the project lives). The
per-project tracking configuration lives in `.codetracker/config.json` and is
loaded by :mod:`codetracker.core.workspace`.
"""

from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
_ENV_ALIASES = {
    "dev": "dev",
    "development": "dev",
    "local": "dev",
    "test": "test",
    "testing": "test",
    "ci": "test",
    "prod": "prod",
    "production": "prod",
}


class Settings(BaseSettings):
    """Typed process configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `CODETRACKER_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`. The default keeps the
        agent silent inside the host tool.
    log_file : Optional[Path]
        When set, log records are also appended to this file; maps from
        `CODETRACKER_LOG_FILE`.
    state_dir_name : str
        Name of the per-project directory holding config, credentials and
        cache; maps from `CODETRACKER_DIR`.
    project_dir : Optional[Path]
        Project root handed over by the host tool; maps from `CLAUDE_PROJECT_DIR`.
    """

    environment: EnvName = Field(default="prod", alias="CODETRACKER_ENV")
    log_level: LogLevelName = Field(default="WARNING", alias="LOG_LEVEL")
    log_file: Path | None = Field(default=None, alias="CODETRACKER_LOG_FILE")
    state_dir_name: str = Field(default=".codetracker", alias="CODETRACKER_DIR")
    project_dir: Path | None = Field(default=None, alias="CLAUDE_PROJECT_DIR")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        """Accept any case (`info`, `Debug`); unknown names fall back to WARNING."""
        if not isinstance(value, str):
            return value
        name = value.strip().upper()
        name = _LOG_LEVEL_ALIASES.get(name, name)
        return name if name in _LOG_LEVELS else "WARNING"

    @field_validator("environment", mode="before")
    @classmethod
    def _normalize_environment(cls, value: Any) -> Any:
        """Map common spellings (`development`, `Production`) onto dev/test/prod."""
        if not isinstance(value, str):
            return value
        return _ENV_ALIASES.get(value.strip().lower(), "prod")

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.WARNING)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    The hooks import this module inside the user's project, whose environment
    and `.env` we do not control. A value that still fails validation yields
    the defaults instead of an exception.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    os.environ.setdefault("CODETRACKER_ENV", "prod")
    try:
        return Settings()
    except (ValidationError, OSError, UnicodeDecodeError) as exc:
        print(f"codetracker: ignoring invalid settings: {exc}", file=sys.stderr)
        return Settings.model_construct()


settings: Settings = load_settings()


def get_logger(name: str = "codetracker") -> logging.Logger:
    """Return a logger configured from the current settings.

    Records go to stderr only: the host tool may treat anything on stdout as
    hook output.
    """
    current = load_settings()
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)
        if current.log_file is not None:
            try:
                current.log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(current.log_file, encoding="utf-8")
            except OSError:
                # Unwritable log file: stderr only.
                file_handler = None
            if file_handler is not None:
                file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
                logger.addHandler(file_handler)
    logger.setLevel(current.log_level_numeric())
    logger.propagate = False
    return logger
