"""Typed smoke tests for the process settings loader.

These tests verify three guarantees:
1) Importing the module-level `settings` yields a `Settings` instance.
2) Environment variables override defaults after clearing the loader cache.
3) `get_logger()` respects the configured LOG_LEVEL and never logs to stdout.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from codetracker.core import settings as settings_module
from codetracker.core.settings import (
    Settings,
    get_logger,
    load_settings,
    settings,
)


def test_settings_instance_type() -> None:
    """`settings` should be an instance of the typed `Settings` model."""
    assert isinstance(settings, Settings)


def test_env_overrides_with_cache_clear(monkeypatch: Any, tmp_path: Path) -> None:
    """Changing env vars should take effect after `load_settings.cache_clear()`."""
    monkeypatch.setenv("CODETRACKER_ENV", "test")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("CODETRACKER_DIR", ".tracker-state")
    monkeypatch.setenv("CLAUDE_PROJECT_DIR", str(tmp_path))

    load_settings.cache_clear()
    s = load_settings()

    assert s.environment == "test"
    assert s.log_level == "DEBUG"
    assert s.state_dir_name == ".tracker-state"
    assert s.project_dir == tmp_path

    monkeypatch.delenv("CODETRACKER_DIR")
    monkeypatch.delenv("CLAUDE_PROJECT_DIR")
    load_settings.cache_clear()


def test_defaults_keep_the_agent_quiet(monkeypatch: Any) -> None:
    """Without overrides the log level is WARNING."""
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    load_settings.cache_clear()
    s = load_settings()
    assert s.log_level_numeric() == logging.WARNING
    load_settings.cache_clear()


def test_get_logger_respects_level(monkeypatch: Any) -> None:
    """`get_logger()` should apply the numeric level derived from `LOG_LEVEL`.

    A unique logger name avoids side effects between tests.
    """
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    load_settings.cache_clear()
    _ = load_settings()

    logger = get_logger("codetracker.tests.settings")

    assert logger.level == logging.ERROR
    assert logger.handlers, "Expected at least one handler to be attached."
    streams = [getattr(h, "stream", None) for h in logger.handlers]
    assert sys.stdout not in streams
    assert logger.propagate is False
    load_settings.cache_clear()


def test_get_logger_adds_file_handler(monkeypatch: Any, tmp_path: Path) -> None:
    """`CODETRACKER_LOG_FILE` adds a file handler next to stderr."""
    log_file = tmp_path / "logs" / "agent.log"
    monkeypatch.setenv("CODETRACKER_LOG_FILE", str(log_file))
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    load_settings.cache_clear()

    logger = get_logger("codetracker.tests.settings.file")
    logger.info("hello from the test")
    for handler in logger.handlers:
        handler.flush()

    assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
    assert "hello from the test" in log_file.read_text(encoding="utf-8")

    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    monkeypatch.delenv("CODETRACKER_LOG_FILE")
    load_settings.cache_clear()


def test_log_level_and_environment_are_lenient(monkeypatch: Any) -> None:
    """Lower-case levels are accepted; unknown values fall back to defaults."""
    monkeypatch.setenv("LOG_LEVEL", "info")
    monkeypatch.setenv("CODETRACKER_ENV", "development")
    load_settings.cache_clear()
    s = load_settings()
    assert s.log_level == "INFO"
    assert s.environment == "dev"

    monkeypatch.setenv("LOG_LEVEL", "verbose")
    monkeypatch.setenv("CODETRACKER_ENV", "staging")
    load_settings.cache_clear()
    s = load_settings()
    assert s.log_level == "WARNING"
    assert s.environment == "prod"
    load_settings.cache_clear()


def test_invalid_settings_fall_back_to_defaults(monkeypatch: Any) -> None:
    """A validation error while loading yields defaults, never an exception."""

    class Broken(Settings):
        def __init__(self, **data: Any) -> None:
            raise ValidationError.from_exception_data("Settings", [])

    monkeypatch.setattr(settings_module, "Settings", Broken)
    load_settings.cache_clear()

    s = load_settings()

    assert isinstance(s, Settings)
    assert s.log_level == "WARNING"
    assert s.state_dir_name == ".codetracker"
    monkeypatch.undo()
    load_settings.cache_clear()
