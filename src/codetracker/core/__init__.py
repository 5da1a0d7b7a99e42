"""Core package initializer for CodeTracker.

Holds the shared plumbing used by every trigger:
    from codetracker.core.settings import settings, load_settings, Settings, get_logger
    from codetracker.core.result import Result, Ok, Err, Failure, FailureKind
"""

from __future__ import annotations

__all__ = ["__doc__"]
