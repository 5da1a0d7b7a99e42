"""Project configuration and credential contracts.

Both files ship in the install bundle downloaded from the dashboard:

- ``.codetracker/config.json``      → :class:`TrackerConfig`
- ``.codetracker/credentials.json`` → :class:`Credentials`

The agent only ever reads them. Unknown keys are ignored so that a newer
bundle does not break an older agent.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SERVER_URL = "https://api.thinktrace.net"
DEFAULT_MAX_FILE_SIZE = 1024 * 1024

DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    ".git/",
    ".codetracker/",
    ".claude/",
    "node_modules",
    "__pycache__",
    ".venv/",
    "venv/",
    "dist/",
    "build/",
    ".next/",
    "coverage/",
    "*.log",
    "*.lock",
    "*.min.js",
    ".DS_Store",
)

DEFAULT_TRACKED_EXTENSIONS: tuple[str, ...] = (
    ".py",
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".java",
    ".kt",
    ".go",
    ".rs",
    ".c",
    ".h",
    ".cpp",
    ".hpp",
    ".cs",
    ".rb",
    ".php",
    ".swift",
    ".html",
    ".css",
    ".scss",
    ".vue",
    ".svelte",
    ".sql",
    ".sh",
    ".md",
    ".json",
    ".yaml",
    ".yml",
    ".toml",
)

PositiveInt = Annotated[int, Field(gt=0)]


class TrackerConfig(BaseModel):
    """Tracking behaviour for one project (``config.json``)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    server_url: str = Field(default=DEFAULT_SERVER_URL, description="Base URL of the API")
    auto_track: bool = Field(default=True, description="Master switch for both triggers")
    ignore_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS),
        description="gitignore-style exclusion rules",
    )
    tracked_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TRACKED_EXTENSIONS),
        description="Exact, case-sensitive file suffixes to inventory",
    )
    max_file_size: PositiveInt = Field(
        default=DEFAULT_MAX_FILE_SIZE, description="Size ceiling in bytes"
    )
    skip_patterns: list[str] = Field(
        default_factory=list,
        description="Case-insensitive regexes; a matching prompt is not tracked",
    )
    exit_requires_changes: bool = Field(
        default=True, description="Skip the stop submission when nothing changed"
    )
    request_timeout: float = Field(default=5.0, gt=0.0, le=60.0, description="Seconds")
    respect_gitignore: bool = Field(
        default=False, description="Also honour the project's root .gitignore"
    )

    @field_validator("server_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("server_url must be an http(s) URL")
        return v

    @field_validator("tracked_extensions")
    @classmethod
    def _dotted_extensions(cls, v: list[str]) -> list[str]:
        """Accept ``"ts"`` as shorthand for ``".ts"``."""
        return [ext if ext.startswith(".") or not ext else f".{ext}" for ext in v]


class Credentials(BaseModel):
    """Authentication secret and project correlation id (``credentials.json``)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    api_key: str | None = None
    current_project_hash: str | None = None
    username: str | None = None
    email: str | None = None

    @property
    def is_complete(self) -> bool:
        """Return True when both the secret and the project id are non-blank."""
        return bool(self.api_key and self.api_key.strip()) and bool(
            self.current_project_hash and self.current_project_hash.strip()
        )


__all__ = [
    "TrackerConfig",
    "Credentials",
    "DEFAULT_SERVER_URL",
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_TRACKED_EXTENSIONS",
]
