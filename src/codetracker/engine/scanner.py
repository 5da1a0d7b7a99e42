"""Tree scanner: build the content inventory of a working directory.

Walk
----
Depth-first, entries visited in sorted name order so two scans of the same
tree produce the same inventory in the same order. A directory excluded by the
ignore rules is pruned and never listed, which keeps the cost of a scan tied
to the number of tracked files rather than the size of ``node_modules``.

Acceptance
----------
A regular file enters the inventory when it is
1. not excluded by an ignore rule,
2. has a suffix on the allow-list (exact, case-sensitive), and
3. is no larger than the size ceiling (larger files are skipped silently).

With ``respect_gitignore`` the project's root ``.gitignore`` is honoured too. It
is evaluated by ``pathspec`` with git's own semantics (negation included),
separately from the configured rules.

Reserved directories
--------------------
The agent's own state directory (credentials and cache) is passed in as a
reserved path and always pruned, whatever the ignore rules say.

Errors
------
Per-entry I/O errors (permission denied, a file deleted mid-scan) skip that
entry. Only a root that cannot be listed fails the scan.
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable
from pathlib import Path

import pathspec

from codetracker.core.contracts.config import TrackerConfig
from codetracker.core.contracts.inventory import Inventory, TrackedFile
from codetracker.core.result import Failure, FailureKind, Result, failure, ok
from codetracker.core.settings import get_logger

from .patterns import PatternSet

logger = get_logger(__name__)

GITIGNORE_FILE = ".gitignore"


def hash_bytes(data: bytes) -> str:
    """Return the SHA-256 hex digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def file_extension(name: str) -> str:
    """Return the suffix used for allow-list matching (``""`` for none)."""
    return os.path.splitext(name)[1]


def read_gitignore(root: Path) -> list[str]:
    """Return the rule lines of ``root/.gitignore`` (comments and blanks dropped)."""
    try:
        text = (root / GITIGNORE_FILE).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []
    lines = (line.strip() for line in text.splitlines())
    return [line for line in lines if line and not line.startswith("#")]


def load_gitignore_spec(root: Path) -> pathspec.GitIgnoreSpec | None:
    """Compile the project's ``.gitignore`` with full git semantics (negation included).

    Returns ``None`` when there is no file or it holds no rules.
    """
    lines = read_gitignore(root)
    if not lines:
        return None
    return pathspec.GitIgnoreSpec.from_lines(lines)


def build_ignore_set(config: TrackerConfig) -> PatternSet:
    """Compile the configured ignore rules."""
    return PatternSet(config.ignore_patterns)


def reserved_relpaths(root: Path, paths: Iterable[Path | str]) -> frozenset[str]:
    """Express ``paths`` as `/`-separated paths relative to ``root``.

    Paths outside ``root`` are dropped: the walk can never reach them.
    """
    out: set[str] = set()
    for raw in paths:
        path = Path(raw)
        if path.is_absolute():
            try:
                path = path.relative_to(root)
            except ValueError:
                continue
        rel = path.as_posix().strip("/")
        if rel and rel != ".":
            out.add(rel)
    return frozenset(out)


class TreeScanner:
    """Scan one root directory according to a :class:`TrackerConfig`."""

    def __init__(
        self,
        root: Path,
        config: TrackerConfig,
        *,
        ignore: PatternSet | None = None,
        reserved: Iterable[Path | str] = (),
    ) -> None:
        self.root: Path = root
        self.config: TrackerConfig = config
        self.ignore: PatternSet = ignore if ignore is not None else build_ignore_set(config)
        self.reserved: frozenset[str] = reserved_relpaths(root, reserved)
        self.gitignore: pathspec.GitIgnoreSpec | None = (
            load_gitignore_spec(root) if config.respect_gitignore else None
        )
        self._extensions: frozenset[str] = frozenset(config.tracked_extensions)

    def scan(self) -> Result[Inventory, Failure]:
        """Walk the tree and return ``{relative_path: TrackedFile}``."""
        try:
            entries = self._list(self.root)
        except OSError as exc:
            return failure(FailureKind.FILESYSTEM, f"cannot scan {self.root}: {exc}")

        inventory: Inventory = {}
        self._walk(entries, "", inventory)
        logger.debug("Scanned %s: %d tracked files", self.root, len(inventory))
        return ok(inventory)

    # ------------------------------------------------------------------ #
    # Walk helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _list(directory: Path | str) -> list[os.DirEntry[str]]:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)

    def _walk(self, entries: Iterable[os.DirEntry[str]], prefix: str, out: Inventory) -> None:
        for entry in entries:
            rel = f"{prefix}{entry.name}"
            try:
                if entry.is_dir(follow_symlinks=False):
                    if self._excluded(rel, is_dir=True):
                        continue
                    children = self._list(entry.path)
                    self._walk(children, f"{rel}/", out)
                elif entry.is_file():
                    record = self._accept(entry, rel)
                    if record is not None:
                        out[rel] = record
            except OSError as exc:
                logger.debug("Skipping %s: %s", rel, exc)

    def _excluded(self, rel: str, *, is_dir: bool) -> bool:
        if rel in self.reserved:
            return True
        if self.ignore.is_ignored(rel, is_dir=is_dir):
            return True
        if self.gitignore is None:
            return False
        # pathspec recognises directories by their trailing slash
        return self.gitignore.match_file(f"{rel}/" if is_dir else rel)

    def _accept(self, entry: os.DirEntry[str], rel: str) -> TrackedFile | None:
        if file_extension(entry.name) not in self._extensions:
            return None
        if self._excluded(rel, is_dir=False):
            return None
        if entry.stat().st_size > self.config.max_file_size:
            return None
        with open(entry.path, "rb") as f:
            data = f.read()
        # the file may have grown between stat() and read()
        if len(data) > self.config.max_file_size:
            return None
        return TrackedFile(
            relative_path=rel,
            content_hash=hash_bytes(data),
            size=len(data),
            content=data.decode("utf-8", errors="replace"),
        )


def scan_tree(
    root: Path | str,
    config: TrackerConfig,
    *,
    reserved: Iterable[Path | str] = (),
) -> Result[Inventory, Failure]:
    """Scan ``root`` and return its inventory (see :class:`TreeScanner`)."""
    return TreeScanner(Path(root), config, reserved=reserved).scan()


__all__ = [
    "TreeScanner",
    "scan_tree",
    "hash_bytes",
    "file_extension",
    "build_ignore_set",
    "read_gitignore",
    "load_gitignore_spec",
    "reserved_relpaths",
]
