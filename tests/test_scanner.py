"""Tests for the tree scanner: acceptance rules, pruning, determinism."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Any

from codetracker.core.contracts.config import TrackerConfig
from codetracker.core.result import FailureKind
from codetracker.engine.patterns import PatternSet
from codetracker.engine.scanner import (
    TreeScanner,
    file_extension,
    hash_bytes,
    reserved_relpaths,
    scan_tree,
)


def _write(root: Path, rel: str, content: str | bytes) -> Path:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def test_extension_and_size_filters(tmp_path: Path) -> None:
    """Only allow-listed suffixes at or under the size ceiling are kept."""
    _write(tmp_path, "big.ts", "x" * 150)
    _write(tmp_path, "notes.md", "y" * 50)
    _write(tmp_path, "small.ts", "z" * 50)
    _write(tmp_path, "edge.ts", "e" * 100)
    config = TrackerConfig(tracked_extensions=[".ts"], max_file_size=100)

    result = scan_tree(tmp_path, config)

    assert result.is_ok()
    inventory = result.unwrap()
    assert sorted(inventory) == ["edge.ts", "small.ts"]
    assert inventory["small.ts"].size == 50


def test_extension_match_is_case_sensitive(tmp_path: Path) -> None:
    """`.TS` is not `.ts`."""
    _write(tmp_path, "upper.TS", "a")
    _write(tmp_path, "lower.ts", "a")
    inventory = scan_tree(tmp_path, TrackerConfig(tracked_extensions=[".ts"])).unwrap()
    assert list(inventory) == ["lower.ts"]


def test_record_carries_hash_content_and_normalized_path(tmp_path: Path) -> None:
    """Nested files are keyed by `/`-separated relative paths."""
    _write(tmp_path, "src/pkg/mod.py", "print('hi')\n")
    inventory = scan_tree(tmp_path, TrackerConfig()).unwrap()

    record = inventory["src/pkg/mod.py"]
    assert record.relative_path == "src/pkg/mod.py"
    assert record.content == "print('hi')\n"
    assert record.content_hash == hashlib.sha256(b"print('hi')\n").hexdigest()
    assert record.size == len(b"print('hi')\n")


def test_undecodable_bytes_are_replaced(tmp_path: Path) -> None:
    """Binary junk in a tracked file does not abort the scan."""
    _write(tmp_path, "data.json", b'{"a": "\xff"}')
    record = scan_tree(tmp_path, TrackerConfig()).unwrap()["data.json"]
    assert "\ufffd" in record.content
    assert record.content_hash == hash_bytes(b'{"a": "\xff"}')


def test_default_ignores_prune_dependency_trees(tmp_path: Path) -> None:
    """Ignored directories never appear, wherever they are nested."""
    _write(tmp_path, "app.js", "1")
    _write(tmp_path, "node_modules/lib/index.js", "2")
    _write(tmp_path, "web/node_modules/lib/index.js", "3")
    _write(tmp_path, ".git/config.json", "{}")
    _write(tmp_path, "dist/bundle.js", "4")
    _write(tmp_path, "server.log.md", "5")
    _write(tmp_path, "vendor.min.js", "6")

    inventory = scan_tree(tmp_path, TrackerConfig()).unwrap()

    assert sorted(inventory) == ["app.js", "server.log.md"]


def test_ignored_directory_is_never_listed(tmp_path: Path, monkeypatch: Any) -> None:
    """Pruning happens before descending, not by filtering results."""
    _write(tmp_path, "keep/a.py", "a")
    _write(tmp_path, "skip/deep/b.py", "b")
    listed: list[str] = []
    original = TreeScanner._list

    def spy(directory: Path | str) -> Any:
        listed.append(Path(directory).name)
        return original(directory)

    monkeypatch.setattr(TreeScanner, "_list", staticmethod(spy))
    scanner = TreeScanner(tmp_path, TrackerConfig(), ignore=PatternSet(["skip/"]))

    inventory = scanner.scan().unwrap()

    assert list(inventory) == ["keep/a.py"]
    assert "skip" not in listed and "deep" not in listed


def test_directory_named_like_file_pattern_is_pruned(tmp_path: Path) -> None:
    """`*.tmp` prunes a directory called `a.tmp` during a walk."""
    _write(tmp_path, "a.tmp/notes.md", "n")
    _write(tmp_path, "b/notes.md", "n")
    config = TrackerConfig(ignore_patterns=["*.tmp"])
    assert sorted(scan_tree(tmp_path, config).unwrap()) == ["b/notes.md"]


def test_scan_is_deterministic(tmp_path: Path) -> None:
    """Two scans of an unchanged tree give the same inventory in the same order."""
    for name in ["z.py", "a.py", "m/b.py", "m/a.py", "B.py"]:
        _write(tmp_path, name, name)
    first = scan_tree(tmp_path, TrackerConfig()).unwrap()
    second = scan_tree(tmp_path, TrackerConfig()).unwrap()
    assert list(first) == list(second)
    assert first == second
    assert list(first) == ["B.py", "a.py", "m/a.py", "m/b.py", "z.py"]


def test_missing_root_is_filesystem_failure(tmp_path: Path) -> None:
    """A root that cannot be listed fails the whole scan."""
    result = scan_tree(tmp_path / "nope", TrackerConfig())
    assert result.is_err()
    assert result.unwrap_err().kind is FailureKind.FILESYSTEM


def test_unreadable_entry_is_skipped(tmp_path: Path, monkeypatch: Any) -> None:
    """An I/O error on one directory does not abort the scan."""
    _write(tmp_path, "ok.py", "1")
    _write(tmp_path, "locked/secret.py", "2")
    original = TreeScanner._list

    def flaky(directory: Path | str) -> Any:
        if Path(directory).name == "locked":
            raise PermissionError("denied")
        return original(directory)

    monkeypatch.setattr(TreeScanner, "_list", staticmethod(flaky))
    inventory = TreeScanner(tmp_path, TrackerConfig()).scan().unwrap()
    assert list(inventory) == ["ok.py"]


def test_respect_gitignore_adds_project_rules(tmp_path: Path) -> None:
    """The root `.gitignore` is honoured only when enabled."""
    _write(tmp_path, ".gitignore", "# generated\ngenerated/\n*.snap.json\n")
    _write(tmp_path, "generated/api.ts", "g")
    _write(tmp_path, "ui.snap.json", "{}")
    _write(tmp_path, "main.ts", "m")

    plain = scan_tree(tmp_path, TrackerConfig()).unwrap()
    with_git = scan_tree(tmp_path, TrackerConfig(respect_gitignore=True)).unwrap()

    assert sorted(plain) == ["generated/api.ts", "main.ts", "ui.snap.json"]
    assert sorted(with_git) == ["main.ts"]


def test_file_extension() -> None:
    """Only the final suffix counts; dotfiles have none."""
    assert file_extension("a.test.ts") == ".ts"
    assert file_extension("Makefile") == ""
    assert file_extension(".env") == ""


def test_gitignore_negation_uses_git_semantics(tmp_path: Path) -> None:
    """`!rule` in `.gitignore` re-includes a file."""
    _write(tmp_path, ".gitignore", "*.json\n!keep.json\n")
    _write(tmp_path, "keep.json", "{}")
    _write(tmp_path, "drop.json", "{}")
    inventory = scan_tree(tmp_path, TrackerConfig(respect_gitignore=True)).unwrap()
    assert list(inventory) == ["keep.json"]


def test_reserved_directory_is_pruned_without_ignore_rules(tmp_path: Path) -> None:
    """The state dir stays out even when the config ignores nothing."""
    _write(tmp_path, ".tracker/credentials.json", '{"api_key": "secret"}')
    _write(tmp_path, ".tracker/cache/last_snapshot.json", "{}")
    _write(tmp_path, "app.json", "{}")
    config = TrackerConfig(ignore_patterns=[])

    plain = scan_tree(tmp_path, config).unwrap()
    reserved = scan_tree(tmp_path, config, reserved=[tmp_path / ".tracker"]).unwrap()

    assert ".tracker/credentials.json" in plain
    assert list(reserved) == ["app.json"]


def test_reserved_paths_are_made_relative(tmp_path: Path) -> None:
    """Absolute paths inside the root become relative; outside ones are dropped."""
    paths = [tmp_path / ".codetracker", "nested/state/", tmp_path.parent / "elsewhere"]
    assert reserved_relpaths(tmp_path, paths) == frozenset({".codetracker", "nested/state"})
