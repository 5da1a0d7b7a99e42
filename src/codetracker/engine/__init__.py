"""Snapshot engine: path matching, tree scanning, inventory diffing."""

from __future__ import annotations

from .diff import diff_inventories, summarize
from .patterns import PathMatcher, PatternSet, compile_pattern, compile_patterns
from .scanner import TreeScanner, scan_tree

__all__ = [
    "PathMatcher",
    "PatternSet",
    "compile_pattern",
    "compile_patterns",
    "TreeScanner",
    "scan_tree",
    "diff_inventories",
    "summarize",
]
