"""gitignore-style path matching.

Each pattern is translated once into a fully anchored regular expression and
then evaluated against ``/``-separated paths relative to the project root.

Supported syntax
----------------
- ``*``      any run of characters except ``/``
- ``?``      exactly one character except ``/``
- ``**/``    at the start of a segment: zero or more whole segments, so
             ``**/foo`` also matches a top-level ``foo`` (same for ``a/**/b``)
- ``**``     trailing: the rest of the path, separators included
- ``name/``  trailing slash: directory-only rule
- ``/name``  leading slash: anchored to the root

Everything else is literal; regex metacharacters are escaped. There is no
negation (``!``) and no character classes (``[abc]`` matches literally).

Matching rules
--------------
- Pattern without ``/``: matches the basename. A wildcard-free pattern also
  matches any intermediate segment, so ``node_modules`` excludes
  ``src/node_modules/x.js`` while ``*.tmp`` does not match ``a.tmp/notes.txt``
  when asked about the file alone. The scanner tests every directory on the
  way down, so ``a.tmp/`` is still pruned during a walk.
- Pattern with an internal ``/``: matches the full relative path.
- Directory-only pattern: matches when the path itself (if it is a directory)
  or any of its ancestors matches the body. A plain file with the same name
  never matches.

Examples
--------
>>> compile_pattern("node_modules").matches("src/node_modules/x.js")
True
>>> compile_pattern("*.log").matches("logs/app.log.bak")
False
>>> compile_pattern("dist/").matches("dist", is_dir=False)
False
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

_WILDCARDS = frozenset("*?")


def normalize_path(path: str) -> str:
    """Return ``path`` with ``/`` separators and no leading ``./`` or ``/``."""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path.strip("/")


def translate(body: str) -> str:
    """Translate a pattern body (no trailing ``/``) into a regex source string.

    The result is meant for ``re.fullmatch``; it carries no anchors itself.
    """
    out: list[str] = []
    i = 0
    n = len(body)
    while i < n:
        c = body[i]
        if c == "*":
            if body.startswith("**", i):
                seg_start = i == 0 or body[i - 1] == "/"
                after = i + 2
                if seg_start and after < n and body[after] == "/":
                    # "**/" : zero or more leading segments
                    out.append("(?:.*/)?")
                    i = after + 1
                    continue
                # trailing "**", or "**" glued to other text: any run
                out.append(".*")
                i = after
                continue
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)


@dataclass(frozen=True, slots=True)
class PathMatcher:
    """One compiled ignore rule.

    Attributes
    ----------
    pattern : str
        The rule as written in the configuration.
    regex : re.Pattern[str]
        Compiled body, evaluated with ``fullmatch``.
    dir_only : bool
        Rule had a trailing ``/``.
    anchored : bool
        Rule contains a ``/`` in its body and matches full paths.
    literal : bool
        Rule has no wildcard characters.
    """

    pattern: str
    regex: re.Pattern[str]
    dir_only: bool
    anchored: bool
    literal: bool

    def matches(
        self,
        relative_path: str,
        basename: str | None = None,
        *,
        is_dir: bool = False,
    ) -> bool:
        """Return True if this rule excludes ``relative_path``.

        Parameters
        ----------
        relative_path : str
            Path relative to the scan root (either separator accepted).
        basename : str | None
            Final path segment; derived from ``relative_path`` when omitted.
        is_dir : bool
            Whether the path names a directory. Directory-only rules never
            match a plain file, and directory paths are also tested with a
            trailing ``/`` so ``foo/**`` excludes ``foo`` itself.
        """
        path = normalize_path(relative_path)
        if not path:
            return False
        segments = path.split("/")
        if basename is None:
            basename = segments[-1]

        if self.dir_only:
            # the directories on this path: every ancestor, plus the path itself
            dir_count = len(segments) if is_dir else len(segments) - 1
            if self.anchored:
                return any(
                    self.regex.fullmatch("/".join(segments[: k + 1])) for k in range(dir_count)
                )
            return any(self.regex.fullmatch(seg) for seg in segments[:dir_count])

        if self.anchored:
            if self.regex.fullmatch(path):
                return True
            return is_dir and self.regex.fullmatch(path + "/") is not None

        if self.regex.fullmatch(basename):
            return True
        if self.literal:
            return any(self.regex.fullmatch(seg) for seg in segments[:-1])
        return False


def compile_pattern(pattern: str) -> PathMatcher:
    """Compile one gitignore-style rule.

    Raises
    ------
    ValueError
        If the rule is empty once surrounding whitespace and slashes are removed.
    """
    raw = pattern.strip()
    dir_only = raw.endswith("/")
    body = raw.rstrip("/")
    anchored = body.startswith("/") or "/" in body.lstrip("/")
    body = body.lstrip("/")
    if not body:
        raise ValueError(f"empty ignore pattern: {pattern!r}")
    return PathMatcher(
        pattern=pattern,
        regex=re.compile(translate(body), flags=re.DOTALL),
        dir_only=dir_only,
        anchored=anchored,
        literal=not (_WILDCARDS & set(body)),
    )


class PatternSet:
    """An ordered collection of compiled ignore rules.

    Blank entries and ``#`` comments are skipped, so the lines of a
    ``.gitignore`` file can be fed in directly.
    """

    __slots__ = ("_matchers",)

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        matchers: list[PathMatcher] = []
        for raw in patterns:
            line = raw.strip()
            if not line or line.startswith("#") or not line.strip("/"):
                continue
            matchers.append(compile_pattern(line))
        self._matchers: tuple[PathMatcher, ...] = tuple(matchers)

    @property
    def matchers(self) -> tuple[PathMatcher, ...]:
        return self._matchers

    def is_ignored(self, relative_path: str, *, is_dir: bool = False) -> bool:
        """Return True if any rule excludes ``relative_path``."""
        path = normalize_path(relative_path)
        basename = path.rsplit("/", 1)[-1]
        return any(m.matches(path, basename, is_dir=is_dir) for m in self._matchers)

    def __len__(self) -> int:
        return len(self._matchers)


def compile_patterns(patterns: Iterable[str]) -> PatternSet:
    """Compile a list of rules into a :class:`PatternSet`."""
    return PatternSet(patterns)


__all__ = [
    "PathMatcher",
    "PatternSet",
    "compile_pattern",
    "compile_patterns",
    "normalize_path",
    "translate",
]
