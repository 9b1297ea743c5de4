"""Glob matching for check triggers."""
from __future__ import annotations

from pathlib import PurePath

import pathspec


class InvalidPatternError(ValueError):
    """Raised when a trigger pattern cannot be compiled."""

    def __init__(self, pattern: str):
        super().__init__(f"Invalid glob pattern '{pattern}'")
        self.pattern = pattern


def _has_unclosed_class(pattern: str) -> bool:
    i = 0
    while i < len(pattern):
        if pattern[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < len(pattern) and pattern[j] in "!^":
            j += 1
        # A ']' right after the opening bracket is a literal member.
        if j < len(pattern) and pattern[j] == "]":
            j += 1
        close = pattern.find("]", j)
        # Classes cannot span path segments.
        if close == -1 or "/" in pattern[i:close]:
            return True
        i = close + 1
    return False


def _has_loose_globstar(pattern: str) -> bool:
    if "***" in pattern:
        return True
    start = pattern.find("**")
    while start != -1:
        end = start + 2
        if start > 0 and pattern[start - 1] != "/":
            return True
        if end < len(pattern) and pattern[end] != "/":
            return True
        start = pattern.find("**", end)
    return False


def _check_syntax(pattern: str) -> None:
    """Reject patterns that gitignore syntax would accept but read differently.

    A leading ``!`` negates and a leading ``#`` is a comment, so either would
    compile into a pattern that never matches.
    """
    if not pattern.strip() or pattern[0] in "!#":
        raise InvalidPatternError(pattern)
    if _has_unclosed_class(pattern) or _has_loose_globstar(pattern):
        raise InvalidPatternError(pattern)


class GlobPattern:
    """A compiled gitignore-style pattern.

    A path matches when the pattern matches the path as given, or when it
    matches the bare file name. Trigger patterns are often filename-only
    (``*.rs``) while changed-file entries carry directory prefixes. A
    single ``*`` stays within one path segment; ``**`` crosses directories.
    """

    def __init__(self, pattern: str):
        self.pattern = pattern
        _check_syntax(pattern)
        try:
            self._spec = pathspec.PathSpec.from_lines("gitignore", [pattern])
        except ValueError as e:
            raise InvalidPatternError(pattern) from e

    def matches(self, path: str) -> bool:
        if self._spec.match_file(path):
            return True
        name = PurePath(path).name
        return bool(name) and self._spec.match_file(name)

    def __repr__(self) -> str:
        return f"GlobPattern({self.pattern!r})"


def compile_pattern(pattern: str) -> GlobPattern:
    """Compile a trigger pattern, raising InvalidPatternError on bad syntax."""
    return GlobPattern(pattern)
