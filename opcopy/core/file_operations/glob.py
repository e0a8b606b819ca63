"""Glob pattern analysis and matching."""

import re
from dataclasses import dataclass

from wcmatch import glob as wcglob

from opcopy.core.errors import ErrorKind, StorageError

from .paths import SEPARATOR


GLOB_CHARS = frozenset("*?[{")

# `*` and `?` stay inside one segment, `**` spans segments, braces expand.
MATCH_FLAGS = wcglob.GLOBSTAR | wcglob.BRACE | wcglob.DOTGLOB | wcglob.FORCEUNIX


def has_glob(s: str) -> bool:
    """True iff the string contains any of ``*``, ``?``, ``[`` or ``{``."""
    return any(c in GLOB_CHARS for c in s)


def split(pattern: str) -> tuple[str, str] | None:
    """Split a pattern into its literal base and the remaining pattern.

    Args:
        pattern: Normalized glob pattern

    Returns:
        ``(base, remainder)`` where ``remainder`` starts at the first segment
        holding a glob character, or None if the pattern has no glob segment
    """
    segments = pattern.split(SEPARATOR)
    for index, segment in enumerate(segments):
        if has_glob(segment):
            return (
                SEPARATOR.join(segments[:index]),
                SEPARATOR.join(segments[index:]),
            )
    return None


def literal_prefix(pattern: str) -> str | None:
    """Leading glob-free segments of a pattern, or None if it has no glob."""
    parts = split(pattern)
    if parts is None:
        return None
    return parts[0]


@dataclass(frozen=True)
class GlobPattern:
    """Compiled matcher for one glob pattern plus its literal prefix."""

    pattern: str
    prefix: str
    _include: tuple[re.Pattern[str], ...]
    _exclude: tuple[re.Pattern[str], ...]

    def matches(self, path: str) -> bool:
        """Whether a complete entry path matches the pattern."""
        if not any(regex.fullmatch(path) for regex in self._include):
            return False
        return not any(regex.fullmatch(path) for regex in self._exclude)


def compile_glob(pattern: str) -> GlobPattern:
    """Compile a glob pattern.

    Args:
        pattern: Normalized glob pattern

    Returns:
        Compiled pattern

    Raises:
        StorageError: Unexpected if the pattern is malformed
    """
    try:
        include, exclude = wcglob.translate(pattern, flags=MATCH_FLAGS)
        compiled_include = tuple(re.compile(regex) for regex in include)
        compiled_exclude = tuple(re.compile(regex) for regex in exclude)
    except Exception as e:
        # Includes wcmatch's pattern limit error, which it does not export
        raise StorageError(
            ErrorKind.UNEXPECTED,
            f"Invalid glob pattern: {e}",
            {"operation": "compile_glob", "pattern": pattern},
        ) from e

    return GlobPattern(
        pattern=pattern,
        prefix=literal_prefix(pattern) or "",
        _include=compiled_include,
        _exclude=compiled_exclude,
    )
