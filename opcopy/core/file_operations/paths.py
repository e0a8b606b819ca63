"""Root-relative path helpers shared by every storage backend.

A normalized path has no leading separator, no ``.``/``..`` segments, no
repeated separators, and a trailing ``/`` only when it denotes a directory.
The empty string is the root. Glob metacharacters are never touched.
"""

SEPARATOR = "/"


def normalize(path: str) -> str:
    """Canonicalize a path string.

    ``..`` segments that would climb above the root are dropped, so
    ``normalize("../a") == "a"``. The root always normalizes to ``""``.

    Args:
        path: Path to normalize

    Returns:
        Normalized path
    """
    is_dir = path.endswith(SEPARATOR)

    segments: list[str] = []
    for segment in path.split(SEPARATOR):
        if segment in ("", "."):
            continue
        if segment == "..":
            if segments:
                segments.pop()
            continue
        segments.append(segment)

    normalized = SEPARATOR.join(segments)
    if normalized and is_dir:
        normalized += SEPARATOR
    return normalized


def is_directory_path(path: str) -> bool:
    """Whether the path carries the directory marker (the root counts)."""
    return path == "" or path.endswith(SEPARATOR)


def as_directory(path: str) -> str:
    """Return the path with a trailing separator (the root stays ``""``)."""
    if path == "" or path.endswith(SEPARATOR):
        return path
    return path + SEPARATOR


def filename_of(path: str) -> str | None:
    """Last segment of a file path, or None when the path names no file."""
    if is_directory_path(path):
        return None
    name = path.rsplit(SEPARATOR, 1)[-1]
    if name in (".", ".."):
        return None
    return name


def parent_of(path: str) -> str:
    """Parent directory of a path, in directory form (``""`` for the root)."""
    trimmed = path.rstrip(SEPARATOR)
    if SEPARATOR not in trimmed:
        return ""
    return trimmed.rsplit(SEPARATOR, 1)[0] + SEPARATOR


def join(base: str, relative: str) -> str:
    """Join a relative path onto a base path."""
    if not base:
        return relative
    if not relative:
        return base
    return as_directory(base) + relative.lstrip(SEPARATOR)


def strip_prefix(path: str, prefix: str) -> str | None:
    """Strip a leading directory prefix from a path, segment by segment.

    Args:
        path: Full entry path
        prefix: Directory prefix, with or without trailing separator

    Returns:
        The remainder of the path, or None if ``path`` is not under ``prefix``
    """
    prefix_segments = [segment for segment in prefix.split(SEPARATOR) if segment]
    if not prefix_segments:
        return path

    path_segments = path.split(SEPARATOR)
    if path_segments[: len(prefix_segments)] != prefix_segments:
        return None
    return SEPARATOR.join(path_segments[len(prefix_segments) :])
