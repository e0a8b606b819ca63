"""Parse command-line locations.

A location is either ``<profile>:<path>``, selecting a configured profile, or
a plain local path. Relative local paths are resolved against the current
directory; a trailing ``/`` is kept so that it still marks a directory.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Location:
    """Where a CLI argument points.

    Attributes:
        path: Path on the selected operator
        profile: Profile name, or None for the local filesystem
    """

    path: str
    profile: str | None = None

    @property
    def is_local(self) -> bool:
        return self.profile is None

    def __str__(self) -> str:
        if self.profile is None:
            return f"/{self.path}"
        return f"{self.profile}:{self.path}"


def _is_profile_name(name: str) -> bool:
    # A single letter is a drive, not a profile
    return len(name) > 1 and "/" not in name and "\\" not in name


def parse_location(text: str, cwd: Path | None = None) -> Location:
    """Parse a CLI location argument.

    Args:
        text: ``<profile>:<path>`` or a local path
        cwd: Directory relative local paths are resolved against

    Returns:
        Location; local paths are absolute, without their leading ``/``
    """
    name, separator, path = text.partition(":")
    if separator and _is_profile_name(name):
        return Location(path=path, profile=name)

    local_path = Path(text).expanduser()
    if not local_path.is_absolute():
        local_path = (cwd or Path.cwd()) / local_path

    resolved = local_path.as_posix().lstrip("/")
    if text.endswith("/") and resolved and not resolved.endswith("/"):
        resolved += "/"
    return Location(path=resolved)
