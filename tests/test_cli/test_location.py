"""Tests for CLI location parsing."""

from pathlib import Path

from opcopy.cli.helpers.location import Location, parse_location


class TestParseLocation:
    """Test parse_location."""

    def test_profile_location(self):
        """Test '<profile>:<path>' syntax."""
        location = parse_location("archive:reports/2024/")

        assert location == Location(path="reports/2024/", profile="archive")
        assert not location.is_local
        assert str(location) == "archive:reports/2024/"

    def test_profile_root(self):
        """Test a profile with an empty path."""
        assert parse_location("archive:") == Location(path="", profile="archive")

    def test_absolute_local_path(self):
        """Test that absolute paths lose only their leading separator."""
        location = parse_location("/var/data/file.txt")

        assert location == Location(path="var/data/file.txt")
        assert location.is_local
        assert str(location) == "/var/data/file.txt"

    def test_relative_local_path(self):
        """Test that relative paths resolve against the given directory."""
        location = parse_location("data/file.txt", cwd=Path("/home/user"))

        assert location.path == "home/user/data/file.txt"

    def test_trailing_separator_kept(self):
        """Test that the directory marker survives resolution."""
        assert parse_location("out/", cwd=Path("/work")).path == "work/out/"
        assert parse_location("/srv/out/").path == "srv/out/"

    def test_local_path_with_colon_in_directory(self):
        """Test that a colon after a separator is part of a local path."""
        location = parse_location("./a:b", cwd=Path("/work"))

        assert location.is_local
        assert location.path == "work/a:b"

    def test_glob_kept(self):
        """Test that glob characters are passed through."""
        location = parse_location("logs/**/*.log", cwd=Path("/work"))

        assert location.path == "work/logs/**/*.log"
