"""CLI helper utilities."""

from .location import Location, parse_location


__all__ = ["Location", "parse_location"]
