"""Semver comparison utilities."""

from __future__ import annotations

from typing import Iterable

from packaging.version import InvalidVersion, Version


def parse_version(v: str) -> Version | None:
    """Parse a version string, returning None on failure."""
    try:
        return Version(v)
    except InvalidVersion:
        # Try stripping leading 'v'
        if v.startswith("v"):
            try:
                return Version(v[1:])
            except InvalidVersion:
                pass
    return None


def latest_version(versions: Iterable[str]) -> str | None:
    """Return the highest parseable version, or None if none parse."""
    best: str | None = None
    best_parsed: Version | None = None
    for v in versions:
        parsed = parse_version(v)
        if parsed is None:
            continue
        if best_parsed is None or parsed > best_parsed:
            best, best_parsed = v, parsed
    return best
