"""
Version parsing helpers for regkeeper.

npm-style semantic versions are parsed into :class:`semantic_version.Version`
objects. Parsing follows npm's ``semver.clean``: surrounding whitespace
and leading ``=``/``v`` characters are dropped, and so is build metadata,
which has no bearing on precedence.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from semantic_version import Version


def make_version(
    major: int,
    minor: int = 0,
    patch: int = 0,
    prerelease: Iterable[str] = (),
) -> Version:
    """Build a :class:`Version` from its components."""
    return Version(
        major=major,
        minor=minor,
        patch=patch,
        prerelease=tuple(prerelease),
    )


def version_floor(major: int, minor: int = 0, patch: int = 0) -> Version:
    """Return the lowest version of a release line, ``M.m.p-0``.

    Every pre-release of ``M.m.p`` sorts at or above it, and every earlier
    release sorts below it.
    """
    return make_version(major, minor, patch, ("0",))


def parse_version(raw: Any) -> Optional[Version]:
    """Parse ``raw`` as a semantic version, or return ``None``.

    Never raises; non-strings and malformed text yield ``None``.

    Examples:
        >>> str(parse_version(" v1.2.3-beta.1+sha.5 "))
        '1.2.3-beta.1'
        >>> parse_version("1.2") is None
        True
    """
    if not isinstance(raw, str):
        return None

    text = raw.strip().lstrip("=v").strip()
    try:
        version = Version(text)
    except ValueError:
        # partial versions, leading zeroes, empty identifiers
        return None
    return version.truncate("prerelease")


def clean_version(raw: Any) -> Optional[str]:
    """Return the canonical string form of ``raw``, or ``None`` if invalid."""
    parsed = parse_version(raw)
    return str(parsed) if parsed is not None else None


def is_prerelease(version: Version) -> bool:
    return bool(version.prerelease)
