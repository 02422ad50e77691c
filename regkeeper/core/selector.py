"""
Representative version selection.

Given the tag names of a repository or the published versions of a
package, pick the one that best represents an epoch: the highest stable
release of that major, else its highest pre-release.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from semantic_version import Version

from regkeeper.utils.version_utils import is_prerelease, parse_version


def select_best(versions: Iterable[str], epoch: int) -> Optional[str]:
    """Select the best version string for ``epoch``.

    Strings that do not parse as versions are ignored. The original string
    is returned, so tag names keep prefixes such as ``v``. Strings that
    parse to the same version are ordered lexicographically, keeping the
    result independent of input order.

    Args:
        versions: Candidate version strings (tags or published versions).
        epoch: Major version to select for.

    Returns:
        The chosen string, or ``None`` if no candidate has major ``epoch``.

    Example:
        >>> select_best(["2.0.0-beta.1", "2.0.0", "1.9.0"], 2)
        '2.0.0'
    """
    stable: List[Tuple[Version, str]] = []
    prerelease: List[Tuple[Version, str]] = []

    for raw in versions:
        parsed = parse_version(raw)
        if parsed is None or parsed.major != epoch:
            continue
        (prerelease if is_prerelease(parsed) else stable).append((parsed, raw))

    pool = stable or prerelease
    if not pool:
        return None

    best_version = max(version for version, _ in pool)
    return max(raw for version, raw in pool if version == best_version)
