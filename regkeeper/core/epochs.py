"""
Epoch band classification for dependency ranges.

An epoch ``N`` is the major-version band ``[N.0.0, N+1.0.0)`` of the
platform core. Pre-releases belong to the band of their major, so the band
is evaluated as the interval ``[N.0.0-0, (N+1).0.0-0)``.

Nothing in this module raises for bad input: URL, path, alias and
workspace ranges, malformed text and non-strings all classify as unknown
(``None``) and intersect nothing.
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional

from regkeeper.constants import NON_SEMANTIC_RANGE_PREFIXES
from regkeeper.core.ranges import Bound, Interval, parse_range
from regkeeper.utils.version_utils import clean_version, version_floor

_LATEST = "latest"

# Single exact/caret/tilde comparator anchored to one major line.
_ANCHORED_RANGE = re.compile(r"^[\^~]?(\d+)\.\S*$")


def epoch_band(epoch: int) -> Interval:
    """Return the version interval covered by ``epoch``."""
    return Interval(
        lower=Bound(version_floor(epoch), True),
        upper=Bound(version_floor(epoch + 1), False),
    )


def normalize_range(raw: Any) -> Optional[str]:
    """Normalize a dependency range, or return ``None`` if undecidable.

    - ``"latest"`` becomes ``">=0.0.0"``;
    - an exact version ``V`` becomes ``">=V"`` (a package pinned to one
      core release keeps working with later ones as far as the band test
      is concerned);
    - URL, git, path, ``file:``, ``link:``, ``npm:`` and ``workspace:``
      ranges are undecidable;
    - anything else is returned trimmed if it parses as an npm range.

    Examples:
        >>> normalize_range(" 1.2.3 ")
        '>=1.2.3'
        >>> normalize_range("workspace:*") is None
        True
    """
    if not isinstance(raw, str):
        return None

    trimmed = raw.strip()
    if not trimmed:
        return None

    if trimmed == _LATEST:
        return ">=0.0.0"

    exact = clean_version(trimmed)
    if exact is not None:
        return f">={exact}"

    if trimmed.startswith(tuple(NON_SEMANTIC_RANGE_PREFIXES)):
        return None

    if parse_range(trimmed) is None:
        return None
    return trimmed


def intersects_epoch(raw: Any, epoch: int) -> bool:
    """True if some version admitted by ``raw`` lies in ``epoch``'s band."""
    normalized = normalize_range(raw)
    if normalized is None:
        return False

    parsed = parse_range(normalized)
    if parsed is None:
        return False
    return parsed.overlaps(epoch_band(epoch))


def classify(raw: Any) -> Optional[int]:
    """Return the lowest epoch ``raw`` can satisfy, or ``None`` if unknown.

    Examples:
        >>> classify("^0.25.6")
        0
        >>> classify(">=1.0.0 <3.0.0")
        1
        >>> classify("git+https://example.com/x.git") is None
        True
    """
    normalized = normalize_range(raw)
    if normalized is None:
        return None

    parsed = parse_range(normalized)
    if parsed is None:
        return None

    lowest = parsed.lowest()
    if lowest is None:
        return None
    return int(lowest.major)


def dominant_epoch(raw: Any) -> Optional[int]:
    """Return the epoch a range is unambiguously anchored to, if any.

    Only a single exact, caret or tilde comparator (``1.2.3``, ``^1.2.3``,
    ``~1.2``) has a dominant epoch. Inequalities, unions, ``latest`` and
    undecidable ranges return ``None``.
    """
    if not isinstance(raw, str):
        return None

    trimmed = raw.strip()
    match = _ANCHORED_RANGE.match(trimmed)
    if match is None or normalize_range(trimmed) is None:
        return None
    return int(match.group(1))


def supported_epochs(raw: Any, epochs: Iterable[int]) -> List[int]:
    """Return the members of ``epochs`` whose band ``raw`` intersects."""
    return [epoch for epoch in epochs if intersects_epoch(raw, epoch)]
