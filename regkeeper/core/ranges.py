"""npm dependency-range parsing for regkeeper.

The grammar itself (unions, comparator sets, X-ranges, tilde, caret and
hyphen ranges) is handled by :class:`semantic_version.NpmSpec`. This module
turns the resulting clause tree into a union of :class:`Interval` objects,
which makes intersection with an epoch band an exact test.

Two adjustments are made on the way:

- an exclusive upper bound ``<V`` where ``V`` has no pre-release tag
  becomes ``<V-0``, so ``<2.0.0`` excludes ``2.0.0-alpha`` the same way
  caret and tilde upper bounds do;
- intervals that overlap or touch are merged, so the pre-release and
  release branches NpmSpec produces for one comparator set collapse back
  into a single interval.

Otherwise pre-releases are ordinary points on the line.

Example::

    >>> r = parse_range("^1.2.3")
    >>> [str(i) for i in r.intervals]
    ['>=1.2.3 <2.0.0-0']
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from semantic_version import NpmSpec, Version
from semantic_version.base import AllOf, AnyOf, Clause, Never, Range

from regkeeper.utils.version_utils import version_floor

__all__ = ["Bound", "Interval", "VersionRange", "parse_range"]

_OPERATOR = re.compile(r"<=|>=|~>|<|>|=|\^|~")
_OPERATOR_GAP = re.compile(r"(<=|>=|~>|<|>|=|\^|~)\s+")
_WILDCARDS = ("*", "x", "X")

#: Comparator set that admits nothing; NpmSpec rejects ``<*`` and ``>*``.
_NOTHING = "<0.0.0-0"


class _InvalidRange(ValueError):
    pass


@dataclass(frozen=True)
class Bound:
    """One end of an interval."""

    version: Version
    inclusive: bool


def _max_lower(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None:
        return b
    if b is None:
        return a
    if a.version != b.version:
        return a if a.version > b.version else b
    return Bound(a.version, a.inclusive and b.inclusive)


def _min_upper(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None:
        return b
    if b is None:
        return a
    if a.version != b.version:
        return a if a.version < b.version else b
    return Bound(a.version, a.inclusive and b.inclusive)


def _min_lower(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None or b is None:
        return None
    if a.version != b.version:
        return a if a.version < b.version else b
    return Bound(a.version, a.inclusive or b.inclusive)


def _max_upper(a: Optional[Bound], b: Optional[Bound]) -> Optional[Bound]:
    if a is None or b is None:
        return None
    if a.version != b.version:
        return a if a.version > b.version else b
    return Bound(a.version, a.inclusive or b.inclusive)


@dataclass(frozen=True)
class Interval:
    """A contiguous set of versions; ``None`` bounds are unbounded."""

    lower: Optional[Bound] = None
    upper: Optional[Bound] = None

    @property
    def is_empty(self) -> bool:
        if self.upper is None:
            return False
        # Nothing sorts below 0.0.0-0
        lower = self.lower or Bound(version_floor(0), True)
        if lower.version < self.upper.version:
            return False
        if lower.version == self.upper.version:
            return not (lower.inclusive and self.upper.inclusive)
        return True

    def intersect(self, other: "Interval") -> "Interval":
        return Interval(
            lower=_max_lower(self.lower, other.lower),
            upper=_min_upper(self.upper, other.upper),
        )

    def overlaps(self, other: "Interval") -> bool:
        return not self.intersect(other).is_empty

    def joins(self, other: "Interval") -> bool:
        """True if ``self`` and ``other`` overlap or touch end to end."""
        if self.overlaps(other):
            return True
        for left, right in ((self, other), (other, self)):
            if left.upper is not None and right.lower is not None:
                if left.upper.version == right.lower.version and (
                    left.upper.inclusive or right.lower.inclusive
                ):
                    return True
        return False

    def hull(self, other: "Interval") -> "Interval":
        return Interval(
            lower=_min_lower(self.lower, other.lower),
            upper=_max_upper(self.upper, other.upper),
        )

    def contains(self, version: Version) -> bool:
        if self.lower is not None:
            if version < self.lower.version:
                return False
            if version == self.lower.version and not self.lower.inclusive:
                return False
        if self.upper is not None:
            if version > self.upper.version:
                return False
            if version == self.upper.version and not self.upper.inclusive:
                return False
        return True

    @property
    def lowest(self) -> Version:
        """The lower bound's version, or ``0.0.0-0`` when unbounded."""
        return self.lower.version if self.lower is not None else version_floor(0)

    def __str__(self) -> str:
        parts = []
        if self.lower is not None:
            parts.append(f"{'>=' if self.lower.inclusive else '>'}{self.lower.version}")
        if self.upper is not None:
            parts.append(f"{'<=' if self.upper.inclusive else '<'}{self.upper.version}")
        return " ".join(parts) or "*"


@dataclass(frozen=True)
class VersionRange:
    """A parsed range: the union of its non-empty intervals."""

    raw: str
    intervals: Tuple[Interval, ...]

    def overlaps(self, other: Interval) -> bool:
        return any(interval.overlaps(other) for interval in self.intervals)

    def contains(self, version: Version) -> bool:
        return any(interval.contains(version) for interval in self.intervals)

    @property
    def is_empty(self) -> bool:
        return not self.intervals

    def lowest(self) -> Optional[Version]:
        """Lowest admissible version bound, or ``None`` for an empty range."""
        if not self.intervals:
            return None
        return min(interval.lowest for interval in self.intervals)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _clean_token(token: str) -> str:
    """Bring one comparator into the form NpmSpec accepts."""
    match = _OPERATOR.match(token)
    op = match.group() if match is not None else ""
    version = token[len(op):].lstrip("v=")

    if version in _WILDCARDS:
        if op in ("<", ">"):
            return _NOTHING
        if op == "<=":
            return version
    return ("~" if op == "~>" else op) + version


def _clean_set(text: str) -> str:
    """Normalize one ``||``-separated comparator set.

    Whitespace after operators is dropped, runs of whitespace collapse to
    one space and hyphen ranges must have plain versions on both sides.
    """
    tokens = [_clean_token(token) for token in _OPERATOR_GAP.sub(r"\1", text).split()]

    if "-" in tokens:
        if len(tokens) != 3 or tokens[1] != "-":
            raise _InvalidRange(text)
        for bound in (tokens[0], tokens[2]):
            if _OPERATOR.match(bound) or not NpmSpec.Parser.NPM_SPEC_BLOCK.match(bound):
                raise _InvalidRange(text)

    return " ".join(tokens)


def _bound_interval(matcher: Range) -> Interval:
    """Interval admitted by a single NpmSpec comparator."""
    target = matcher.target.truncate("prerelease")
    floor = version_floor(target.major, target.minor, target.patch)

    if matcher.operator == Range.OP_EQ:
        return Interval(Bound(target, True), Bound(target, True))
    if matcher.operator == Range.OP_GT:
        return Interval(lower=Bound(target, False))
    if matcher.operator == Range.OP_GTE:
        # Lower bounds NpmSpec adds for a pre-release comparator cover the
        # pre-releases of that line too
        if matcher.prerelease_policy == Range.PRERELEASE_ALWAYS and not target.prerelease:
            return Interval(lower=Bound(floor, True))
        return Interval(lower=Bound(target, True))
    if matcher.operator == Range.OP_LT:
        return Interval(upper=Bound(target if target.prerelease else floor, False))
    if matcher.operator == Range.OP_LTE:
        return Interval(upper=Bound(target, True))
    raise _InvalidRange(str(matcher))


def _clause_interval(clause: Clause) -> Interval:
    if isinstance(clause, AllOf):
        result = Interval()
        for item in clause:
            result = result.intersect(_clause_interval(item))
        return result
    if isinstance(clause, Range):
        return _bound_interval(clause)
    raise _InvalidRange(repr(clause))


def _clause_intervals(clause: Clause) -> Iterator[Interval]:
    if isinstance(clause, AnyOf):
        for item in clause:
            yield from _clause_intervals(item)
    elif not isinstance(clause, Never):
        yield _clause_interval(clause)


def _union(intervals: Iterable[Interval]) -> Tuple[Interval, ...]:
    """Drop empty intervals and merge the rest into sorted disjoint ones."""
    merged: List[Interval] = []
    for interval in sorted(
        (i for i in intervals if not i.is_empty), key=lambda i: i.lowest
    ):
        if merged and merged[-1].joins(interval):
            merged[-1] = merged[-1].hull(interval)
        else:
            merged.append(interval)
    return tuple(merged)


def parse_range(text: str) -> Optional[VersionRange]:
    """Parse an npm range string.

    Returns:
        The parsed :class:`VersionRange`, or ``None`` when ``text`` is not a
        valid range. A valid range that admits no version parses to an
        empty :class:`VersionRange`.
    """
    if not isinstance(text, str):
        return None

    try:
        expression = " || ".join(_clean_set(group) for group in text.split("||"))
        clause = NpmSpec(expression).clause
        intervals = _union(_clause_intervals(clause))
    except ValueError:
        # _InvalidRange, or NpmSpec rejecting the expression
        return None

    return VersionRange(raw=text, intervals=intervals)
