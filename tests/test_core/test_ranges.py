from __future__ import annotations

import pytest
from semantic_version import Version

from regkeeper.core.ranges import Bound, Interval, parse_range


def _intervals(text: str) -> list:
    parsed = parse_range(text)
    assert parsed is not None, text
    return [str(interval) for interval in parsed.intervals]


@pytest.mark.unit
class TestDesugaring:
    """npm range sugar expands to the same intervals node-semver uses."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("^1.2.3", ">=1.2.3 <2.0.0-0"),
            ("^0.2.3", ">=0.2.3 <0.3.0-0"),
            ("^0.0.3", ">=0.0.3 <0.0.4-0"),
            ("^1.2", ">=1.2.0 <2.0.0-0"),
            ("^0.2", ">=0.2.0 <0.3.0-0"),
            ("^1", ">=1.0.0 <2.0.0-0"),
            ("~1.2.3", ">=1.2.3 <1.3.0-0"),
            ("~>1.2.3", ">=1.2.3 <1.3.0-0"),
            ("~1.2", ">=1.2.0 <1.3.0-0"),
            ("~1", ">=1.0.0 <2.0.0-0"),
            ("1.x", ">=1.0.0 <2.0.0-0"),
            ("1.2.X", ">=1.2.0 <1.3.0-0"),
            ("1.2.3", ">=1.2.3 <=1.2.3"),
            ("=1.2.3", ">=1.2.3 <=1.2.3"),
            (">1.2", ">=1.3.0"),
            (">1", ">=2.0.0"),
            (">1.2.3", ">1.2.3"),
            ("<1.2", "<1.2.0-0"),
            ("<1.2.3", "<1.2.3-0"),
            ("<1.2.3-beta", "<1.2.3-beta"),
            ("<=1.2", "<1.3.0-0"),
            ("<=1.2.3", "<=1.2.3"),
            (">= 1.0.0", ">=1.0.0"),
            (">=1.0.0 <2.0.0", ">=1.0.0 <2.0.0-0"),
            ("1.2 - 2.3.4", ">=1.2.0 <=2.3.4"),
            ("1.2.3 - 2.3", ">=1.2.3 <2.4.0-0"),
            ("1.2.3 - 2", ">=1.2.3 <3.0.0-0"),
            ("v1.2.3", ">=1.2.3 <=1.2.3"),
        ],
    )
    def test_desugars(self, text: str, expected: str) -> None:
        assert _intervals(text) == [expected]

    @pytest.mark.parametrize("text", ["*", "x", "", ">=*", "<=*", "  "])
    def test_any(self, text: str) -> None:
        assert _intervals(text) == [">=0.0.0"]

    def test_union_keeps_each_set(self) -> None:
        assert _intervals("^1.0.0 || ^0.25.0") == [
            ">=0.25.0 <0.26.0-0",
            ">=1.0.0 <2.0.0-0",
        ]

    def test_overlapping_sets_are_merged(self) -> None:
        assert _intervals("^1.0.0 || >=1.5.0 <3.0.0") == [">=1.0.0 <3.0.0-0"]
        assert _intervals("<1.0.0 || >=1.0.0-0") == ["*"]

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("^2.0.0-beta.1", ">=2.0.0-beta.1 <3.0.0-0"),
            (">=1.0.0-rc.1 <2.0.0", ">=1.0.0-rc.1 <2.0.0-0"),
            (">1.0.0-rc.1", ">1.0.0-rc.1"),
            ("<2.0.0-beta", "<2.0.0-beta"),
        ],
    )
    def test_prerelease_comparators(self, text: str, expected: str) -> None:
        assert _intervals(text) == [expected]

    def test_extra_whitespace(self) -> None:
        assert _intervals(">=  1.0.0    <2.0.0") == [">=1.0.0 <2.0.0-0"]

    def test_build_metadata_is_ignored(self) -> None:
        assert _intervals("1.2.3+build.7") == [">=1.2.3 <=1.2.3"]


@pytest.mark.unit
class TestParseRange:
    """Validity and emptiness."""

    @pytest.mark.parametrize(
        "text",
        [
            "not-a-range",
            "^",
            "1.2.3.4",
            ">=abc",
            "1.x.3-beta",
            "~latest",
            "1.0.0 - ",
            ">1.0.0 - 2.0.0",
            "1.0.0 - 2.0.0 - 3.0.0",
            "foo - bar",
        ],
    )
    def test_invalid_returns_none(self, text: str) -> None:
        assert parse_range(text) is None

    def test_non_string_returns_none(self) -> None:
        assert parse_range(None) is None  # type: ignore[arg-type]
        assert parse_range(1) is None  # type: ignore[arg-type]

    def test_unsatisfiable_range_is_empty(self) -> None:
        parsed = parse_range(">2.0.0 <1.0.0")

        assert parsed is not None
        assert parsed.is_empty
        assert parsed.lowest() is None

    def test_wildcard_exclusions_are_empty(self) -> None:
        assert parse_range("<*").is_empty
        assert parse_range(">*").is_empty

    @pytest.mark.parametrize("text", ["<0.0.0", "<0.0.0-0", ">=1.0.0 <*"])
    def test_nothing_below_the_floor(self, text: str) -> None:
        parsed = parse_range(text)

        assert parsed is not None
        assert parsed.is_empty
        assert parsed.lowest() is None

    def test_keeps_raw_text(self) -> None:
        assert parse_range(" ^1.0.0 ").raw == " ^1.0.0 "


@pytest.mark.unit
class TestVersionRange:
    """Membership and lowest admissible version."""

    def test_contains(self) -> None:
        parsed = parse_range("^1.2.3")

        assert parsed.contains(Version("1.2.3"))
        assert parsed.contains(Version("1.99.0"))
        assert not parsed.contains(Version("1.2.2"))
        assert not parsed.contains(Version("2.0.0-alpha"))
        assert not parsed.contains(Version("2.0.0"))

    def test_exclusive_upper_without_prerelease_excludes_prereleases(self) -> None:
        parsed = parse_range("<2.0.0")

        assert parsed.contains(Version("1.9.9"))
        assert not parsed.contains(Version("2.0.0-rc.1"))

    def test_lowest_unbounded(self) -> None:
        assert parse_range("<2.0.0").lowest() == Version("0.0.0-0")

    def test_lowest_of_union(self) -> None:
        assert parse_range("^2.0.0 || ^1.1.0").lowest() == Version("1.1.0")


@pytest.mark.unit
class TestInterval:
    """Interval arithmetic."""

    def test_unbounded_is_never_empty(self) -> None:
        assert not Interval().is_empty

    def test_upper_bound_at_floor_is_empty(self) -> None:
        assert Interval(upper=Bound(Version("0.0.0-0"), False)).is_empty
        assert not Interval(upper=Bound(Version("0.0.0-0"), True)).is_empty

    def test_point_interval(self) -> None:
        point = Interval(Bound(Version("1.0.0"), True), Bound(Version("1.0.0"), True))
        assert not point.is_empty
        assert point.contains(Version("1.0.0"))

    def test_half_open_point_is_empty(self) -> None:
        interval = Interval(Bound(Version("1.0.0"), True), Bound(Version("1.0.0"), False))
        assert interval.is_empty

    def test_intersection_takes_tighter_bounds(self) -> None:
        a = Interval(Bound(Version("1.0.0"), True), Bound(Version("3.0.0"), False))
        b = Interval(Bound(Version("2.0.0"), False), None)

        result = a.intersect(b)

        assert str(result) == ">2.0.0 <3.0.0"

    def test_touching_bounds_overlap_only_if_both_inclusive(self) -> None:
        a = Interval(upper=Bound(Version("2.0.0"), True))
        b = Interval(lower=Bound(Version("2.0.0"), True))
        c = Interval(lower=Bound(Version("2.0.0"), False))

        assert a.overlaps(b)
        assert not a.overlaps(c)

    def test_joins_adjacent_intervals(self) -> None:
        a = Interval(upper=Bound(Version("2.0.0"), False))
        b = Interval(lower=Bound(Version("2.0.0"), True))
        c = Interval(lower=Bound(Version("2.0.0"), False))

        assert a.joins(b)
        assert not a.joins(c)
        assert str(a.hull(b)) == "*"
