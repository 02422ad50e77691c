from __future__ import annotations

import pytest
from semantic_version import Version

from regkeeper.core.epochs import (
    classify,
    dominant_epoch,
    epoch_band,
    intersects_epoch,
    normalize_range,
    supported_epochs,
)


@pytest.mark.unit
class TestNormalizeRange:
    """Tests for normalize_range."""

    def test_latest_accepts_everything(self) -> None:
        assert normalize_range("latest") == ">=0.0.0"

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1.0.0", ">=1.0.0"),
            (" 0.25.6-alpha.1 ", ">=0.25.6-alpha.1"),
            ("v2.1.0", ">=2.1.0"),
            ("=1.2.3+build.5", ">=1.2.3"),
        ],
    )
    def test_exact_version_becomes_lower_bound(self, raw: str, expected: str) -> None:
        assert normalize_range(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "workspace:*",
            "workspace:^1.0.0",
            "file:../core",
            "link:../core",
            "npm:@elizaos/core@^1.0.0",
            "git+https://github.com/elizaos/eliza.git",
            "github:elizaos/eliza",
            "https://example.com/core.tgz",
        ],
    )
    def test_non_semantic_ranges_are_unknown(self, raw: str) -> None:
        assert normalize_range(raw) is None

    @pytest.mark.parametrize("raw", [None, 1, "", "   ", "not-a-range"])
    def test_undecidable_inputs(self, raw: object) -> None:
        assert normalize_range(raw) is None

    def test_valid_range_is_trimmed(self) -> None:
        assert normalize_range("  ^1.0.0  ") == "^1.0.0"


@pytest.mark.unit
class TestEpochBand:
    """Tests for epoch_band."""

    def test_band_includes_own_prereleases(self) -> None:
        band = epoch_band(1)

        assert band.contains(Version("1.0.0-alpha.1"))
        assert band.contains(Version("1.99.99"))
        assert not band.contains(Version("0.99.0"))
        assert not band.contains(Version("2.0.0-alpha.1"))


@pytest.mark.unit
class TestIntersectsEpoch:
    """Tests for intersects_epoch."""

    def test_exact_version_reaches_later_epochs(self) -> None:
        assert not intersects_epoch("1.2.3", 0)
        assert intersects_epoch("1.2.3", 1)
        assert intersects_epoch("1.2.3", 2)

    def test_caret_stays_in_its_epoch(self) -> None:
        assert intersects_epoch("^0.25.6", 0)
        assert not intersects_epoch("^0.25.6", 1)

    def test_prerelease_range(self) -> None:
        assert intersects_epoch("^2.0.0-beta.1", 2)
        assert not intersects_epoch("^2.0.0-beta.1", 1)

    def test_upper_bound_excludes_next_epoch_prereleases(self) -> None:
        assert not intersects_epoch("<2.0.0", 2)
        assert intersects_epoch("<2.0.0", 1)

    def test_prerelease_upper_bound_reaches_its_epoch(self) -> None:
        assert intersects_epoch("<2.0.0-beta", 2)
        assert not intersects_epoch("<2.0.0-beta", 3)

    def test_nothing_below_zero(self) -> None:
        assert supported_epochs("<0.0.0", [0, 1, 2]) == []

    def test_union(self) -> None:
        assert intersects_epoch("^0.1.0 || ^2.0.0", 0)
        assert not intersects_epoch("^0.1.0 || ^2.0.0", 1)
        assert intersects_epoch("^0.1.0 || ^2.0.0", 2)

    def test_unknown_range_intersects_nothing(self) -> None:
        for epoch in (0, 1, 2):
            assert not intersects_epoch("workspace:*", epoch)
            assert not intersects_epoch(None, epoch)

    def test_latest_intersects_everything(self) -> None:
        assert supported_epochs("latest", [0, 1, 2]) == [0, 1, 2]


@pytest.mark.unit
class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("^0.25.6", 0),
            ("1.2.3", 1),
            ("^1.0.0", 1),
            (">=1.0.0 <3.0.0", 1),
            ("~2.1", 2),
            ("2.0.0-beta.3", 2),
            ("<2.0.0", 0),
            ("latest", 0),
            ("*", 0),
            ("^2.0.0 || ^1.4.0", 1),
        ],
    )
    def test_lowest_satisfiable_epoch(self, raw: str, expected: int) -> None:
        assert classify(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["workspace:*", "file:../core", "garbage", "", None, ">2.0.0 <1.0.0", "<0.0.0", "<0.0.0-0"],
    )
    def test_unknown(self, raw: object) -> None:
        assert classify(raw) is None

    @pytest.mark.parametrize(
        "raw",
        [
            "^0.25.6",
            "1.2.3",
            ">=1.0.0 <3.0.0",
            "~2.1",
            "2.0.0-beta.3",
            "<2.0.0",
            "latest",
            "<2.0.0-beta",
            "<0.0.0",
            "<0.0.0-0",
            ">2.0.0 <1.0.0",
        ],
    )
    def test_classified_epoch_is_intersected(self, raw: str) -> None:
        epoch = classify(raw)

        if epoch is None:
            assert supported_epochs(raw, range(5)) == []
        else:
            assert intersects_epoch(raw, epoch)


@pytest.mark.unit
class TestDominantEpoch:
    """Tests for dominant_epoch."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1.2.3", 1),
            ("^2.0.0", 2),
            ("~0.25", 0),
            (" ^1.0.0-alpha.5 ", 1),
            ("0.x", 0),
        ],
    )
    def test_anchored_ranges(self, raw: str, expected: int) -> None:
        assert dominant_epoch(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            ">=1.0.0",
            "<2.0.0",
            "latest",
            "*",
            "^1.0.0 || ^2.0.0",
            ">=1.0.0 <2.0.0",
            "workspace:^1.0.0",
            "^1.not.valid",
            None,
        ],
    )
    def test_ambiguous_ranges(self, raw: object) -> None:
        assert dominant_epoch(raw) is None

    def test_exact_version_dominates_despite_wider_reach(self) -> None:
        # ">=1.2.3" reaches epoch 2, but the declared pin is a v1 pin
        assert intersects_epoch("1.2.3", 2)
        assert dominant_epoch("1.2.3") == 1
