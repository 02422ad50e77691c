from __future__ import annotations

import pytest
from semantic_version import Version

from regkeeper.utils.version_utils import (
    clean_version,
    is_prerelease,
    make_version,
    parse_version,
    version_floor,
)


@pytest.mark.unit
class TestParseVersion:
    """Tests for parse_version."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("1.2.3", "1.2.3"),
            ("v1.2.3", "1.2.3"),
            ("=v1.2.3", "1.2.3"),
            ("  0.25.6-alpha.1  ", "0.25.6-alpha.1"),
            ("2.0.0-beta.1+sha.abc", "2.0.0-beta.1"),
            ("1.0.0+20240101", "1.0.0"),
        ],
    )
    def test_valid(self, raw: str, expected: str) -> None:
        assert str(parse_version(raw)) == expected

    @pytest.mark.parametrize(
        "raw",
        [
            "1.2",
            "1",
            "latest",
            "",
            "01.2.3",
            "1.2.3-",
            "1.2.3-01",
            "1.2.3-a..b",
            "1.02.3",
            "1.2.3+",
            "^1.2.3",
            "1.2.3 - 2.0.0",
            None,
            123,
        ],
    )
    def test_invalid(self, raw: object) -> None:
        assert parse_version(raw) is None

    def test_prerelease_precedence(self) -> None:
        assert parse_version("1.0.0-beta.2") < parse_version("1.0.0-beta.11")
        assert parse_version("1.0.0-rc.1") < parse_version("1.0.0")


@pytest.mark.unit
class TestHelpers:
    """Tests for the small version helpers."""

    def test_make_version(self) -> None:
        assert make_version(1, 2, 3) == Version("1.2.3")
        assert make_version(2, prerelease=("beta", "1")) == Version("2.0.0-beta.1")

    def test_version_floor_is_below_every_prerelease(self) -> None:
        floor = version_floor(2)

        assert str(floor) == "2.0.0-0"
        assert floor <= Version("2.0.0-0")
        assert floor < Version("2.0.0-alpha")
        assert floor > Version("1.99.99")

    def test_clean_version(self) -> None:
        assert clean_version(" v1.0.0+build ") == "1.0.0"
        assert clean_version("nope") is None

    def test_is_prerelease(self) -> None:
        assert is_prerelease(Version("1.0.0-rc.1"))
        assert not is_prerelease(Version("1.0.0"))
