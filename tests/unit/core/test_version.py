"""Unit tests for version comparison."""

import pytest
from homebins.core.version import Version, version_key


class TestVersionKey:
    """Tests for version_key function."""

    def test_leading_v_ignored(self) -> None:
        """v1.6 and 1.6 produce the same key."""
        assert version_key("v1.6") == version_key("1.6")

    def test_trailing_zeros_dropped(self) -> None:
        """1.6 and 1.6.0 produce the same key."""
        assert version_key("1.6.0") == version_key("1.6")

    def test_numeric_components(self) -> None:
        """Numbers are compared as integers."""
        assert version_key("1.10") > version_key("1.9")

    def test_text_before_number(self) -> None:
        """A textual component sorts before a numeric one at the same position."""
        assert version_key("1.0rc1") < version_key("1.0.1")


class TestVersion:
    """Tests for Version class."""

    @pytest.mark.parametrize(
        ("older", "newer"),
        [
            ("1.5", "1.6"),
            ("12.1.0", "12.1.1"),
            ("0.9.5-rc1", "0.9.5-rc2"),
            ("2020-11-03", "2021-01-01"),
            ("1.9", "1.10"),
        ],
    )
    def test_ordering(self, older: str, newer: str) -> None:
        """Versions order component by component."""
        assert Version(older) < Version(newer)
        assert Version(newer) > Version(older)

    def test_equality(self) -> None:
        """Equivalent spellings are equal and hash alike."""
        assert Version("1.6") == Version("v1.6.0")
        assert hash(Version("1.6")) == hash(Version("v1.6.0"))

    def test_inequality(self) -> None:
        """Different versions are not equal."""
        assert Version("1.5") != Version("1.6")

    def test_not_equal_to_string(self) -> None:
        """Versions do not compare equal to plain strings."""
        assert Version("1.6") != "1.6"

    def test_str_keeps_raw(self) -> None:
        """str() returns the original spelling."""
        assert str(Version("v1.6")) == "v1.6"
        assert repr(Version("1.6")) == "Version('1.6')"
