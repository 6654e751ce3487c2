"""Tests for Mozilla version helpers."""

import pytest

from manifest_lint.versions import (
    is_added_after,
    is_toolkit_version_string,
    is_valid_version_string,
    major_version,
    moz_compare,
    normalize_compat_version,
)


class TestMozCompare:
    """Tests for toolkit-aware version comparison."""

    @pytest.mark.parametrize(
        "left,right,expected",
        [
            ("1.0", "1.0.0", 0),
            ("60.0", "78.0", -1),
            ("80", "78.0", 1),
            ("1.0b1", "1.0", -1),
            ("1.0a1", "1.0b1", -1),
            ("10.0", "9.0", 1),
            ("*", "100.0", 1),
            ("1.1pre", "1.1", -1),
        ],
    )
    def test_compare(self, left: str, right: str, expected: int) -> None:
        """Versions compare part by part, not lexicographically."""
        assert moz_compare(left, right) == expected

    def test_antisymmetric(self) -> None:
        """Swapping operands flips the result."""
        assert moz_compare("91.1.0", "91.0") == 1
        assert moz_compare("91.0", "91.1.0") == -1


class TestVersionStrings:
    """Tests for manifest `version` format checks."""

    @pytest.mark.parametrize("version", ["1", "1.0", "1.2.3.4", "123456789.0", "0.0.1"])
    def test_valid(self, version: str) -> None:
        assert is_valid_version_string(version)

    @pytest.mark.parametrize(
        "version", ["1.0.0.0.0", "01.0", "1234567890", "1.0b2", "", "1..0", 1]
    )
    def test_invalid(self, version: object) -> None:
        assert not is_valid_version_string(version)

    @pytest.mark.parametrize("version", ["1.0b2", "2.1a1pre", "3.0.1+", "1.0"])
    def test_toolkit_format(self, version: str) -> None:
        assert is_toolkit_version_string(version)

    def test_toolkit_rejects_free_text(self) -> None:
        assert not is_toolkit_version_string("1.0 beta")
        assert not is_toolkit_version_string("1." + "1" * 200)


class TestCompatVersions:
    """Tests for compat-data version normalization."""

    def test_non_versions_are_ignored(self) -> None:
        """Booleans, null and preview have no comparable version."""
        assert normalize_compat_version(True) is None
        assert normalize_compat_version(None) is None
        assert normalize_compat_version("preview") is None

    def test_ranged_version_strips_prefix(self) -> None:
        assert normalize_compat_version("≤58") == "58"
        assert normalize_compat_version("57") == "57"

    def test_major_version(self) -> None:
        assert major_version("57.0a1") == 57
        assert major_version("nope") is None

    def test_is_added_after_compares_majors(self) -> None:
        """Only the major release matters."""
        assert is_added_after("60", "57.0a1")
        assert not is_added_after("57", "57.0a1")
        assert not is_added_after("52", "57.0")
        assert is_added_after("≤58", "57")
        assert is_added_after("58", "57.5")

    def test_is_added_after_without_version(self) -> None:
        assert not is_added_after(True, "50.0")
        assert not is_added_after("60", None)
