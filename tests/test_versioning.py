"""Tests for version parsing and comparison."""

import pytest

from errors import ConfigurationError, VersionFormatError
from versioning.models import VersionFamily, VersionTuple
from versioning.parser import (
    is_newer,
    latest_of,
    parse_library_version,
    parse_runtime_version,
    parse_version,
)


class TestLibraryVersions:
    """Plain dotted numeric versions."""

    def test_parse(self):
        parsed = parse_library_version("1.2.3")
        assert parsed.numbers == (1, 2, 3)
        assert parsed.suffix is None
        assert str(parsed) == "1.2.3"

    def test_shorter_version_is_padded_with_zeros(self):
        assert parse_library_version("1.2") < parse_library_version("1.2.1")
        assert parse_library_version("1.2") == parse_library_version("1.2.0")
        assert hash(parse_library_version("1.2")) == hash(parse_library_version("1.2.0"))

    def test_numeric_not_lexical(self):
        assert parse_library_version("1.10.0") > parse_library_version("1.9.9")

    @pytest.mark.parametrize("bad", ["1.2.3rc1", "1.2.post1", "1.2.dev0", "1.2+local", "abc", ""])
    def test_rejects_non_numeric(self, bad):
        with pytest.raises(VersionFormatError):
            parse_library_version(bad)

    def test_version_error_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            parse_library_version("not-a-version")


class TestRuntimeVersions:
    """Dotted numeric versions with an optional suffix."""

    @pytest.mark.parametrize("text, numbers, suffix", [
        ("2.0.0.alpha20", (2, 0, 0), "alpha20"),
        ("1.6.1-SNAPSHOT", (1, 6, 1), "SNAPSHOT"),
        ("2.0.0-rc.1", (2, 0, 0), "rc.1"),
        ("2.0.0", (2, 0, 0), None),
    ])
    def test_parse(self, text, numbers, suffix):
        parsed = parse_runtime_version(text)
        assert parsed.numbers == numbers
        assert parsed.suffix == suffix
        assert str(parsed) == text

    def test_release_is_newer_than_suffixed(self):
        assert parse_runtime_version("2.0.0") > parse_runtime_version("2.0.0-rc.1")
        assert parse_runtime_version("2.0.0.alpha20") < parse_runtime_version("2.0.0")

    def test_suffix_precedence(self):
        assert parse_runtime_version("2.0.0-rc.1") < parse_runtime_version("2.0.0-rc.2")
        assert parse_runtime_version("2.0.0-alpha.2") < parse_runtime_version("2.0.0-alpha.10")
        assert parse_runtime_version("2.0.0-alpha") < parse_runtime_version("2.0.0-beta")

    def test_numbers_dominate_suffix(self):
        assert parse_runtime_version("2.0.1-alpha") > parse_runtime_version("2.0.0")

    def test_rejects_missing_numbers(self):
        with pytest.raises(VersionFormatError):
            parse_runtime_version("alpha")


class TestComparisons:
    """Family dispatch helpers."""

    def test_parse_version_dispatches(self):
        assert parse_version("1.2", VersionFamily.LIBRARY) == VersionTuple((1, 2))
        assert parse_version("1.2-beta", VersionFamily.RUNTIME).suffix == "beta"
        with pytest.raises(VersionFormatError):
            parse_version("1.2-beta", VersionFamily.LIBRARY)

    def test_is_newer(self):
        assert is_newer("1.2.1", "1.2", VersionFamily.LIBRARY)
        assert not is_newer("1.2.0", "1.2", VersionFamily.LIBRARY)
        assert is_newer("2.0.0", "2.0.0.alpha20", VersionFamily.RUNTIME)

    def test_latest_of_skips_unparsable(self):
        assert latest_of(["1.0", "garbage", "1.10", "1.9"], VersionFamily.LIBRARY) == "1.10"
        assert latest_of(["garbage"], VersionFamily.LIBRARY) is None
        assert latest_of([], VersionFamily.RUNTIME) is None
