"""Tests for Avail library dependency coordinates and their roots."""

import pytest

from errors import ConfigurationError
from roots.library import AvailLibraryDependency, AvailStandardLibrary, split_coordinates


class TestSplitCoordinates:
    """Test group:artifact:version parsing."""

    def test_three_fields(self):
        assert split_coordinates("org.availlang:avail-stdlib:2.0.0") == (
            "org.availlang", "avail-stdlib", "2.0.0"
        )

    @pytest.mark.parametrize("bad", [
        "org.availlang:avail-stdlib",
        "org.availlang:avail-stdlib:2.0.0:jar",
        "org.availlang::2.0.0",
        ":avail-stdlib:2.0.0",
        "org.availlang:avail-stdlib: ",
        "",
    ])
    def test_malformed_coordinates_rejected(self, bad):
        with pytest.raises(ConfigurationError) as exc:
            split_coordinates(bad)
        assert "malformed AvailLibraryDependency" in str(exc.value)


class TestAvailLibraryDependency:
    """Test library dependency records."""

    def test_parse_round_trips_coordinate(self):
        dep = AvailLibraryDependency.parse("util", "org.example:avail-util:1.4.2")
        assert dep.name == "util"
        assert dep.group == "org.example"
        assert dep.artifact_name == "avail-util"
        assert dep.version == "1.4.2"
        assert dep.to_coordinate_string() == "org.example:avail-util:1.4.2"

    def test_jar_name_and_resolved_path(self, tmp_path):
        dep = AvailLibraryDependency.parse("util", "org.example:avail-util:1.4.2")
        assert dep.jar_name == "avail-util-1.4.2.jar"
        assert dep.resolved_file_path(str(tmp_path)) == tmp_path / "avail-util-1.4.2.jar"

    def test_root_reads_from_jar(self):
        dep = AvailLibraryDependency.parse("util", "org.example:avail-util:1.4.2")
        root = dep.to_root("/work/.avail/roots")
        assert root.name == "util"
        assert root.uri == "jar:/work/.avail/roots/avail-util-1.4.2.jar"
        assert not root.is_pending_creation

    def test_equality_uses_name_and_coordinates(self):
        a = AvailLibraryDependency.parse("util", "org.example:avail-util:1.4.2")
        b = AvailLibraryDependency("util", "org.example", "avail-util", "1.4.2")
        c = AvailLibraryDependency.parse("util", "org.example:avail-util:1.5.0")
        assert a == b
        assert hash(a) == hash(b)
        assert a != c


class TestAvailStandardLibrary:
    """Test the standard library shortcut."""

    def test_defaults(self):
        stdlib = AvailStandardLibrary("2.0.0.alpha20")
        assert stdlib.name == "avail"
        assert stdlib.dependency_string == "org.availlang:avail-stdlib:2.0.0.alpha20"
        assert stdlib.jar_name == "avail-stdlib-2.0.0.alpha20.jar"

    def test_custom_root_name(self):
        stdlib = AvailStandardLibrary("2.0.0", name="stdlib")
        assert stdlib.to_root("roots").uri == "jar:roots/avail-stdlib-2.0.0.jar"
        assert stdlib.to_root("roots").name == "stdlib"
