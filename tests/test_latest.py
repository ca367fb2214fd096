"""Tests for the newer-release advisory check."""

import logging
from unittest.mock import patch

import pytest

from config.extension import AvailExtension, ProjectContext
from versioning.latest import check_for_newer_versions


@pytest.fixture
def extension(tmp_path):
    """An extension with one library, the standard library and a runtime version."""
    extension = AvailExtension(ProjectContext("sample", "1.0", tmp_path))
    extension.include_avail_lib_dependency("util", "org.example:avail-util:1.2")
    extension.include_std_avail_lib_dependency("2.0.0")
    extension.runtime_version = "2.0.0.alpha20"
    return extension


def _lookup(published):
    def lookup(group, artifact):
        return published.get((group, artifact), [])
    return lookup


class TestCheckForNewerVersions:
    """Advisory messages never fail the run."""

    def test_reports_newer_versions(self, extension, caplog):
        lookup = _lookup({
            ("org.example", "avail-util"): ["1.0", "1.2.1", "1.10"],
            ("org.availlang", "avail-stdlib"): ["2.0.0"],
            ("org.availlang", "avail"): ["2.0.0.alpha19", "2.0.0.alpha20", "2.0.0"],
        })
        with caplog.at_level(logging.WARNING):
            advisories = check_for_newer_versions(extension, lookup)

        assert len(advisories) == 2
        assert "avail-util" in advisories[0]
        assert "latest: 1.10" in advisories[0]
        assert advisories[1].startswith("Avail runtime 2.0.0.alpha20")
        assert "latest: 2.0.0" in advisories[1]
        assert [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING] == advisories

    def test_padded_versions_are_current(self, extension):
        lookup = _lookup({("org.example", "avail-util"): ["1.2.0"]})
        assert check_for_newer_versions(extension, lookup) == []

    def test_unparsable_versions_skipped(self, extension):
        extension.root_dependencies[0].version = "1.2-beta"
        lookup = _lookup({
            ("org.example", "avail-util"): ["1.3"],
            ("org.availlang", "avail-stdlib"): ["garbage"],
        })
        assert check_for_newer_versions(extension, lookup) == []

    def test_lookup_errors_skipped(self, extension):
        def lookup(group, artifact):
            raise OSError("offline")

        assert check_for_newer_versions(extension, lookup) == []

    def test_decoding_errors_skipped(self, extension):
        def lookup(group, artifact):
            if artifact == "avail-util":
                raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
            return ["9.0.0"]

        advisories = check_for_newer_versions(extension, lookup)
        assert len(advisories) == 2
        assert all("avail-util" not in advisory for advisory in advisories)

    def test_undecodable_local_metadata_skipped(self, extension, tmp_path):
        meta = tmp_path / "repo" / "org" / "example" / "avail-util" / "maven-metadata.xml"
        meta.parent.mkdir(parents=True)
        meta.write_bytes(b"<metadata>\xff</metadata>")
        extension.repositories = [str(tmp_path / "repo")]
        assert check_for_newer_versions(extension) == []

    @patch("registry.repository.fetch_available_versions")
    def test_default_lookup_uses_repositories(self, mock_fetch, extension):
        mock_fetch.return_value = []
        extension.repositories = ["https://repo.example"]
        assert check_for_newer_versions(extension) == []
        mock_fetch.assert_any_call(["https://repo.example"], "org.availlang", "avail")
