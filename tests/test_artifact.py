"""Tests for building Avail artifact jars."""

import hashlib
import json
import zipfile

import pytest

from artifact.builder import ArtifactJarBuilder, jar_manifest
from artifact.manifest import (
    ArtifactType,
    AvailArtifactManifest,
    AvailManifestRoot,
    JvmComponent,
    digest_factory,
)
from artifact.package import classify_dependency, create_avail_artifact_jar, target_output_jar
from artifact.task import PackageAvailArtifactTask
from config.extension import AvailExtension, ProjectContext
from constants import Constants
from errors import ConfigurationError, UnsupportedDependencyError
from registry.resolver import StaticResolver
from roots.models import AvailRoot


def _make_zip(path, entries):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


@pytest.fixture
def root_dir(tmp_path):
    """A root holding two modules."""
    base = tmp_path / "src" / "my-root"
    (base / "Tools.avail").mkdir(parents=True)
    (base / "Main.avail").write_text('Module "Main"\n', encoding="utf-8")
    (base / "Tools.avail" / "Tools.avail").write_text('Module "Tools"\n', encoding="utf-8")
    return base


class TestDigestFactory:
    """Digest algorithm lookup."""

    def test_java_names(self):
        assert digest_factory("SHA-256")().name == "sha256"
        assert digest_factory("SHA-1")().name == "sha1"
        assert digest_factory("md5")().name == "md5"

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            digest_factory("NOPE-1")


class TestManifest:
    """Avail manifest serialization."""

    def test_json_round_trip(self):
        manifest = AvailArtifactManifest(
            ArtifactType.LIBRARY,
            {"r": AvailManifestRoot("r", ["avail"], ["Main"], "d", "SHA-256", {"Main.avail": "ab"})},
            "desc",
            JvmComponent(True, "jvm", {"run": "org.example.Main"}),
        )
        data = json.loads(manifest.to_json())
        assert data["artifactType"] == "LIBRARY"
        assert data["roots"]["r"]["digests"] == {"Main.avail": "ab"}
        assert data["jvmComponent"]["mains"] == {"run": "org.example.Main"}
        assert AvailArtifactManifest.from_json(manifest.to_json()) == manifest

    def test_artifact_type_parse(self):
        assert ArtifactType.parse("library") is ArtifactType.LIBRARY
        with pytest.raises(ConfigurationError):
            ArtifactType.parse("plugin")

    def test_jvm_component_none_is_fresh(self):
        first = JvmComponent.none()
        first.mains["x"] = "y"
        assert JvmComponent.none().mains == {}


class TestJarManifest:
    """META-INF/MANIFEST.MF rendering."""

    def test_attributes(self):
        text = jar_manifest("1.0.0", "sample", "org.example.Main")
        assert text.startswith("Manifest-Version: 1.0\r\n")
        assert "Implementation-Title: sample\r\n" in text
        assert "Implementation-Version: 1.0.0\r\n" in text
        assert "Main-Class: org.example.Main\r\n" in text
        assert text.endswith("\r\n\r\n")

    def test_blank_optional_attributes_omitted(self):
        text = jar_manifest("", "sample")
        assert "Implementation-Version" not in text
        assert "Main-Class" not in text

    def test_long_lines_wrap(self):
        text = jar_manifest("1", "x" * 200)
        for line in text.split("\r\n"):
            assert len(line.encode("utf-8")) <= 72
        assert "\r\n x" in text


class TestClassifyDependency:
    """Resolved dependency kinds."""

    def test_kinds(self, tmp_path):
        assert classify_dependency(tmp_path / "a.jar") == "jar"
        assert classify_dependency(tmp_path / "a.zip") == "zip"
        assert classify_dependency(tmp_path) == "directory"

    def test_unsupported(self, tmp_path):
        tar = tmp_path / "a.tar"
        tar.write_bytes(b"")
        with pytest.raises(UnsupportedDependencyError):
            classify_dependency(tar)

    def test_target_output_jar(self):
        assert target_output_jar("build/libs/", "sample", "1.0") == "build/libs/sample-1.0.jar"
        assert target_output_jar("build/libs/", "sample", "") == "build/libs/sample.jar"


class TestArtifactJarBuilder:
    """Low level archive writing."""

    def test_manifest_written_first_and_duplicates_skipped(self, tmp_path, root_dir):
        manifest = AvailArtifactManifest(ArtifactType.LIBRARY, {})
        output = tmp_path / "out.jar"
        dep_a = _make_zip(tmp_path / "a.jar", {"x/One.class": b"a", "META-INF/MANIFEST.MF": b"m"})
        dep_b = _make_zip(tmp_path / "b.jar", {"x/One.class": b"b", "META-INF/SIG.SF": b"s"})
        with ArtifactJarBuilder(output, "1.0", "t", manifest) as builder:
            builder.add_root(AvailRoot("my-root", str(root_dir)).artifact_target("SHA-256"))
            builder.add_jar(dep_a)
            builder.add_jar(dep_b)
            builder.finish()

        with zipfile.ZipFile(output) as zf:
            names = zf.namelist()
            assert names[0] == Constants.JAR_MANIFEST_PATH
            assert names.count(Constants.JAR_MANIFEST_PATH) == 1
            assert zf.read("x/One.class") == b"a"
            assert "META-INF/SIG.SF" not in names
            assert "Avail-Sources/my-root/Main.avail" in names
            assert "Avail-Sources/my-root/Tools.avail/Tools.avail" in names

    def test_abort_removes_partial_file(self, tmp_path):
        output = tmp_path / "out.jar"
        with pytest.raises(RuntimeError):
            with ArtifactJarBuilder(output, "1.0", "t", AvailArtifactManifest(ArtifactType.LIBRARY, {})):
                raise RuntimeError("boom")
        assert not output.exists()

    def test_root_from_jar(self, tmp_path):
        library = _make_zip(tmp_path / "lib.jar", {
            "Avail-Sources/util/Util.avail": b"util",
            "Avail-Sources/other/Other.avail": b"other",
            Constants.ARTIFACT_MANIFEST_PATH: b"{}",
        })
        output = tmp_path / "out.jar"
        with ArtifactJarBuilder(output, "1.0", "t", AvailArtifactManifest(ArtifactType.LIBRARY, {})) as builder:
            builder.add_root(AvailRoot("util", f"jar:{library}").artifact_target("SHA-256"))
            builder.finish()

        with zipfile.ZipFile(output) as zf:
            assert zf.read("Avail-Sources/util/Util.avail") == b"util"
            assert "Avail-Sources/util/Other.avail" not in zf.namelist()
            manifest = AvailArtifactManifest.from_json(zf.read(Constants.ARTIFACT_MANIFEST_PATH).decode("utf-8"))
        assert manifest.roots["util"].digests == {"Util.avail": hashlib.sha256(b"util").hexdigest()}

    def test_missing_root_location(self, tmp_path):
        output = tmp_path / "out.jar"
        with pytest.raises(FileNotFoundError):
            with ArtifactJarBuilder(output, "1.0", "t", AvailArtifactManifest(ArtifactType.LIBRARY, {})) as builder:
                builder.add_root(AvailRoot("gone", str(tmp_path / "gone")).artifact_target("SHA-256"))
        assert not output.exists()

    def test_add_file_rejects_directory(self, tmp_path):
        with ArtifactJarBuilder(tmp_path / "o.jar", "1", "t", AvailArtifactManifest(ArtifactType.LIBRARY, {})) as builder:
            with pytest.raises(ValueError):
                builder.add_file(tmp_path, "docs")
            builder.finish()


class TestPackageAvailArtifact:
    """End to end packaging through the extension."""

    @pytest.fixture
    def extension(self, tmp_path, root_dir):
        project = ProjectContext("sample", "1.0.0", tmp_path)
        extension = AvailExtension(project)
        extension.project_description = "A sample"
        extension.root("my-root", str(root_dir), entry_points=["Main"])
        return extension

    def test_create(self, tmp_path, extension):
        extras = tmp_path / "extras"
        extras.mkdir()
        (extras / "README.txt").write_text("hello", encoding="utf-8")
        dependency = _make_zip(tmp_path / "dep-1.0.jar", {
            "com/example/A.class": b"class",
            "META-INF/MANIFEST.MF": b"other manifest",
        })
        artifact = extension.package_avail_artifact
        artifact.resolver = StaticResolver({"org.example:dep:1.0": dependency})
        artifact.add_file(extras / "README.txt", "extras/")
        artifact.dependency("org.example:dep:1.0")
        artifact.jar_manifest_main_class = "org.example.Main"

        output = extension.create_artifact()

        assert output == tmp_path / "build" / "libs" / "sample-1.0.0.jar"
        with zipfile.ZipFile(output) as zf:
            names = zf.namelist()
            assert names[0] == Constants.JAR_MANIFEST_PATH
            assert "Avail-Sources/my-root/Main.avail" in names
            assert "Avail-Sources/my-root/Tools.avail/Tools.avail" in names
            assert zf.read("extras/README.txt") == b"hello"
            assert zf.read("com/example/A.class") == b"class"
            jar_mf = zf.read(Constants.JAR_MANIFEST_PATH).decode("utf-8")
            manifest = AvailArtifactManifest.from_json(zf.read(Constants.ARTIFACT_MANIFEST_PATH).decode("utf-8"))

        assert "Implementation-Version: 1.0.0" in jar_mf
        assert "Implementation-Title: sample" in jar_mf
        assert "Main-Class: org.example.Main" in jar_mf
        assert manifest.artifact_type is ArtifactType.APPLICATION
        assert manifest.description == "A sample"
        assert list(manifest.roots) == ["my-root"]
        root = manifest.roots["my-root"]
        assert root.entry_points == ["Main"]
        assert root.digest_algorithm == "SHA-256"
        assert root.digests == {
            "Main.avail": hashlib.sha256(b'Module "Main"\n').hexdigest(),
            "Tools.avail/Tools.avail": hashlib.sha256(b'Module "Tools"\n').hexdigest(),
        }

    def test_directory_dependency(self, tmp_path, extension):
        classes = tmp_path / "classes"
        (classes / "pkg").mkdir(parents=True)
        (classes / "pkg" / "B.class").write_bytes(b"b")
        extension.package_avail_artifact.resolver = StaticResolver({"org.example:classes:1": classes})
        extension.package_avail_artifact.dependency("org.example:classes:1")

        with zipfile.ZipFile(extension.create_artifact()) as zf:
            assert zf.read("pkg/B.class") == b"b"

    def test_unsupported_dependency_leaves_no_artifact(self, tmp_path, extension):
        output = tmp_path / "build" / "libs" / "sample-1.0.0.jar"
        output.parent.mkdir(parents=True)
        output.write_bytes(b"stale")
        tar = tmp_path / "dep.tar"
        tar.write_bytes(b"not a zip")
        extension.package_avail_artifact.resolver = StaticResolver({"org.example:dep:1": tar})
        extension.package_avail_artifact.dependency("org.example:dep:1")

        with pytest.raises(UnsupportedDependencyError):
            extension.create_artifact()

        assert not output.exists()
        assert list(output.parent.iterdir()) == []

    def test_unknown_digest_fails_before_writing(self, tmp_path, extension):
        extension.package_avail_artifact.digest_algorithm = "NOPE"
        with pytest.raises(ConfigurationError):
            extension.create_artifact()
        assert not (tmp_path / "build").exists()

    def test_add_file_rejects_directory(self, extension, tmp_path):
        with pytest.raises(ValueError):
            extension.package_avail_artifact.add_file(tmp_path, "docs")

    def test_malformed_dependency(self, extension):
        with pytest.raises(ConfigurationError):
            extension.package_avail_artifact.dependency("not-a-coordinate")


class TestCreateAvailArtifactJar:
    """The packaging function on its own."""

    def test_zip_and_extra_directory(self, tmp_path, root_dir):
        bundle = _make_zip(tmp_path / "bundle.zip", {"data/x.txt": b"x"})
        extra = tmp_path / "extra"
        extra.mkdir()
        (extra / "y.txt").write_bytes(b"y")
        output = create_avail_artifact_jar(
            "",
            tmp_path / "out" / "a.jar",
            ArtifactType.LIBRARY,
            JvmComponent.none(),
            "a",
            "",
            [AvailRoot("my-root", str(root_dir))],
            "SHA-1",
            zip_files=[bundle],
            directories=[extra],
        )
        with zipfile.ZipFile(output) as zf:
            assert zf.read("data/x.txt") == b"x"
            assert zf.read("y.txt") == b"y"
            manifest = AvailArtifactManifest.from_json(zf.read(Constants.ARTIFACT_MANIFEST_PATH).decode("utf-8"))
        assert manifest.roots["my-root"].digests["Main.avail"] == hashlib.sha1(b'Module "Main"\n').hexdigest()

    def test_artifact_dependency_keeps_own_manifest(self, tmp_path, root_dir):
        lib_src = tmp_path / "lib-src"
        lib_src.mkdir()
        (lib_src / "Lib.avail").write_bytes(b"lib")
        lib_jar = create_avail_artifact_jar(
            "1", tmp_path / "lib.jar", ArtifactType.LIBRARY, JvmComponent.none(),
            "lib", "", [AvailRoot("lib", str(lib_src))], "SHA-256",
        )

        output = create_avail_artifact_jar(
            "1", tmp_path / "mine.jar", ArtifactType.APPLICATION, JvmComponent.none(),
            "mine", "", [AvailRoot("mine", str(root_dir))], "SHA-256",
            resolved_dependencies=[lib_jar],
        )

        with zipfile.ZipFile(output) as zf:
            names = zf.namelist()
            assert names.count(Constants.ARTIFACT_MANIFEST_PATH) == 1
            assert zf.read("Avail-Sources/lib/Lib.avail") == b"lib"
            manifest = AvailArtifactManifest.from_json(zf.read(Constants.ARTIFACT_MANIFEST_PATH).decode("utf-8"))
        assert list(manifest.roots) == ["mine"]
        assert manifest.artifact_type is ArtifactType.APPLICATION


class TestPackageAvailArtifactTask:
    """The standalone packaging task."""

    def test_run(self, tmp_path, root_dir):
        task = PackageAvailArtifactTask("libJar", tmp_path / "build")
        task.version = "2.0"
        task.root("my-root", str(root_dir), "my root")

        output = task.run()

        assert output == tmp_path / "build" / "avail" / "libJar-2.0.jar"
        with zipfile.ZipFile(output) as zf:
            manifest = AvailArtifactManifest.from_json(zf.read(Constants.ARTIFACT_MANIFEST_PATH).decode("utf-8"))
        assert manifest.artifact_type is ArtifactType.LIBRARY
        assert manifest.roots["my-root"].description == "my root"

    def test_output_without_version(self, tmp_path):
        task = PackageAvailArtifactTask("libJar", tmp_path)
        assert task.output_file == tmp_path / "avail" / "libJar.jar"

    def test_dependencies_need_resolver(self, tmp_path, root_dir):
        task = PackageAvailArtifactTask("libJar", tmp_path)
        task.dependency("org.example:dep:1")
        with pytest.raises(ConfigurationError):
            task.run()

    def test_configure(self, tmp_path, root_dir):
        dependency = _make_zip(tmp_path / "dep.jar", {"z/Z.class": b"z"})
        task = PackageAvailArtifactTask("libJar", tmp_path / "build").configure({
            "artifact_type": "application",
            "version": "3",
            "roots": [{"name": "my-root", "uri": str(root_dir)}],
            "dependencies": ["org.example:dep:1"],
        })
        output = task.run(StaticResolver({"org.example:dep:1": dependency}))
        with zipfile.ZipFile(output) as zf:
            assert zf.read("z/Z.class") == b"z"
        assert task.artifact_type is ArtifactType.APPLICATION

    def test_configure_rejects_unknown_setting(self, tmp_path):
        with pytest.raises(ConfigurationError):
            PackageAvailArtifactTask("t", tmp_path).configure({"colour": "blue"})
