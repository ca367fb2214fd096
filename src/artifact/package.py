"""Packaging of Avail roots, extra files and dependencies into an artifact jar."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from constants import Constants
from errors import UnsupportedDependencyError
from roots.library import split_coordinates
from common.logging_utils import extra_context, is_debug_enabled, Timer
from .builder import ArtifactJarBuilder
from .manifest import ArtifactType, AvailArtifactManifest, JvmComponent, digest_factory

if TYPE_CHECKING:
    from config.extension import AvailExtension, ProjectContext
    from registry.resolver import DependencyResolver
    from roots.models import AvailRoot

logger = logging.getLogger(__name__)

JAR = "jar"
ZIP = "zip"
DIRECTORY = "directory"


def classify_dependency(path: Path) -> str:
    """Decide how a resolved dependency file is merged into the artifact.

    Raises:
        UnsupportedDependencyError: for anything but a jar, a zip or a directory.
    """
    if path.name.endswith(".jar"):
        return JAR
    if path.name.endswith(".zip"):
        return ZIP
    if path.is_dir():
        return DIRECTORY
    raise UnsupportedDependencyError(
        f"Received dependency {path.absolute()} which did not resolve to a jar, zip, or directory"
    )


def target_output_jar(output_directory: str, artifact_name: str, version: str) -> str:
    """``output_directory + artifact_name + "-" + version + ".jar"``.

    The version suffix is omitted when the version is blank.
    """
    suffix = f"-{version}.jar" if version.strip() else ".jar"
    return f"{output_directory}{artifact_name}{suffix}"


def create_avail_artifact_jar(
    version: str,
    output_location,
    artifact_type: ArtifactType,
    jvm_component: JvmComponent,
    implementation_title: str,
    artifact_description: str,
    roots: Iterable["AvailRoot"],
    digest_algorithm: str,
    included_files: Sequence[Tuple[Path, str]] = (),
    jars: Sequence[Path] = (),
    zip_files: Sequence[Path] = (),
    directories: Sequence[Path] = (),
    resolved_dependencies: Sequence[Path] = (),
    main_class: str = "",
) -> Path:
    """Create an Avail artifact jar at ``output_location``.

    Any file already at ``output_location`` is deleted first. The jar is
    assembled in a sibling temporary file and moved into place only once it
    is complete, so a failed build leaves nothing at the target path.

    Raises:
        ConfigurationError: if the digest algorithm is unknown.
        UnsupportedDependencyError: if a resolved dependency is neither a jar,
            a zip nor a directory.
    """
    digest_factory(digest_algorithm)
    output = Path(output_location)
    logger.info("Creating %s", output)
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.exists():
        output.unlink()

    targets = [root.artifact_target(digest_algorithm) for root in roots]
    manifest = AvailArtifactManifest(
        artifact_type,
        {target.root_name: target.manifest_root for target in targets},
        artifact_description,
        jvm_component,
    )

    staging = output.with_name(f".{output.name}.part")
    with Timer() as timer:
        with ArtifactJarBuilder(staging, version, implementation_title, manifest, main_class) as builder:
            for target in targets:
                builder.add_root(target)
            for file, target_directory in included_files:
                builder.add_file(file, target_directory)
            for jar in jars:
                builder.add_jar(jar)
            for zip_file in zip_files:
                builder.add_zip(zip_file)
            for directory in directories:
                builder.add_dir(directory)
            for dependency in resolved_dependencies:
                dependency = Path(dependency)
                kind = classify_dependency(dependency)
                if kind == JAR:
                    builder.add_jar(dependency)
                elif kind == ZIP:
                    builder.add_zip(dependency)
                else:
                    builder.add_dir(dependency)
            builder.finish()
        os.replace(staging, output)

    if is_debug_enabled(logger):
        logger.debug(
            "Artifact written",
            extra=extra_context(
                event="function_exit",
                component="artifact",
                action="create_avail_artifact_jar",
                outcome="success",
                duration_ms=timer.duration_ms(),
                target=str(output),
            ),
        )
    logger.info("Created %s", output)
    return output


class PackageAvailArtifact:
    """The configuration state for building the project's Avail artifact.

    Built by, and bound to, one ``AvailExtension``; every root registered on
    the extension is packaged.
    """

    def __init__(
        self,
        project: "ProjectContext",
        extension: "AvailExtension",
        resolver: Optional["DependencyResolver"] = None,
    ):
        self.project = project
        self.extension = extension
        self.resolver = resolver
        self.artifact_type = ArtifactType.APPLICATION
        self.digest_algorithm = Constants.DEFAULT_DIGEST_ALGORITHM
        self.artifact_name = project.name
        self.version = project.version
        self.jar_manifest_main_class = ""
        self.implementation_title = ""
        self.jvm_component = JvmComponent.none()
        self.output_directory = f"{project.build_dir}/libs/"
        self.included_files: List[Tuple[Path, str]] = []
        self.jars: List[Path] = []
        self.zip_files: List[Path] = []
        self.directories: List[Path] = []
        self.dependencies: List[str] = []

    @property
    def target_output_jar(self) -> str:
        return target_output_jar(self.output_directory, self.artifact_name, self.version)

    @property
    def artifact_description(self) -> str:
        return self.extension.project_description

    def add_file(self, file, target_directory: str) -> None:
        """Add a single file to be written under ``target_directory`` in the jar."""
        file = Path(file)
        if file.is_dir():
            raise ValueError(f"Expected {file} to be a file not a directory!")
        self.included_files.append((file, target_directory))

    def add_jar(self, jar) -> None:
        self.jars.append(Path(jar))

    def add_zip_file(self, zip_file) -> None:
        self.zip_files.append(Path(zip_file))

    def add_directory(self, directory) -> None:
        self.directories.append(Path(directory))

    def dependency(self, dependency: str) -> None:
        """Add a ``group:artifact:version`` dependency to merge into the jar."""
        split_coordinates(dependency)
        self.dependencies.append(dependency)

    def resolve_dependencies(self) -> List[Path]:
        if not self.dependencies:
            return []
        resolver = self.resolver or self.extension.dependency_resolver()
        return resolver.resolve(self.dependencies)

    def create(self) -> Path:
        """Build the artifact jar."""
        return create_avail_artifact_jar(
            self.version,
            self.target_output_jar,
            self.artifact_type,
            self.jvm_component,
            self.implementation_title or self.artifact_name,
            self.artifact_description,
            list(self.extension.roots.values()),
            self.digest_algorithm,
            self.included_files,
            self.jars,
            self.zip_files,
            self.directories,
            self.resolve_dependencies(),
            self.jar_manifest_main_class,
        )
