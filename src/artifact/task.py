"""Standalone task that assembles its own roots and dependencies into a jar."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from constants import Constants
from errors import ConfigurationError
from roots.library import split_coordinates
from roots.models import AvailRoot
from .manifest import ArtifactType, JvmComponent
from .package import create_avail_artifact_jar


class PackageAvailArtifactTask:
    """A task that assembles an Avail project into a single jar.

    Unlike ``PackageAvailArtifact`` it owns its roots instead of reading them
    from the project's extension, and writes to
    ``<build_dir>/avail/<artifact_name>[-<version>].jar``.
    """

    group = Constants.AVAIL
    description = "Assemble the configured Avail roots and dependencies into a jar."

    def __init__(self, name: str, build_dir, resolver=None):
        self.name = name
        self.build_dir = Path(build_dir)
        self.resolver = resolver
        self.digest_algorithm = Constants.DEFAULT_DIGEST_ALGORITHM
        self.artifact_name = name
        self.version = ""
        self.jar_manifest_main_class = ""
        self.implementation_title = ""
        self.artifact_description = ""
        self.artifact_type = ArtifactType.LIBRARY
        self.jvm_component = JvmComponent.none()
        self.roots: Dict[str, AvailRoot] = {}
        self.dependencies: List[str] = []

    def dependency(self, dependency: str) -> None:
        """Add a ``group:artifact:version`` dependency to be included in the jar."""
        split_coordinates(dependency)
        self.dependencies.append(dependency)

    def root(self, name: str, uri: str, description: str = "") -> AvailRoot:
        """Add a root to package; a later root with the same name replaces it."""
        root = AvailRoot(name, uri, description=description)
        self.roots[name] = root
        return root

    @property
    def output_file(self) -> Path:
        suffix = f"-{self.version}" if self.version else ""
        return self.build_dir / Constants.AVAIL / f"{self.artifact_name}{suffix}.jar"

    def run(self, resolver=None) -> Path:
        """Build the jar."""
        resolver = resolver or self.resolver
        resolved: List[Path] = []
        if self.dependencies:
            if resolver is None:
                raise ConfigurationError(
                    f"Task {self.name} declares dependencies but has no resolver"
                )
            resolved = resolver.resolve(self.dependencies)
        return create_avail_artifact_jar(
            self.version,
            self.output_file,
            self.artifact_type,
            self.jvm_component,
            self.implementation_title or self.artifact_name,
            self.artifact_description,
            list(self.roots.values()),
            self.digest_algorithm,
            resolved_dependencies=resolved,
            main_class=self.jar_manifest_main_class,
        )

    def configure(self, settings: Optional[dict] = None) -> "PackageAvailArtifactTask":
        """Apply a mapping of task settings (as read from the project file)."""
        for key, value in (settings or {}).items():
            if key == "roots":
                for root in value:
                    self.root(root["name"], root["uri"], root.get("description", ""))
            elif key == "dependencies":
                for dependency in value:
                    self.dependency(dependency)
            elif key == "artifact_type":
                self.artifact_type = ArtifactType.parse(value)
            elif key == "jvm_component":
                self.jvm_component = JvmComponent.from_dict(value)
            elif key in _SCALAR_SETTINGS:
                setattr(self, key, str(value))
            else:
                raise ConfigurationError(f"Unknown setting {key!r} for task {self.name}")
        return self


_SCALAR_SETTINGS = {
    "digest_algorithm",
    "artifact_name",
    "version",
    "jar_manifest_main_class",
    "implementation_title",
    "artifact_description",
}
