"""The user-facing Avail configuration for one project."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from artifact.package import PackageAvailArtifact
from constants import Constants
from roots.library import AvailLibraryDependency, AvailStandardLibrary
from roots.models import AvailRoot, PendingCreation, RootAction

logger = logging.getLogger(__name__)


@dataclass
class ProjectContext:
    """The host project: its name, version and directories."""
    name: str
    version: str = ""
    project_dir: Path = Path(".")
    build_dir: Optional[Path] = None

    def __post_init__(self) -> None:
        self.project_dir = Path(self.project_dir).absolute()
        self.build_dir = (
            Path(self.build_dir) if self.build_dir else self.project_dir / Constants.DEFAULT_BUILD_DIRECTORY
        )


class AvailExtension:
    """Collects Avail roots, library dependencies and packaging settings.

    Registration methods only mutate in-memory state. Roots are keyed by name
    and a later registration under the same name replaces the earlier one.
    """

    def __init__(self, project: ProjectContext, resolver=None):
        self.project = project
        self.project_description = ""
        self.repository_directory = str(project.project_dir / Constants.DEFAULT_REPOSITORY_DIRECTORY)
        self.dependency_cache_directory = str(project.project_dir / Constants.DEFAULT_DEPENDENCY_CACHE)
        self.repositories: List[str] = [Constants.REPOSITORY_URL_MAVEN]
        self.runtime_version = ""
        self.uses_std_lib = False
        self.module_header_comment_body = ""
        self.module_header_comment_body_file = ""
        self.roots: Dict[str, AvailRoot] = {}
        self.create_roots: Dict[str, AvailRoot] = {}
        self.root_dependencies: List[AvailLibraryDependency] = []
        self.resolver = resolver
        self._roots_directory = str(project.project_dir / Constants.DEFAULT_ROOTS_DIRECTORY)
        self.package_avail_artifact = PackageAvailArtifact(project, self)

    @property
    def roots_directory(self) -> str:
        """The directory where Avail roots (and library jars) live."""
        return self._roots_directory

    @roots_directory.setter
    def roots_directory(self, value: str) -> None:
        self.set_roots_directory(value)

    def set_roots_directory(self, path: str) -> None:
        """Move the roots directory, re-homing every library dependency root."""
        self._roots_directory = str(path)
        for dependency in self.root_dependencies:
            self.add_root(dependency.to_root(self._roots_directory))

    def set_module_header_comment_body_file(self, path: str) -> None:
        """Read the module header comment from a file unless a body is already set."""
        if not self.module_header_comment_body:
            self.module_header_comment_body = Path(path).read_text(encoding="utf-8")
        self.module_header_comment_body_file = str(path)

    def add_root(self, root: AvailRoot) -> AvailRoot:
        self.roots[root.name] = root
        return root

    def root(
        self,
        name: str,
        uri: Optional[str] = None,
        avail_module_extensions: Sequence[str] = (Constants.DEFAULT_MODULE_EXTENSION,),
        entry_points: Sequence[str] = (),
        description: str = "",
        initializer: Optional[RootAction] = None,
    ) -> AvailRoot:
        """Add a root; ``uri`` defaults to ``<roots_directory>/<name>``."""
        return self.add_root(
            AvailRoot(
                name,
                uri or f"{self.roots_directory}/{name}",
                list(avail_module_extensions),
                list(entry_points),
                description,
                initializer,
            )
        )

    def create_root(
        self,
        name: str,
        avail_module_extensions: Sequence[str] = (Constants.DEFAULT_MODULE_EXTENSION,),
        entry_points: Sequence[str] = (),
        description: str = "",
    ) -> AvailRoot:
        """Add a root to be scaffolded in the roots directory by initialization.

        Modules are added through ``root.pending.add_module`` and
        ``root.pending.add_module_package``.
        """
        root = AvailRoot(
            name,
            f"{self.roots_directory}/{name}",
            list(avail_module_extensions),
            list(entry_points),
            description,
            pending=PendingCreation(),
        )
        self.create_roots[name] = root
        self.roots[name] = root
        return root

    def include_avail_lib_dependency(self, name: str, dependency: str) -> AvailLibraryDependency:
        """Add an Avail library from a Maven repository as a root.

        Raises:
            ConfigurationError: if ``dependency`` is not ``group:artifact:version``.
        """
        library = AvailLibraryDependency.parse(name, dependency)
        self.root_dependencies.append(library)
        self.add_root(library.to_root(self.roots_directory))
        return library

    def include_std_avail_lib_dependency(
        self, version: str, name: str = Constants.AVAIL_STDLIB_ROOT_NAME
    ) -> AvailStandardLibrary:
        """Include the Avail standard library from a Maven repository as a root."""
        library = AvailStandardLibrary(version, name)
        self.uses_std_lib = True
        self.root_dependencies.append(library)
        self.add_root(library.to_root(self.roots_directory))
        return library

    def artifact(self, configure: Callable[[PackageAvailArtifact], None]) -> PackageAvailArtifact:
        """Configure the artifact built by ``create_artifact``."""
        configure(self.package_avail_artifact)
        return self.package_avail_artifact

    def create_artifact(self) -> Path:
        return self.package_avail_artifact.create()

    @property
    def target_output_jar(self) -> str:
        return self.package_avail_artifact.target_output_jar

    def dependency_resolver(self):
        """The resolver used for library and artifact dependencies."""
        if self.resolver is None:
            # Imported here so configuration never pulls in the HTTP stack.
            from registry.repository import MavenRepositoryResolver  # pylint: disable=import-outside-toplevel
            self.resolver = MavenRepositoryResolver(self.repositories, self.dependency_cache_directory)
        return self.resolver

    @property
    def printable_config(self) -> str:
        """A printable view of the current configuration state."""
        sorted_roots = sorted(self.roots.values())
        parts = ["\n========================= Avail Configuration ========================="]
        for dependency in self.root_dependencies:
            parts.append(
                f'\n\tIncluded Library Dependency: "{dependency.name}", "{dependency.dependency_string}"'
            )
        if self.runtime_version:
            parts.append(f"\n\tAvail Runtime Version: {self.runtime_version}")
        parts.append(f"\n\tRepository Location: {self.repository_directory}")
        parts.append("\n\tVM Arguments to include for Avail Runtime:")
        parts.append("\n\t\t• -DavailRoots=" + ";".join(r.root_string for r in sorted_roots))
        parts.append(f"\n\t\t• -Davail.repositories={self.repository_directory}")
        parts.append(f"\n\tRoots Location: {self.roots_directory}")
        parts.append("\n\tIncluded Roots:")
        for root in sorted_roots:
            parts.append(f"\n\t\t• {root.name}: {root.uri}")
        parts.append("\n\tCreated Roots:")
        for root in sorted(self.create_roots.values()):
            parts.append(root.config_string)
        parts.append("\n" + "=" * 72 + "\n")
        return "".join(parts)
