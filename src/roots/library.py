"""Avail libraries pulled from Maven repositories as roots."""

from __future__ import annotations

from pathlib import Path

from constants import Constants
from errors import ConfigurationError
from common.locations import JAR_SCHEME
from .models import AvailRoot


def split_coordinates(dependency: str) -> tuple:
    """Split ``"group:artifact:version"`` into its three fields.

    Raises:
        ConfigurationError: unless there are exactly three non-empty fields.
    """
    parts = (dependency or "").split(":")
    if len(parts) != 3 or not all(part.strip() for part in parts):
        raise ConfigurationError(
            f"Received a malformed AvailLibraryDependency: {dependency!r}. "
            'It must follow the format: "group:artifactName:version"'
        )
    return tuple(parts)


class AvailLibraryDependency:
    """An Avail library available from a Maven repository.

    Args:
        name: The name of the root as it will be used by Avail.
        group: The dependency's group name.
        artifact_name: The base name of the library jar, without the version
            or ``.jar`` extension.
        version: The version of the library to use.
    """

    def __init__(self, name: str, group: str, artifact_name: str, version: str):
        self.name = name
        self.group = group
        self.artifact_name = artifact_name
        self.version = version

    @classmethod
    def parse(cls, name: str, dependency: str) -> "AvailLibraryDependency":
        """Build a dependency from a ``"group:artifact:version"`` string."""
        group, artifact_name, version = split_coordinates(dependency)
        return cls(name, group, artifact_name, version)

    @property
    def dependency_string(self) -> str:
        return f"{self.group}:{self.artifact_name}:{self.version}"

    def to_coordinate_string(self) -> str:
        return self.dependency_string

    @property
    def jar_name(self) -> str:
        return f"{self.artifact_name}-{self.version}.jar"

    def resolved_file_path(self, roots_dir: str) -> Path:
        """The file the resolved library jar is copied to."""
        return Path(roots_dir) / self.jar_name

    def to_root(self, roots_dir: str) -> AvailRoot:
        """The root that reads this library straight out of its jar."""
        return AvailRoot(self.name, f"{JAR_SCHEME}{roots_dir}/{self.jar_name}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AvailLibraryDependency):
            return NotImplemented
        return (self.name, self.dependency_string) == (other.name, other.dependency_string)

    def __hash__(self) -> int:
        return hash((self.name, self.dependency_string))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.dependency_string!r})"


class AvailStandardLibrary(AvailLibraryDependency):
    """The published Avail standard library."""

    def __init__(self, version: str, name: str = Constants.AVAIL_STDLIB_ROOT_NAME):
        super().__init__(
            name,
            Constants.AVAIL_DEP_GROUP,
            Constants.AVAIL_STDLIB_ARTIFACT,
            version,
        )
