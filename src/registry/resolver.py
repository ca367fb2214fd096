"""The narrow dependency resolution interface used by packaging and initialization."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, Protocol, Sequence, Union

from errors import DependencyResolutionError

PathLike = Union[str, Path]


class DependencyResolver(Protocol):
    """Turns ``group:artifact:version`` coordinates into local files."""

    def resolve(self, coordinates: Sequence[str]) -> List[Path]:
        """Return one local file (or directory) per coordinate, in order."""
        ...  # pylint: disable=unnecessary-ellipsis


class StaticResolver:
    """Resolver backed by a fixed coordinate-to-file mapping.

    Useful when files were fetched by some other tool, and in tests.
    """

    def __init__(self, files: Mapping[str, Union[PathLike, Iterable[PathLike]]]):
        self._files = {}
        for coordinate, value in files.items():
            if isinstance(value, (str, Path)):
                self._files[coordinate] = [Path(value)]
            else:
                self._files[coordinate] = [Path(v) for v in value]

    def resolve(self, coordinates: Sequence[str]) -> List[Path]:
        resolved: List[Path] = []
        for coordinate in coordinates:
            if coordinate not in self._files:
                raise DependencyResolutionError(f"No file registered for {coordinate}")
            resolved.extend(self._files[coordinate])
        return resolved
