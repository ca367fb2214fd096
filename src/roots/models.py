"""Avail source roots and the module trees scaffolded for new roots.

A root is a plain record. Roots that should be scaffolded on disk carry a
``PendingCreation`` payload; code asks ``root.is_pending_creation`` instead of
checking for a subtype.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import total_ordering
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from artifact.manifest import AvailManifestRoot, AvailRootArtifactTarget
from constants import Constants
from common.locations import location_path
from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

RootAction = Callable[["AvailRoot"], None]


def _dedupe(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


MODULE_TEMPLATE = """Module "{name}"
Versions
{versions}
Uses
{uses}
Body

"""


def header_comment(file_name: str, body: str) -> str:
    """Wrap ``body`` in an Avail block comment headed by the file name."""
    lines = ["/*", f" * {file_name}"]
    if body.strip():
        lines.append(" *")
        lines.extend(f" * {line}".rstrip() for line in body.strip("\n").splitlines())
    lines.append(" */")
    return "\n".join(lines) + "\n\n"


@dataclass(eq=False)
class AvailModule:
    """A single Avail module source file to be created."""
    name: str
    extension: str = Constants.DEFAULT_MODULE_EXTENSION
    header_comment_body: str = ""
    versions: List[str] = field(default_factory=lambda: ["1.0.0"])
    uses: List[str] = field(default_factory=lambda: ["Avail"])

    @property
    def key(self) -> Tuple[str, str]:
        return self.name, self.extension

    @property
    def file_name(self) -> str:
        return f"{self.name}.{self.extension}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AvailModule):
            return NotImplemented
        return type(self) is type(other) and self.key == other.key

    def __hash__(self) -> int:
        return hash((type(self).__name__,) + self.key)

    def render(self, default_header: str = "") -> str:
        """Produce the text of the module file."""
        body = self.header_comment_body or default_header
        versions = ",\n".join(f'\t"{v}"' for v in self.versions)
        uses = ",\n".join(f'\t"{u}"' for u in self.uses)
        return header_comment(self.file_name, body) + MODULE_TEMPLATE.format(
            name=self.name, versions=versions, uses=uses
        )

    def create(self, directory: Path, default_header: str = "") -> Path:
        """Write the module file into ``directory``; existing files are kept."""
        target = directory / self.file_name
        if target.exists():
            logger.info("Module %s already exists, leaving it untouched.", target)
            return target
        directory.mkdir(parents=True, exist_ok=True)
        target.write_text(self.render(default_header), encoding="utf-8")
        if is_debug_enabled(logger):
            logger.debug(
                "Created module",
                extra=extra_context(
                    event="create", component="roots", action="create_module", target=str(target)
                ),
            )
        return target

    def hierarchy_printer(self, level: int, lines: List[str]) -> None:
        lines.append("\t" * (level + 3) + "- " + self.file_name)


class _ModuleContainer:
    """Ordered, set-like holder of modules and module packages.

    Entities are keyed by ``(name, extension)``; re-adding an existing key
    returns the entity already registered.
    """

    def __init__(self) -> None:
        self._modules: Dict[Tuple[str, str], AvailModule] = {}
        self._module_packages: Dict[Tuple[str, str], "AvailModulePackage"] = {}

    @property
    def modules(self) -> List[AvailModule]:
        return list(self._modules.values())

    @property
    def module_packages(self) -> List["AvailModulePackage"]:
        return list(self._module_packages.values())

    def add_module(self, name: str, extension: str = Constants.DEFAULT_MODULE_EXTENSION) -> AvailModule:
        """Add a module at this level, or return the one already present."""
        module = AvailModule(name, extension)
        return self._modules.setdefault(module.key, module)

    def add_module_package(
        self, name: str, extension: str = Constants.DEFAULT_MODULE_EXTENSION
    ) -> "AvailModulePackage":
        """Add a module package at this level, or return the one already present."""
        package = AvailModulePackage(name, extension)
        return self._module_packages.setdefault(package.key, package)

    def _create_children(self, directory: Path, default_header: str) -> None:
        # Module packages always come before modules.
        for package in self._module_packages.values():
            package.create(directory, default_header)
        for key, module in self._modules.items():
            if key in self._module_packages:
                logger.warning(
                    "Module %s collides with the module package of the same name in %s; "
                    "not creating it.",
                    module.file_name,
                    directory,
                )
                continue
            module.create(directory, default_header)

    def _print_children(self, level: int, lines: List[str]) -> None:
        for package in self._module_packages.values():
            package.hierarchy_printer(level, lines)
        for module in self._modules.values():
            module.hierarchy_printer(level, lines)


class AvailModulePackage(_ModuleContainer, AvailModule):
    """A directory module: ``<name>.<ext>/`` holding its representative module."""

    def __init__(
        self,
        name: str,
        extension: str = Constants.DEFAULT_MODULE_EXTENSION,
        header_comment_body: str = "",
    ) -> None:
        AvailModule.__init__(self, name, extension, header_comment_body)
        _ModuleContainer.__init__(self)

    def create(self, directory: Path, default_header: str = "") -> Path:
        package_dir = directory / self.file_name
        package_dir.mkdir(parents=True, exist_ok=True)
        AvailModule.create(self, package_dir, default_header)
        self._create_children(package_dir, default_header)
        return package_dir

    def hierarchy_printer(self, level: int, lines: List[str]) -> None:
        lines.append("\t" * (level + 3) + "+ " + self.file_name)
        self._print_children(level + 1, lines)


class PendingCreation(_ModuleContainer):
    """The module tree of a root that should be scaffolded on disk."""

    def create(self, base_dir: Path, header_comment_body: str = "") -> Path:
        """Create the root directory and every declared module beneath it."""
        base_dir.mkdir(parents=True, exist_ok=True)
        self._create_children(base_dir, header_comment_body)
        return base_dir

    def append_hierarchy(self, lines: List[str]) -> None:
        """Append a printable tree of the whole root to ``lines``."""
        self._print_children(1, lines)


@total_ordering
@dataclass(eq=False)
class AvailRoot:
    """An Avail source root.

    Args:
        name: The name of the root.
        uri: The location of the root; a directory path, a ``file:`` URI or
            a ``jar:`` reference to an archive.
        avail_module_extensions: File extensions of Avail modules.
        entry_points: The Avail entry points exposed by this root.
        description: An optional description of the root.
        action: Callback run with this root once all roots have been added.
        pending: Module tree to scaffold when the root is to be created.
    """
    name: str
    uri: str
    avail_module_extensions: List[str] = field(
        default_factory=lambda: [Constants.DEFAULT_MODULE_EXTENSION]
    )
    entry_points: List[str] = field(default_factory=list)
    description: str = ""
    action: Optional[RootAction] = None
    pending: Optional[PendingCreation] = None

    def __post_init__(self) -> None:
        self.avail_module_extensions = _dedupe(self.avail_module_extensions)
        self.entry_points = list(self.entry_points)

    @classmethod
    def from_manifest_root(
        cls, uri: str, manifest_root: AvailManifestRoot, action: Optional[RootAction] = None
    ) -> "AvailRoot":
        return cls(
            manifest_root.name,
            uri,
            list(manifest_root.avail_module_extensions),
            list(manifest_root.entry_points),
            manifest_root.description,
            action,
        )

    @property
    def is_pending_creation(self) -> bool:
        return self.pending is not None

    @property
    def root_string(self) -> str:
        """The ``name=uri`` form used for the ``-DavailRoots`` VM option."""
        return f"{self.name}={self.uri}"

    @property
    def config_string(self) -> str:
        if self.pending is None:
            return f"\n\t{self.name} ({self.uri})"
        lines = [f"\t\t{self.name}", "\t\t\tRoot Contents:"]
        self.pending.append_hierarchy(lines)
        return "".join("\n" + line for line in lines)

    def manifest_root(self, digest_algorithm: str) -> AvailManifestRoot:
        return AvailManifestRoot(
            self.name,
            list(self.avail_module_extensions),
            list(self.entry_points),
            self.description,
            digest_algorithm,
        )

    def artifact_target(self, digest_algorithm: str) -> AvailRootArtifactTarget:
        return AvailRootArtifactTarget(self.uri, self.manifest_root(digest_algorithm))

    def create(self, header_comment_body: str = "") -> Optional[Path]:
        """Scaffold this root on disk if it is pending creation."""
        if self.pending is None:
            return None
        logger.info("Creating Avail root %s at %s", self.name, self.uri)
        return self.pending.create(location_path(self.uri), header_comment_body)

    def _sort_key(self) -> Tuple[bool, str]:
        return self.is_pending_creation, self.name

    def __lt__(self, other: "AvailRoot") -> bool:
        if not isinstance(other, AvailRoot):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, AvailRoot):
            return NotImplemented
        return self.name == other.name and self.uri == other.uri

    def __hash__(self) -> int:
        return hash((self.name, self.uri))

    def __str__(self) -> str:
        return self.root_string
