"""Writer for Avail artifact jars.

The builder streams roots, loose files, nested archives and directories into a
single jar, digesting every root file as it is written and recording the
digests in the Avail artifact manifest written by ``finish``.
"""
from __future__ import annotations

import logging
import posixpath
import zipfile
from pathlib import Path
from typing import Dict, Iterator, Optional, Set, Tuple

from constants import Constants
from errors import ConfigurationError
from common.locations import is_jar_location, location_path
from common.logging_utils import extra_context, is_debug_enabled
from .manifest import AvailArtifactManifest, AvailRootArtifactTarget, digest_factory

logger = logging.getLogger(__name__)

_SIGNATURE_SUFFIXES = (".SF", ".RSA", ".DSA", ".EC")
_MANIFEST_LINE_BYTES = 72


def _manifest_line(key: str, value: str) -> str:
    """Format one jar manifest attribute, wrapping at 72 bytes per line."""
    lines = []
    current = ""
    for char in f"{key}: {value}":
        if len((current + char).encode("utf-8")) > _MANIFEST_LINE_BYTES:
            lines.append(current)
            current = " "
        current += char
    lines.append(current)
    return "".join(line + "\r\n" for line in lines)


def jar_manifest(version: str, implementation_title: str, main_class: str = "") -> str:
    """Render the standard ``META-INF/MANIFEST.MF`` content."""
    attributes = [
        ("Manifest-Version", "1.0"),
        ("Created-By", Constants.CREATED_BY),
    ]
    if implementation_title:
        attributes.append(("Implementation-Title", implementation_title))
    if version:
        attributes.append(("Implementation-Version", version))
    if main_class:
        attributes.append(("Main-Class", main_class))
    return "".join(_manifest_line(k, v) for k, v in attributes) + "\r\n"


def _is_skipped_meta(name: str) -> bool:
    """Entries of merged inputs that the artifact writes itself, or signatures."""
    upper = name.upper()
    if upper in (Constants.JAR_MANIFEST_PATH.upper(), Constants.ARTIFACT_MANIFEST_PATH.upper()):
        return True
    return upper.startswith("META-INF/") and upper.endswith(_SIGNATURE_SUFFIXES)


class ArtifactJarBuilder:
    """Incrementally assemble an Avail artifact jar at ``output_location``.

    Args:
        output_location: The jar file to write.
        version: Value of the ``Implementation-Version`` attribute.
        implementation_title: Value of the ``Implementation-Title`` attribute.
        manifest: The Avail artifact manifest; root digests are filled in as
            roots are added.
        main_class: Optional ``Main-Class`` attribute.
    """

    def __init__(
        self,
        output_location,
        version: str,
        implementation_title: str,
        manifest: AvailArtifactManifest,
        main_class: str = "",
    ):
        self.output = Path(output_location)
        self.manifest = manifest
        self._entries: Set[str] = set()
        self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(
            self.output, "w", compression=zipfile.ZIP_DEFLATED
        )
        self._write(Constants.JAR_MANIFEST_PATH, jar_manifest(version, implementation_title, main_class).encode("utf-8"))

    def __enter__(self) -> "ArtifactJarBuilder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.abort()

    @property
    def entries(self) -> Set[str]:
        return set(self._entries)

    def _write(self, arcname: str, data: bytes) -> bool:
        if self._zip is None:
            raise ValueError(f"Artifact {self.output} is already closed")
        if arcname in self._entries:
            if is_debug_enabled(logger):
                logger.debug(
                    "Skipping duplicate entry",
                    extra=extra_context(
                        event="decision", component="artifact", action="write",
                        outcome="duplicate", target=arcname
                    ),
                )
            return False
        self._zip.writestr(arcname, data)
        self._entries.add(arcname)
        return True

    def add_root(self, target: AvailRootArtifactTarget) -> None:
        """Add the contents of a root, digesting every file written."""
        manifest_root = self.manifest.roots.setdefault(target.root_name, target.manifest_root)
        new_digest = digest_factory(manifest_root.digest_algorithm)
        prefix = f"{Constants.ARTIFACT_ROOTS_DIRECTORY}/{target.root_name}"
        path = location_path(target.uri)
        if is_jar_location(target.uri):
            files = self._root_files_from_jar(path, target.root_name)
        elif path.is_dir():
            files = self._root_files_from_dir(path)
        else:
            raise FileNotFoundError(
                f"Root {target.root_name} location {path} is neither a directory nor a jar"
            )
        count = 0
        for relative, data in files:
            digest = new_digest()
            digest.update(data)
            manifest_root.digests[relative] = digest.hexdigest()
            self._write(f"{prefix}/{relative}", data)
            count += 1
        logger.info("Added root %s (%d files)", target.root_name, count)

    @staticmethod
    def _root_files_from_dir(directory: Path) -> Iterator[Tuple[str, bytes]]:
        for file in sorted(p for p in directory.rglob("*") if p.is_file()):
            yield file.relative_to(directory).as_posix(), file.read_bytes()

    @staticmethod
    def _root_files_from_jar(jar: Path, root_name: str) -> Iterator[Tuple[str, bytes]]:
        """Yield the files of one root stored inside another Avail artifact.

        The subtree named after the root is used; a jar holding exactly one
        root subtree is used whatever its name.
        """
        base = Constants.ARTIFACT_ROOTS_DIRECTORY + "/"
        with zipfile.ZipFile(jar) as source:
            by_root: Dict[str, list] = {}
            for info in source.infolist():
                if info.is_dir() or not info.filename.startswith(base):
                    continue
                name, _, relative = info.filename[len(base):].partition("/")
                if relative:
                    by_root.setdefault(name, []).append((relative, info))
            if root_name in by_root:
                chosen = by_root[root_name]
            elif len(by_root) == 1:
                chosen = next(iter(by_root.values()))
            else:
                raise ConfigurationError(
                    f"Cannot find root {root_name!r} in {jar}; it contains {sorted(by_root)}"
                )
            for relative, info in sorted(chosen, key=lambda item: item[0]):
                yield relative, source.read(info)

    def add_file(self, file, target_directory: str) -> None:
        """Add a single file under ``target_directory`` inside the jar."""
        file = Path(file)
        if file.is_dir():
            raise ValueError(f"Expected {file} to be a file not a directory!")
        directory = target_directory.strip("/")
        arcname = posixpath.join(directory, file.name) if directory else file.name
        self._write(arcname, file.read_bytes())

    def add_jar(self, jar) -> None:
        """Merge every entry of a jar into the artifact."""
        self._merge_archive(Path(jar))

    def add_zip(self, zip_file) -> None:
        """Merge every entry of a zip file into the artifact."""
        self._merge_archive(Path(zip_file))

    def _merge_archive(self, archive: Path) -> None:
        added = 0
        with zipfile.ZipFile(archive) as source:
            for info in source.infolist():
                if info.is_dir() or _is_skipped_meta(info.filename):
                    continue
                if self._write(info.filename, source.read(info)):
                    added += 1
        logger.info("Merged %s (%d entries)", archive.name, added)

    def add_dir(self, directory) -> None:
        """Add a directory's files, relative to the directory, at the jar root."""
        directory = Path(directory)
        if not directory.is_dir():
            raise NotADirectoryError(f"Expected {directory} to be a directory!")
        for file in sorted(p for p in directory.rglob("*") if p.is_file()):
            arcname = file.relative_to(directory).as_posix()
            if not _is_skipped_meta(arcname):
                self._write(arcname, file.read_bytes())

    def finish(self) -> Path:
        """Write the Avail manifest and close the jar."""
        self._write(Constants.ARTIFACT_MANIFEST_PATH, self.manifest.to_json().encode("utf-8"))
        archive, self._zip = self._zip, None
        archive.close()
        return self.output

    def abort(self) -> None:
        """Close and delete the partially written jar."""
        if self._zip is not None:
            self._zip.close()
            self._zip = None
        if self.output.exists():
            self.output.unlink()
