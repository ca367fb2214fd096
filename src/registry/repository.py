"""Maven2-layout repository client: version listings and jar downloads."""
from __future__ import annotations

import logging
import shutil
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Sequence

from constants import Constants
from errors import DependencyResolutionError
from common import http_client
from common.locations import location_path
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from roots.library import split_coordinates

logger = logging.getLogger(__name__)


def _is_remote(repository: str) -> bool:
    return repository.startswith(("http://", "https://"))


def artifact_path(group: str, artifact: str, version: str, extension: str = "jar") -> str:
    """Relative path of an artifact file inside a Maven2-layout repository."""
    return f"{group.replace('.', '/')}/{artifact}/{version}/{artifact}-{version}.{extension}"


def metadata_path(group: str, artifact: str) -> str:
    """Relative path of the ``maven-metadata.xml`` listing an artifact's versions."""
    return f"{group.replace('.', '/')}/{artifact}/{Constants.MAVEN_METADATA_FILE}"


def parse_metadata_versions(text: str) -> List[str]:
    """Extract ``versioning/versions/version`` values from maven-metadata.xml."""
    root = ET.fromstring(text)
    versions: List[str] = []
    versioning = root.find("versioning")
    if versioning is not None:
        versions_elem = versioning.find("versions")
        if versions_elem is not None:
            for version_elem in versions_elem.findall("version"):
                ver_text = version_elem.text
                if ver_text:
                    versions.append(ver_text.strip())
    return versions


def _read_metadata(repository: str, relative: str) -> Optional[str]:
    if _is_remote(repository):
        url = f"{repository.rstrip('/')}/{relative}"
        status_code, _, text = http_client.robust_get(url)
        if status_code != 200 or not text:
            logger.debug("No metadata at %s (status %s)", safe_url(url), status_code)
            return None
        return text
    local = location_path(repository) / relative
    if not local.is_file():
        return None
    return local.read_text(encoding="utf-8")


def fetch_available_versions(repositories: Sequence[str], group: str, artifact: str) -> List[str]:
    """List every version of ``group:artifact`` published in the repositories.

    Unreachable repositories and unparsable metadata are skipped; the result is
    empty when nothing could be read.
    """
    versions: List[str] = []
    for repository in repositories:
        try:
            text = _read_metadata(repository, metadata_path(group, artifact))
        except UnicodeDecodeError:
            logger.warning("Undecodable maven-metadata.xml for %s:%s in %s", group, artifact, repository)
            continue
        if text is None:
            continue
        try:
            found = parse_metadata_versions(text)
        except ET.ParseError:
            logger.warning("Malformed maven-metadata.xml for %s:%s in %s", group, artifact, repository)
            continue
        versions.extend(v for v in found if v not in versions)
    return versions


class MavenRepositoryResolver:
    """Resolve coordinates to jars fetched from Maven2-layout repositories.

    Repositories are tried in order; entries may be ``http(s)`` URLs or local
    directories. Downloads are cached under ``cache_dir`` using the same
    layout, and cached files are reused.
    """

    def __init__(self, repositories: Optional[Sequence[str]] = None, cache_dir=None):
        self.repositories = list(repositories or [Constants.REPOSITORY_URL_MAVEN])
        self.cache_dir = Path(cache_dir) if cache_dir else Path.home() / ".avail" / "cache"

    def resolve(self, coordinates: Sequence[str]) -> List[Path]:
        return [self.resolve_one(coordinate) for coordinate in coordinates]

    def resolve_one(self, coordinate: str) -> Path:
        group, artifact, version = split_coordinates(coordinate)
        relative = artifact_path(group, artifact, version)
        cached = self.cache_dir / relative
        if cached.is_file():
            if is_debug_enabled(logger):
                logger.debug(
                    "Dependency cache hit",
                    extra=extra_context(
                        event="cache_hit", component="resolver", action="resolve", target=coordinate
                    ),
                )
            return cached

        errors = []
        for repository in self.repositories:
            if _is_remote(repository):
                url = f"{repository.rstrip('/')}/{relative}"
                status_code, error = http_client.download_file(url, cached)
                if status_code == 200:
                    logger.info("Downloaded %s from %s", coordinate, safe_url(repository))
                    return cached
                errors.append(f"{safe_url(url)}: {error}")
            else:
                source = location_path(repository) / relative
                if source.is_file():
                    cached.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copyfile(source, cached)
                    logger.info("Copied %s from %s", coordinate, repository)
                    return cached
                errors.append(f"{source}: not found")

        raise DependencyResolutionError(
            f"Could not resolve {coordinate}: " + "; ".join(errors)
        )
