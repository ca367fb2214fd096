"""Advisory checks for newer published versions of Avail dependencies."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence

from constants import Constants
from errors import VersionFormatError
from common.logging_utils import extra_context, is_debug_enabled
from .models import VersionFamily
from .parser import is_newer, latest_of

if TYPE_CHECKING:
    from config.extension import AvailExtension

logger = logging.getLogger(__name__)

VersionLookup = Callable[[str, str], Sequence[str]]


def _check_one(
    label: str,
    group: str,
    artifact: str,
    current: str,
    family: VersionFamily,
    lookup: VersionLookup,
) -> Optional[str]:
    available = list(lookup(group, artifact))
    if not available:
        logger.info("No published versions found for %s:%s", group, artifact)
        return None
    latest = latest_of(available, family)
    if latest is None:
        logger.info("None of the published versions of %s:%s could be parsed", group, artifact)
        return None
    try:
        newer = is_newer(latest, current, family)
    except VersionFormatError as exc:
        logger.info("Skipping version check for %s: %s", label, exc)
        return None
    if is_debug_enabled(logger):
        logger.debug(
            "Compared versions",
            extra=extra_context(
                event="decision",
                component="versioning",
                action="check_for_newer_versions",
                target=f"{group}:{artifact}",
                outcome="newer" if newer else "current",
            ),
        )
    if not newer:
        return None
    return f"{label} {current} is not the latest version (latest: {latest})"


def check_for_newer_versions(
    extension: "AvailExtension", lookup: Optional[VersionLookup] = None
) -> List[str]:
    """Report every declared Avail dependency that has a newer release.

    Library dependencies are compared as plain dotted versions and the Avail
    runtime as a suffixed version. Each advisory is logged as a warning and
    returned; nothing here raises on lookup, decoding or parse problems.
    """
    if lookup is None:
        # Imported here so the version models never pull in the HTTP stack.
        from registry.repository import fetch_available_versions  # pylint: disable=import-outside-toplevel

        def lookup(group: str, artifact: str) -> Sequence[str]:
            return fetch_available_versions(extension.repositories, group, artifact)

    checks = [
        (
            f'Avail library "{dependency.name}" ({dependency.group}:{dependency.artifact_name})',
            dependency.group,
            dependency.artifact_name,
            dependency.version,
            VersionFamily.LIBRARY,
        )
        for dependency in extension.root_dependencies
    ]
    if extension.runtime_version:
        checks.append(
            (
                "Avail runtime",
                Constants.AVAIL_DEP_GROUP,
                Constants.AVAIL_RUNTIME_ARTIFACT,
                extension.runtime_version,
                VersionFamily.RUNTIME,
            )
        )

    advisories: List[str] = []
    for label, group, artifact, current, family in checks:
        try:
            advisory = _check_one(label, group, artifact, current, family, lookup)
        except (OSError, ValueError) as exc:
            logger.info("Could not look up versions of %s:%s: %s", group, artifact, exc)
            continue
        if advisory:
            logger.warning(advisory)
            advisories.append(advisory)
    return advisories
