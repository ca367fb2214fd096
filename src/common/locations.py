"""Helpers for interpreting root location strings."""
from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlsplit

JAR_SCHEME = "jar:"


def is_jar_location(uri: str) -> bool:
    """True when the location references an archive rather than a directory."""
    return uri.startswith(JAR_SCHEME)


def location_path(uri: str) -> Path:
    """Return the local filesystem path a root location points at.

    Plain paths are returned as-is; ``file:`` URIs are decoded and a ``jar:``
    prefix is stripped so the path names the archive itself.
    """
    location = uri[len(JAR_SCHEME):] if is_jar_location(uri) else uri
    if location.startswith("file:"):
        return Path(unquote(urlsplit(location).path))
    return Path(location)
