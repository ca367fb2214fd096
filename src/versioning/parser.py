"""Version parsing utilities for the library and runtime version families."""

import re
from typing import Iterable, Optional

from packaging import version as pep440

from errors import VersionFormatError
from .models import VersionFamily, VersionTuple

_RUNTIME_PATTERN = re.compile(
    r"^(?P<numbers>\d+(?:\.\d+)*)"
    r"(?:[-.+_]?(?P<suffix>[A-Za-z][0-9A-Za-z.\-_]*)"
    r"|-(?P<numeric_suffix>\d[0-9A-Za-z.\-_]*))?$"
)


def parse_library_version(text: str) -> VersionTuple:
    """Parse a plain dotted numeric version such as ``"1.2.3"``.

    Raises:
        VersionFormatError: if the text is not purely numeric release segments.
    """
    raw = (text or "").strip()
    try:
        parsed = pep440.Version(raw)
    except pep440.InvalidVersion as exc:
        raise VersionFormatError(f"Invalid library version: {text!r}") from exc
    if parsed.epoch or parsed.pre or parsed.post is not None or parsed.dev is not None or parsed.local:
        raise VersionFormatError(
            f"Library versions must be dotted numbers, got {text!r}"
        )
    return VersionTuple(numbers=tuple(parsed.release), raw=raw)


def parse_runtime_version(text: str) -> VersionTuple:
    """Parse a dotted numeric version with an optional suffix.

    Accepts forms such as ``"2.0.0.alpha20"``, ``"1.6.1-SNAPSHOT"`` and
    ``"2.0.0-rc.1"``.

    Raises:
        VersionFormatError: if no leading numeric component is present.
    """
    raw = (text or "").strip()
    match = _RUNTIME_PATTERN.match(raw)
    if not match:
        raise VersionFormatError(f"Invalid runtime version: {text!r}")
    numbers = tuple(int(part) for part in match.group("numbers").split("."))
    suffix = match.group("suffix") or match.group("numeric_suffix")
    return VersionTuple(numbers=numbers, suffix=suffix, raw=raw)


def parse_version(text: str, family: VersionFamily) -> VersionTuple:
    """Parse ``text`` according to the rules of ``family``."""
    if family == VersionFamily.LIBRARY:
        return parse_library_version(text)
    return parse_runtime_version(text)


def is_newer(candidate: str, current: str, family: VersionFamily) -> bool:
    """Return True when ``candidate`` is strictly newer than ``current``."""
    return parse_version(candidate, family) > parse_version(current, family)


def latest_of(candidates: Iterable[str], family: VersionFamily) -> Optional[str]:
    """Return the newest candidate, skipping strings that do not parse."""
    best: Optional[VersionTuple] = None
    for candidate in candidates:
        try:
            parsed = parse_version(candidate, family)
        except VersionFormatError:
            continue
        if best is None or parsed > best:
            best = parsed
    return str(best) if best is not None else None
