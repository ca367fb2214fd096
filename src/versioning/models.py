"""Data models for version families and comparison."""

from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from itertools import zip_longest
from typing import Optional, Tuple

import semantic_version


class VersionFamily(Enum):
    """Enum for the independently versioned Avail components."""
    LIBRARY = "library"  # plain dotted numeric, e.g. Avail libraries
    RUNTIME = "runtime"  # dotted numeric with an optional pre-release suffix


def _identifier(part: str) -> str:
    if part.isdigit():
        return str(int(part))
    return "".join(c if c.isalnum() or c == "-" else "-" for c in part) or "0"


def _prerelease_key(suffix: str) -> semantic_version.Version:
    # Only the pre-release part matters; the numeric core is compared separately.
    identifiers = tuple(_identifier(part) for part in suffix.split("."))
    return semantic_version.Version(major=0, minor=0, patch=0, prerelease=identifiers)


@total_ordering
@dataclass(frozen=True)
class VersionTuple:
    """Parsed, comparable version.

    Numeric components compare element-wise with the shorter tuple padded
    with zeros. When the numbers tie, a version without suffix is newer than
    one carrying a pre-release suffix.
    """
    numbers: Tuple[int, ...]
    suffix: Optional[str] = None
    raw: str = field(default="", compare=False)

    def _numeric_cmp(self, other: "VersionTuple") -> int:
        for mine, theirs in zip_longest(self.numbers, other.numbers, fillvalue=0):
            if mine != theirs:
                return -1 if mine < theirs else 1
        return 0

    def _cmp(self, other: "VersionTuple") -> int:
        result = self._numeric_cmp(other)
        if result:
            return result
        if self.suffix == other.suffix:
            return 0
        if self.suffix is None:
            return 1
        if other.suffix is None:
            return -1
        mine, theirs = _prerelease_key(self.suffix), _prerelease_key(other.suffix)
        if mine == theirs:
            return 0
        return -1 if mine < theirs else 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionTuple):
            return NotImplemented
        return self._cmp(other) == 0

    def __lt__(self, other: "VersionTuple") -> bool:
        if not isinstance(other, VersionTuple):
            return NotImplemented
        return self._cmp(other) < 0

    def __hash__(self) -> int:
        trimmed = list(self.numbers)
        while trimmed and trimmed[-1] == 0:
            trimmed.pop()
        suffix_key = _prerelease_key(self.suffix).prerelease if self.suffix else None
        return hash((tuple(trimmed), suffix_key))

    def __str__(self) -> str:
        if self.raw:
            return self.raw
        text = ".".join(str(n) for n in self.numbers)
        return f"{text}-{self.suffix}" if self.suffix else text
