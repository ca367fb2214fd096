"""Avail roots: source trees, roots to scaffold and library roots."""

from .models import (
    AvailModule,
    AvailModulePackage,
    AvailRoot,
    PendingCreation,
)
from .library import AvailLibraryDependency, AvailStandardLibrary, split_coordinates

__all__ = [
    "AvailModule",
    "AvailModulePackage",
    "AvailRoot",
    "PendingCreation",
    "AvailLibraryDependency",
    "AvailStandardLibrary",
    "split_coordinates",
]
