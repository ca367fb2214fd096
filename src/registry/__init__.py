"""Dependency resolution against Maven repositories."""

from .resolver import DependencyResolver, StaticResolver
from .repository import MavenRepositoryResolver, fetch_available_versions

__all__ = [
    "DependencyResolver",
    "StaticResolver",
    "MavenRepositoryResolver",
    "fetch_available_versions",
]
