"""Data models for the Avail artifact manifest embedded in every artifact jar."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from constants import Constants
from errors import ConfigurationError

# Java security provider names mapped to hashlib constructor names.
_JAVA_DIGEST_NAMES = {
    "MD5": "md5",
    "SHA": "sha1",
    "SHA-1": "sha1",
    "SHA-224": "sha224",
    "SHA-256": "sha256",
    "SHA-384": "sha384",
    "SHA-512": "sha512",
    "SHA-512/224": "sha512_224",
    "SHA-512/256": "sha512_256",
    "SHA3-224": "sha3_224",
    "SHA3-256": "sha3_256",
    "SHA3-384": "sha3_384",
    "SHA3-512": "sha3_512",
}


def digest_factory(algorithm: str) -> Callable[[], Any]:
    """Return a zero-argument constructor for the named digest algorithm.

    Accepts Java style names (``"SHA-256"``) as well as hashlib names
    (``"sha256"``).

    Raises:
        ConfigurationError: if the runtime offers no such algorithm.
    """
    name = _JAVA_DIGEST_NAMES.get((algorithm or "").strip().upper(), (algorithm or "").strip().lower())
    if not name or name not in hashlib.algorithms_available:
        raise ConfigurationError(f"Unsupported digest algorithm: {algorithm!r}")
    return lambda: hashlib.new(name)


class ArtifactType(Enum):
    """The kind of Avail artifact being packaged."""
    LIBRARY = "LIBRARY"
    APPLICATION = "APPLICATION"

    @classmethod
    def parse(cls, value: str) -> "ArtifactType":
        """Look up an artifact type by case-insensitive name."""
        try:
            return cls[str(value).strip().upper()]
        except KeyError as exc:
            choices = ", ".join(t.name for t in cls)
            raise ConfigurationError(
                f"Unknown artifact type {value!r}; expected one of {choices}"
            ) from exc


@dataclass
class JvmComponent:
    """Describes the JVM content packaged alongside the Avail roots."""
    has_jvm_components: bool = False
    description: str = ""
    mains: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jvmComponents": self.has_jvm_components,
            "description": self.description,
            "mains": dict(self.mains),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "JvmComponent":
        if not data:
            return cls.none()
        return cls(
            has_jvm_components=bool(data.get("jvmComponents", data.get("has_jvm_components", False))),
            description=str(data.get("description", "")),
            mains={str(k): str(v) for k, v in (data.get("mains") or {}).items()},
        )

    @classmethod
    def none(cls) -> "JvmComponent":
        """The component used when the artifact carries no JVM code."""
        return cls()


@dataclass
class AvailManifestRoot:
    """Per-root metadata record stored in the artifact manifest."""
    name: str
    avail_module_extensions: List[str] = field(
        default_factory=lambda: [Constants.DEFAULT_MODULE_EXTENSION]
    )
    entry_points: List[str] = field(default_factory=list)
    description: str = ""
    digest_algorithm: str = Constants.DEFAULT_DIGEST_ALGORITHM
    digests: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "availModuleExtensions": list(self.avail_module_extensions),
            "entryPoints": list(self.entry_points),
            "description": self.description,
            "digestAlgorithm": self.digest_algorithm,
            "digests": dict(sorted(self.digests.items())),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AvailManifestRoot":
        return cls(
            name=data["name"],
            avail_module_extensions=list(data.get("availModuleExtensions", [])),
            entry_points=list(data.get("entryPoints", [])),
            description=data.get("description", ""),
            digest_algorithm=data.get("digestAlgorithm", Constants.DEFAULT_DIGEST_ALGORITHM),
            digests=dict(data.get("digests", {})),
        )


@dataclass
class AvailRootArtifactTarget:
    """A root location paired with the manifest record describing it."""
    uri: str
    manifest_root: AvailManifestRoot

    @property
    def root_name(self) -> str:
        return self.manifest_root.name


@dataclass
class AvailArtifactManifest:
    """The manifest describing an entire Avail artifact."""
    artifact_type: ArtifactType
    roots: Dict[str, AvailManifestRoot]
    description: str = ""
    jvm_component: JvmComponent = field(default_factory=JvmComponent.none)
    manifest_version: int = Constants.ARTIFACT_MANIFEST_VERSION
    constructed: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(timespec="seconds")
    )

    def to_json(self) -> str:
        payload = {
            "availArtifactManifestVersion": self.manifest_version,
            "artifactType": self.artifact_type.value,
            "constructed": self.constructed,
            "description": self.description,
            "jvmComponent": self.jvm_component.to_dict(),
            "roots": {name: root.to_dict() for name, root in self.roots.items()},
        }
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_json(cls, text: str) -> "AvailArtifactManifest":
        data = json.loads(text)
        return cls(
            artifact_type=ArtifactType.parse(data["artifactType"]),
            roots={
                name: AvailManifestRoot.from_dict(root)
                for name, root in data.get("roots", {}).items()
            },
            description=data.get("description", ""),
            jvm_component=JvmComponent.from_dict(data.get("jvmComponent")),
            manifest_version=int(data.get("availArtifactManifestVersion", Constants.ARTIFACT_MANIFEST_VERSION)),
            constructed=data.get("constructed", ""),
        )
