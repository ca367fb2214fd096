"""Load a project's Avail configuration from a YAML or JSON file.

The file has a ``project`` section describing the host project and an
``avail`` section mirroring the ``AvailExtension`` settings::

    project:
      name: sample
      version: 1.0.0
    avail:
      stdlib: {version: 2.0.0.alpha20}
      libraries:
        - {name: util, dependency: "org.example:util:1.2.0"}
      create_roots:
        - name: my-root
          modules: [Main]
          module_packages:
            - {name: Tools, modules: [Strings]}
      artifact:
        version: 1.0.0
        files: [{path: extras/README.md, target: docs}]

Standalone packaging tasks are listed under ``tasks``.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from artifact.manifest import ArtifactType, JvmComponent
from artifact.task import PackageAvailArtifactTask
from constants import Constants
from errors import ConfigurationError
from .extension import AvailExtension, ProjectContext

logger = logging.getLogger(__name__)

_URI_SCHEMES = ("jar:", "file:", "http://", "https://")


@dataclass
class ProjectConfig:
    """Everything read from one project file."""
    project: ProjectContext
    extension: AvailExtension
    tasks: List[PackageAvailArtifactTask] = field(default_factory=list)


def _read(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f)


def _mapping(value: Any, where: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"Expected a mapping for {where}, got {type(value).__name__}")
    return value


def _list(value: Any, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigurationError(f"Expected a list for {where}, got {type(value).__name__}")
    return value


def _require(entry: Dict[str, Any], key: str, where: str) -> Any:
    if entry.get(key) in (None, ""):
        raise ConfigurationError(f"Missing required '{key}' in {where}")
    return entry[key]


def _resolve(base: Path, value: str) -> str:
    """Resolve a path relative to the config file; URIs pass through."""
    value = str(value)
    if value.startswith("jar:"):
        return "jar:" + _resolve(base, value[len("jar:"):])
    if value.startswith(_URI_SCHEMES):
        return value
    path = Path(value).expanduser()
    return str(path if path.is_absolute() else base / path)


def _add_modules(container, settings: Dict[str, Any], where: str) -> None:
    for module in _list(settings.get("modules"), f"{where}.modules"):
        if isinstance(module, str):
            container.add_module(module)
        else:
            module = _mapping(module, f"{where}.modules")
            container.add_module(
                _require(module, "name", f"{where}.modules"),
                module.get("extension", Constants.DEFAULT_MODULE_EXTENSION),
            )
    for package_settings in _list(settings.get("module_packages"), f"{where}.module_packages"):
        if isinstance(package_settings, str):
            container.add_module_package(package_settings)
            continue
        package_settings = _mapping(package_settings, f"{where}.module_packages")
        name = _require(package_settings, "name", f"{where}.module_packages")
        package = container.add_module_package(
            name, package_settings.get("extension", Constants.DEFAULT_MODULE_EXTENSION)
        )
        _add_modules(package, package_settings, f"{where}.{name}")


def _root_kwargs(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "avail_module_extensions": _list(
            entry.get("extensions", [Constants.DEFAULT_MODULE_EXTENSION]), "extensions"
        ),
        "entry_points": _list(entry.get("entry_points"), "entry_points"),
        "description": entry.get("description", ""),
    }


def _configure_artifact(extension: AvailExtension, settings: Dict[str, Any], base: Path) -> None:
    artifact = extension.package_avail_artifact
    if "artifact_type" in settings:
        artifact.artifact_type = ArtifactType.parse(settings["artifact_type"])
    if "jvm_component" in settings:
        artifact.jvm_component = JvmComponent.from_dict(
            _mapping(settings["jvm_component"], "artifact.jvm_component")
        )
    for key, attribute in (
        ("digest_algorithm", "digest_algorithm"),
        ("artifact_name", "artifact_name"),
        ("version", "version"),
        ("main_class", "jar_manifest_main_class"),
        ("implementation_title", "implementation_title"),
    ):
        if key in settings:
            setattr(artifact, attribute, str(settings[key]))
    if settings.get("output_directory"):
        artifact.output_directory = _resolve(base, settings["output_directory"]).rstrip("/") + "/"
    for entry in _list(settings.get("files"), "artifact.files"):
        entry = _mapping(entry, "artifact.files")
        artifact.add_file(
            _resolve(base, _require(entry, "path", "artifact.files")), entry.get("target", "")
        )
    for jar in _list(settings.get("jars"), "artifact.jars"):
        artifact.add_jar(_resolve(base, jar))
    for zip_file in _list(settings.get("zips"), "artifact.zips"):
        artifact.add_zip_file(_resolve(base, zip_file))
    for directory in _list(settings.get("directories"), "artifact.directories"):
        artifact.add_directory(_resolve(base, directory))
    for dependency in _list(settings.get("dependencies"), "artifact.dependencies"):
        artifact.dependency(str(dependency))


def _build_task(entry: Dict[str, Any], build_dir: Path, base: Path, resolver) -> PackageAvailArtifactTask:
    settings = dict(entry)
    task = PackageAvailArtifactTask(_require(settings, "name", "tasks"), build_dir, resolver)
    settings.pop("name")
    roots = []
    for root in _list(settings.pop("roots", None), f"tasks.{task.name}.roots"):
        root = dict(_mapping(root, f"tasks.{task.name}.roots"))
        root["uri"] = _resolve(base, _require(root, "uri", f"tasks.{task.name}.roots"))
        roots.append(root)
    settings["roots"] = roots
    return task.configure(settings)


def configure_extension(extension: AvailExtension, settings: Dict[str, Any], base: Path) -> AvailExtension:
    """Apply an ``avail`` settings mapping to ``extension``."""
    settings = _mapping(settings, "avail")
    if settings.get("roots_directory"):
        extension.set_roots_directory(_resolve(base, settings["roots_directory"]))
    if settings.get("repository_directory"):
        extension.repository_directory = _resolve(base, settings["repository_directory"])
    if settings.get("dependency_cache_directory"):
        extension.dependency_cache_directory = _resolve(base, settings["dependency_cache_directory"])
    if "repositories" in settings:
        extension.repositories = [
            _resolve(base, repository) for repository in _list(settings["repositories"], "repositories")
        ]
    if settings.get("runtime_version"):
        extension.runtime_version = str(settings["runtime_version"])
    if settings.get("module_header_comment_body"):
        extension.module_header_comment_body = str(settings["module_header_comment_body"])
    if settings.get("module_header_comment_body_file"):
        header_file = _resolve(base, settings["module_header_comment_body_file"])
        try:
            extension.set_module_header_comment_body_file(header_file)
        except OSError as exc:
            raise ConfigurationError(f"Cannot read module header file {header_file}: {exc}") from exc

    if settings.get("stdlib"):
        stdlib = settings["stdlib"]
        if isinstance(stdlib, dict):
            extension.include_std_avail_lib_dependency(
                str(_require(stdlib, "version", "stdlib")),
                stdlib.get("name", Constants.AVAIL_STDLIB_ROOT_NAME),
            )
        else:
            extension.include_std_avail_lib_dependency(str(stdlib))
    for entry in _list(settings.get("libraries"), "libraries"):
        entry = _mapping(entry, "libraries")
        extension.include_avail_lib_dependency(
            _require(entry, "name", "libraries"), str(_require(entry, "dependency", "libraries"))
        )
    for entry in _list(settings.get("roots"), "roots"):
        entry = _mapping(entry, "roots")
        uri = entry.get("uri")
        extension.root(
            _require(entry, "name", "roots"),
            _resolve(base, uri) if uri else None,
            **_root_kwargs(entry),
        )
    for entry in _list(settings.get("create_roots"), "create_roots"):
        entry = _mapping(entry, "create_roots")
        name = _require(entry, "name", "create_roots")
        root = extension.create_root(name, **_root_kwargs(entry))
        _add_modules(root.pending, entry, f"create_roots.{name}")
    if settings.get("artifact"):
        _configure_artifact(extension, _mapping(settings["artifact"], "artifact"), base)
    return extension


def load_project_config(path, resolver=None) -> ProjectConfig:
    """Read a project file and build the project, its extension and tasks.

    Raises:
        ConfigurationError: if the file is missing, unreadable or malformed.
    """
    config_path = Path(path).absolute()
    if not config_path.is_file():
        raise ConfigurationError(f"Config file not found: {config_path}")
    try:
        data = _read(config_path)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Failed to parse {config_path}: {exc}") from exc
    data = _mapping(data, str(config_path))
    base = config_path.parent

    project_settings = _mapping(data.get("project"), "project")
    build_dir: Optional[str] = project_settings.get("build_dir")
    project = ProjectContext(
        name=str(project_settings.get("name") or base.name),
        version=str(project_settings.get("version") or ""),
        project_dir=base,
        build_dir=Path(_resolve(base, build_dir)) if build_dir else None,
    )
    extension = AvailExtension(project, resolver)
    if project_settings.get("description"):
        extension.project_description = str(project_settings["description"])
    configure_extension(extension, data.get("avail"), base)

    tasks = [
        _build_task(_mapping(entry, "tasks"), project.build_dir, base, resolver)
        for entry in _list(data.get("tasks"), "tasks")
    ]
    logger.debug("Loaded project %s from %s", project.name, config_path)
    return ProjectConfig(project, extension, tasks)
