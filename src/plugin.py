"""The Avail plugin: binds an AvailExtension to a project and registers its tasks."""
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from artifact.task import PackageAvailArtifactTask
from common.logging_utils import extra_context, is_debug_enabled, Timer
from config.extension import AvailExtension, ProjectContext
from constants import Constants, Tasks
from errors import ConfigurationError, DependencyResolutionError
from versioning.latest import check_for_newer_versions

logger = logging.getLogger(__name__)


@dataclass
class Task:
    """A named unit of work exposed by the plugin."""
    name: str
    group: str
    description: str
    action: Callable[[], Any]


class AvailPlugin:
    """Registers the Avail tasks for one project.

    Call ``apply`` once, then ``run`` tasks by name.
    """

    def __init__(self) -> None:
        self.project: Optional[ProjectContext] = None
        self.extension: Optional[AvailExtension] = None
        self.tasks: Dict[str, Task] = {}

    def apply(
        self,
        project: ProjectContext,
        extension: Optional[AvailExtension] = None,
        resolver=None,
    ) -> AvailExtension:
        """Create (or adopt) the project's extension and register the tasks."""
        self.project = project
        self.extension = extension or AvailExtension(project, resolver)
        if resolver is not None:
            self.extension.resolver = resolver
        self._register(
            Tasks.INITIALIZE.value,
            "Initialize the Avail Project. This sets up the roots directory, "
            "resolves Avail library dependencies and creates the configured roots.",
            self.initialize,
        )
        self._register(
            Tasks.PRINT_CONFIG.value,
            "Print the Avail configuration collected from the avail extension.",
            self.print_config,
        )
        self._register(
            Tasks.ARTIFACT_JAR.value,
            "Package the project's Avail roots and dependencies into an artifact jar.",
            self.extension.create_artifact,
        )
        self._register(
            Tasks.CHECK_VERSIONS.value,
            "Check the Avail runtime and library dependencies for newer releases.",
            self.check_versions,
        )
        return self.extension

    def _register(self, name: str, description: str, action: Callable[[], Any]) -> Task:
        task = Task(name, Constants.AVAIL, description, action)
        self.tasks[name] = task
        return task

    def add_artifact_task(self, task: PackageAvailArtifactTask) -> Task:
        """Expose a standalone packaging task under its own name."""
        def action() -> Path:
            resolver = self.extension.dependency_resolver() if task.dependencies else None
            return task.run(resolver)

        registered = Task(task.name, task.group, task.description, action)
        self.tasks[task.name] = registered
        return registered

    @property
    def task_names(self) -> List[str]:
        return sorted(self.tasks)

    def run(self, task_name: str) -> Any:
        """Run one registered task and return its result.

        Raises:
            ConfigurationError: if no task has that name.
        """
        task = self.tasks.get(task_name)
        if task is None:
            raise ConfigurationError(
                f"Unknown task {task_name!r}; available tasks: {', '.join(self.task_names)}"
            )
        if is_debug_enabled(logger):
            logger.debug(
                "Task start",
                extra=extra_context(event="function_entry", component="plugin", action=task_name),
            )
        with Timer() as timer:
            result = task.action()
        if is_debug_enabled(logger):
            logger.debug(
                "Task finished",
                extra=extra_context(
                    event="function_exit",
                    component="plugin",
                    action=task_name,
                    outcome="success",
                    duration_ms=timer.duration_ms(),
                ),
            )
        return result

    def initialize(self) -> List[Path]:
        """Set up the roots directory, fetch library roots and scaffold new roots.

        Returns the library jars copied into the roots directory.
        """
        extension = self.extension
        roots_directory = Path(extension.roots_directory)
        roots_directory.mkdir(parents=True, exist_ok=True)
        Path(extension.repository_directory).mkdir(parents=True, exist_ok=True)

        copied: List[Path] = []
        dependencies = extension.root_dependencies
        if dependencies:
            resolver = extension.dependency_resolver()
            for dependency in dependencies:
                resolved = resolver.resolve([dependency.dependency_string])
                if len(resolved) != 1:
                    raise DependencyResolutionError(
                        f"Expected one file for Avail library {dependency.dependency_string}, "
                        f"got {len(resolved)}"
                    )
                source = resolved[0]
                target = dependency.resolved_file_path(extension.roots_directory)
                if Path(source).resolve() != target.resolve():
                    shutil.copyfile(source, target)
                logger.info("Installed Avail library %s at %s", dependency.dependency_string, target)
                copied.append(target)

        for root in extension.create_roots.values():
            root.create(extension.module_header_comment_body)
        for root in extension.roots.values():
            if root.action is not None:
                root.action(root)
        return copied

    def print_config(self) -> str:
        text = self.extension.printable_config
        print(text)
        return text

    def check_versions(self) -> List[str]:
        advisories = check_for_newer_versions(self.extension)
        if not advisories:
            logger.info("All Avail dependencies are up to date.")
        return advisories
