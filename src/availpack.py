"""availpack: Avail project initialization and artifact packaging.

Loads the project file, applies the Avail plugin and runs the requested task.
"""

import logging
import os
import sys
import zipfile

from args import COMMANDS, parse_args
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from config.loader import load_project_config
from constants import Constants, ExitCodes
from errors import ConfigurationError, DependencyResolutionError, UnsupportedDependencyError
from plugin import AvailPlugin


def run_task(config_path: str, task_name: str):
    """Load ``config_path`` and run one plugin task; exceptions propagate."""
    config = load_project_config(config_path)
    plugin = AvailPlugin()
    plugin.apply(config.project, config.extension)
    for task in config.tasks:
        plugin.add_artifact_task(task)
    return plugin.run(task_name)


def main(argv=None):
    """Main function of the program."""
    logger = logging.getLogger(__name__)

    args = parse_args(argv)
    # Honor CLI --loglevel by passing it to centralized logger via env
    if getattr(args, "LOG_LEVEL", None):
        os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()
    if getattr(args, "LOG_FILE", None):
        add_file_handler(args.LOG_FILE)

    task_name = args.TASK if args.COMMAND == "run" else COMMANDS[args.COMMAND]
    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main", target=task_name)
        )

    try:
        run_task(args.CONFIG, task_name)
    except DependencyResolutionError as exc:
        logging.error("Dependency resolution failed: %s", exc)
        sys.exit(ExitCodes.CONNECTION_ERROR.value)
    except ConfigurationError as exc:
        logging.error("Configuration error: %s", exc)
        sys.exit(ExitCodes.CONFIG_ERROR.value)
    except (UnsupportedDependencyError, zipfile.BadZipFile, ValueError) as exc:
        logging.error("Build failed: %s", exc)
        sys.exit(ExitCodes.BUILD_ERROR.value)
    except OSError as exc:
        logging.error("File error: %s", exc)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main", outcome="success")
        )
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
