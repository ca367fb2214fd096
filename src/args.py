"""Argument parsing functionality for availpack."""

import argparse
from constants import Constants, Tasks

# Subcommand name -> plugin task name
COMMANDS = {
    "initialize": Tasks.INITIALIZE.value,
    "print-config": Tasks.PRINT_CONFIG.value,
    "artifact": Tasks.ARTIFACT_JAR.value,
    "check-versions": Tasks.CHECK_VERSIONS.value,
}


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="availpack",
        description=(
            "availpack - Avail project initialization and artifact packaging"
        ),
        add_help=True,
    )

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help=f"Path to the project file, YAML or JSON (default: {Constants.DEFAULT_CONFIG_FILE})",
                        action="store",
                        type=str,
                        default=Constants.DEFAULT_CONFIG_FILE)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True
    subparsers.add_parser("initialize",
                          help="Create the roots directory, install Avail libraries and scaffold new roots")
    subparsers.add_parser("print-config",
                          help="Print the collected Avail configuration")
    subparsers.add_parser("artifact",
                          help="Package the Avail roots and dependencies into an artifact jar")
    subparsers.add_parser("check-versions",
                          help="Warn about newer releases of the Avail runtime and libraries")
    run_parser = subparsers.add_parser("run",
                                       help="Run any registered task by name")
    run_parser.add_argument("TASK",
                            help="Task name, e.g. availArtifactJar or a task from the project file",
                            type=str)

    return parser.parse_args(argv)
