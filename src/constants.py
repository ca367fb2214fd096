"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    CONFIG_ERROR = 3
    BUILD_ERROR = 4


class Tasks(Enum):
    """Task names registered by the Avail plugin.

    Args:
        Enum (string): Task names as exposed to the command line.
    """

    INITIALIZE = "initializeAvail"
    PRINT_CONFIG = "printAvailConfig"
    ARTIFACT_JAR = "availArtifactJar"
    CHECK_VERSIONS = "checkAvailVersions"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    AVAIL = "avail"
    DEFAULT_CONFIG_FILE = "avail.yaml"
    DEFAULT_ROOTS_DIRECTORY = ".avail/roots"
    DEFAULT_REPOSITORY_DIRECTORY = ".avail/repositories"
    DEFAULT_DEPENDENCY_CACHE = ".avail/dependencies"
    DEFAULT_BUILD_DIRECTORY = "build"
    DEFAULT_MODULE_EXTENSION = "avail"
    DEFAULT_DIGEST_ALGORITHM = "SHA-256"

    # Maven coordinates of published Avail components
    AVAIL_DEP_GROUP = "org.availlang"
    AVAIL_RUNTIME_ARTIFACT = "avail"
    AVAIL_STDLIB_ARTIFACT = "avail-stdlib"
    AVAIL_STDLIB_ROOT_NAME = "avail"

    # Artifact layout
    ARTIFACT_ROOTS_DIRECTORY = "Avail-Sources"
    ARTIFACT_MANIFEST_PATH = "META-INF/avail/avail-artifact-manifest.json"
    JAR_MANIFEST_PATH = "META-INF/MANIFEST.MF"
    ARTIFACT_MANIFEST_VERSION = 1
    CREATED_BY = "availpack"

    REPOSITORY_URL_MAVEN = "https://repo1.maven.org/maven2"
    MAVEN_METADATA_FILE = "maven-metadata.xml"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "AVAILPACK_LOG_LEVEL"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
