"""Exception hierarchy for the Avail packaging tool."""


class AvailPluginException(Exception):
    """Base class for every failure raised by availpack."""


class ConfigurationError(AvailPluginException):
    """Raised when the project configuration is malformed.

    Covers malformed dependency coordinates, unknown digest algorithms and
    project files that cannot be read or interpreted.
    """


class VersionFormatError(ConfigurationError):
    """Raised when a version string does not fit its version family."""


class DependencyResolutionError(AvailPluginException):
    """Raised when a declared dependency cannot be fetched from any repository."""


class UnsupportedDependencyError(AvailPluginException):
    """Raised when a resolved dependency is not a jar, a zip or a directory."""
