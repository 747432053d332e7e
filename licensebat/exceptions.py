"""Custom exceptions for licensebat."""


class LicensebatError(Exception):
    """Base exception for all licensebat errors."""

    pass


class ConfigurationError(LicensebatError):
    """Exception raised when configuration is invalid."""

    pass


class ScanError(LicensebatError):
    """Exception raised when a check cannot start or complete."""

    pass


class UnsupportedDependencyFileError(ScanError):
    """Exception raised when no collector handles a dependency file."""

    pass


class ParseError(ScanError):
    """Exception raised when a lockfile is structurally invalid."""

    pass


class RetrievalError(LicensebatError):
    """Exception raised while retrieving a single dependency.

    Retrievers never let this escape: it is captured into the
    resulting RetrievedDependency.
    """

    pass
