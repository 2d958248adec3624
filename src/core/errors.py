"""Exception types shared by the download core, the dependency probe and the API layer."""

from __future__ import annotations


class DLConsoleError(Exception):
    """Base class for all errors raised by the control plane."""


class ValidationError(DLConsoleError):
    """Raised when a download request has an unusable URL or shape."""


class AuthenticationError(DLConsoleError):
    """Raised when no catalog token can be obtained."""


class DependencyError(DLConsoleError):
    """Raised when probing or installing an external tool fails.

    Parameters
    ----------
    message : str
        Human-readable description of the failure.
    command : list[str] | None
        The command line that failed, when the failure came from a subprocess.

    """

    def __init__(self, message: str, command: list[str] | None = None) -> None:
        super().__init__(message)
        self.command = command


class StreamingUnsupportedError(DLConsoleError):
    """Raised when the transport cannot push server-sent events."""


class SessionExistsError(DLConsoleError):
    """Raised when a session id is registered twice."""


class ConfigError(DLConsoleError):
    """Raised when the configuration document cannot be read or written."""
