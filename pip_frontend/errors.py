"""Exception types raised by pip-frontend.

A non-zero exit code from pip is not an exception: it is reported through
``ProcessResult.exit_code`` and the boolean results of the manager.
"""


class PipFrontendError(Exception):
    """Base class for pip-frontend errors."""


class NotRunnableError(PipFrontendError):
    """The interpreter configuration cannot launch a process."""

    def __init__(self, path, reason: str = "executable not found"):
        super().__init__(f"Cannot run {path}: {reason}")
        self.path = path
        self.reason = reason


class OperationCanceledError(PipFrontendError):
    """The user declined a confirmation prompt."""


class ElevationUnavailableError(PipFrontendError):
    """Elevation was requested but cannot be performed on this platform."""


class BootstrapDownloadError(PipFrontendError):
    """The pip bootstrap script could not be downloaded."""
