"""pip-frontend - locate and drive pip for a Python interpreter."""

from .errors import (
    BootstrapDownloadError,
    ElevationUnavailableError,
    NotRunnableError,
    OperationCanceledError,
    PipFrontendError,
)
from .interpreter import InterpreterConfiguration, ToolInvocation, ToolLocator
from .manager import ConfirmResult, ConsoleConfirmationGate, PackageManager
from .output import ConsoleOutputSink, OutputSink, RecordingOutputSink
from .preferences import Preferences, load_preferences
from .runner import ProcessResult, ProcessRunner

__version__ = "0.1.0"

__all__ = [
    "BootstrapDownloadError",
    "ElevationUnavailableError",
    "NotRunnableError",
    "OperationCanceledError",
    "PipFrontendError",
    "InterpreterConfiguration",
    "ToolInvocation",
    "ToolLocator",
    "ConfirmResult",
    "ConsoleConfirmationGate",
    "PackageManager",
    "ConsoleOutputSink",
    "OutputSink",
    "RecordingOutputSink",
    "Preferences",
    "load_preferences",
    "ProcessResult",
    "ProcessRunner",
]
