"""Manager module - pip operations and confirmation workflows."""

from .confirmation import ConfirmationGate, ConfirmResult, ConsoleConfirmationGate, ask
from .freeze import probe_tool_version, scan_site_packages
from .package_manager import PackageManager

__all__ = [
    "ConfirmationGate",
    "ConfirmResult",
    "ConsoleConfirmationGate",
    "ask",
    "probe_tool_version",
    "scan_site_packages",
    "PackageManager",
]
