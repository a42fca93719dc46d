"""Package manager - drives pip for an interpreter configuration.

Every operation is a coroutine and takes its configuration, output sink
and preferences as arguments; the manager keeps no state between calls, so
concurrent calls are independent. Serializing concurrent installs into the
same environment is up to the caller.
"""

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Callable, Optional

from ..errors import (
    BootstrapDownloadError,
    NotRunnableError,
    OperationCanceledError,
    PipFrontendError,
)
from ..interpreter.configuration import InterpreterConfiguration
from ..interpreter.locator import TOOL_MODULE, ToolLocator
from ..output import OutputSink
from ..preferences import Preferences
from ..runner.process import ProcessResult, ProcessRunner
from ..transport.bootstrap_client import BootstrapClient
from .confirmation import ConfirmationGate, ConfirmResult, ask
from .freeze import freeze as freeze_packages

logger = logging.getLogger(__name__)

UNBUFFERED_ENV = {"PYTHONUNBUFFERED": "1"}

INSECURE_ARG = "--insecure"
INSECURE_WARNING = "Using '--insecure' option for Python 2.5."

PACKAGE_INSTALLING = "Installing '{0}'"
PACKAGE_INSTALL_SUCCEEDED = "Successfully installed '{0}'"
PACKAGE_INSTALL_FAILED = "Installing '{0}' failed with exit code {1}"
PACKAGE_INSTALL_ERROR = "Installing '{0}' failed: {1}"
PACKAGE_UNINSTALLING = "Uninstalling '{0}'"
PACKAGE_UNINSTALL_SUCCEEDED = "Successfully uninstalled '{0}'"
PACKAGE_UNINSTALL_FAILED = "Uninstalling '{0}' failed with exit code {1}"
PACKAGE_UNINSTALL_ERROR = "Uninstalling '{0}' failed: {1}"
TOOL_INSTALLING = "Installing pip"
TOOL_INSTALL_SUCCEEDED = "Successfully installed pip"
TOOL_INSTALL_FAILED = "Installing pip failed with exit code {0}"
TOOL_INSTALL_ERROR = "Installing pip failed: {0}"
TOOL_INSTALL_PROMPT = "pip is not installed for {0}. Install it now?"

BOOTSTRAP_SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "tool_bootstrap.py"

# Exits 0 if the requirement in argv[1] is satisfied. Uses packaging (or
# the copy vendored into pip) with importlib.metadata; a bare name needs
# importlib.metadata alone. pkg_resources is the last resort.
IS_INSTALLED_SCRIPT = """\
import sys
requirement = sys.argv[1].strip()
try:
    from importlib.metadata import version
except ImportError:
    version = None
Requirement = None
if version is not None:
    try:
        from packaging.requirements import Requirement
    except ImportError:
        try:
            from pip._vendor.packaging.requirements import Requirement
        except ImportError:
            pass
if Requirement is not None:
    req = Requirement(requirement)
    installed = version(req.name)
    if req.specifier and not req.specifier.contains(installed, prereleases=True):
        sys.exit(1)
elif version is not None and not any(c in requirement for c in "<>=!~;[@ \\t"):
    version(requirement)
else:
    import pkg_resources
    pkg_resources.require(requirement)
"""


class PackageManager:
    """Runs pip operations and reports them to an output sink."""

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        locator: Optional[ToolLocator] = None,
        bootstrap_client_factory: Optional[Callable[[], BootstrapClient]] = None,
    ):
        """Initialize the package manager.

        Args:
            runner: Process runner. Defaults to ProcessRunner().
            locator: pip locator. Defaults to ToolLocator().
            bootstrap_client_factory: Creates the client that downloads
                get-pip.py when preferences name a bootstrap_url.
        """
        self.runner = runner or ProcessRunner()
        self.locator = locator or ToolLocator()
        self.bootstrap_client_factory = bootstrap_client_factory or BootstrapClient

    async def _run_tool(
        self,
        config: InterpreterConfiguration,
        *args: str,
        output: Optional[OutputSink] = None,
        elevate: bool = False,
    ) -> ProcessResult:
        config.throw_if_not_runnable()
        invocation = self.locator.resolve(config)
        return await self.runner.run(
            invocation.executable,
            invocation.command(*args),
            working_dir=config.prefix_path,
            env=UNBUFFERED_ENV,
            visible=False,
            output=output,
            quote_args=False,
            elevate=elevate,
        )

    # Queries

    async def freeze(self, config: InterpreterConfiguration) -> set[str]:
        """Enumerate installed packages as ``name==version`` (or ``name``).

        Never raises; returns an empty set if nothing can be determined.
        """
        return await freeze_packages(self._run_tool, config)

    async def is_installed(self, config: InterpreterConfiguration, package: str) -> bool:
        """Check whether ``package`` is installed and satisfies its version spec.

        Args:
            config: Interpreter to check.
            package: Requirement such as ``requests`` or ``requests>=2.28``.

        Returns:
            True if the requirement is satisfied. False otherwise, including
            when the interpreter cannot be run. A requirement with a version
            specifier needs ``packaging`` (pip's vendored copy will do) or
            ``pkg_resources`` in the target interpreter.
        """
        if not config.is_runnable():
            return False

        try:
            result = await self.runner.run(
                config.interpreter_path,
                ["-c", IS_INSTALLED_SCRIPT, package],
                working_dir=config.prefix_path,
                env=UNBUFFERED_ENV,
                visible=False,
                output=None,
                quote_args=True,
            )
        except (NotRunnableError, OSError) as e:
            logger.debug("Cannot check %s in %s: %s", package, config.interpreter_path, e)
            return False
        return result.succeeded

    def has_tool(self, config: InterpreterConfiguration) -> bool:
        """Whether pip is importable from the configuration's library."""
        return any(
            (path / TOOL_MODULE).is_dir()
            for path in (config.site_packages, config.library_path)
        )

    # Reporting

    def _show(self, output: OutputSink, preferences: Preferences) -> None:
        if preferences.show_output_window_for_installs:
            output.show_and_activate()
        else:
            output.show()

    def _report(self, output: Optional[OutputSink], preferences: Preferences, message: str) -> None:
        logger.info(message)
        if output is not None:
            output.write_line(message)
            self._show(output, preferences)

    def _insecure_args(self, config: InterpreterConfiguration, output: Optional[OutputSink]) -> list[str]:
        if config.is_secure_install():
            return []
        # Python 2.5 does not include ssl
        logger.warning(INSECURE_WARNING)
        if output is not None:
            output.write_error_line(INSECURE_WARNING)
        return [INSECURE_ARG]

    # Mutating operations

    async def install(
        self,
        config: InterpreterConfiguration,
        package: str,
        elevate: bool = False,
        output: Optional[OutputSink] = None,
        preferences: Optional[Preferences] = None,
    ) -> bool:
        """Run ``pip install`` for ``package``.

        Returns:
            True if pip exited with code 0.

        Raises:
            NotRunnableError: If the interpreter cannot be run.
        """
        preferences = preferences or Preferences()
        config.throw_if_not_runnable()

        self._report(output, preferences, PACKAGE_INSTALLING.format(package))
        args = ["install", *self._insecure_args(config, output), package]
        try:
            result = await self._run_tool(config, *args, output=output, elevate=elevate)
        except (PipFrontendError, OSError) as e:
            self._report(output, preferences, PACKAGE_INSTALL_ERROR.format(package, e))
            raise

        if result.succeeded:
            self._report(output, preferences, PACKAGE_INSTALL_SUCCEEDED.format(package))
        else:
            self._report(output, preferences, PACKAGE_INSTALL_FAILED.format(package, result.exit_code))
        return result.succeeded

    async def uninstall(
        self,
        config: InterpreterConfiguration,
        package: str,
        elevate: bool = False,
        output: Optional[OutputSink] = None,
        preferences: Optional[Preferences] = None,
    ) -> bool:
        """Run ``pip uninstall -y`` for ``package``; True on exit code 0."""
        preferences = preferences or Preferences()
        config.throw_if_not_runnable()

        self._report(output, preferences, PACKAGE_UNINSTALLING.format(package))
        try:
            result = await self._run_tool(config, "uninstall", "-y", package, output=output, elevate=elevate)
        except (PipFrontendError, OSError) as e:
            self._report(output, preferences, PACKAGE_UNINSTALL_ERROR.format(package, e))
            raise

        if result.succeeded:
            self._report(output, preferences, PACKAGE_UNINSTALL_SUCCEEDED.format(package))
        else:
            self._report(output, preferences, PACKAGE_UNINSTALL_FAILED.format(package, result.exit_code))
        return result.succeeded

    async def install_tool(
        self,
        config: InterpreterConfiguration,
        elevate: bool = False,
        output: Optional[OutputSink] = None,
        preferences: Optional[Preferences] = None,
    ) -> bool:
        """Install pip itself by running the bundled bootstrap script.

        The script is run with the interpreter directly, since pip is not
        available yet. With ``preferences.bootstrap_url`` set, get-pip.py
        is downloaded first and handed to the script.

        Returns:
            True if the bootstrap script exited with code 0.

        Raises:
            NotRunnableError: If the interpreter cannot be run.
            BootstrapDownloadError: If get-pip.py cannot be downloaded.
        """
        preferences = preferences or Preferences()
        config.throw_if_not_runnable()
        elevate = elevate or preferences.elevate_tool_installs

        self._report(output, preferences, TOOL_INSTALLING)
        try:
            result = await self._run_bootstrap(config, elevate, output, preferences)
        except BootstrapDownloadError as e:
            if output is not None:
                output.write_error_line(str(e))
            self._report(output, preferences, TOOL_INSTALL_ERROR.format(e))
            raise
        except (PipFrontendError, OSError) as e:
            self._report(output, preferences, TOOL_INSTALL_ERROR.format(e))
            raise

        if result.succeeded:
            self._report(output, preferences, TOOL_INSTALL_SUCCEEDED)
        else:
            self._report(output, preferences, TOOL_INSTALL_FAILED.format(result.exit_code))
        return result.succeeded

    async def _run_bootstrap(
        self,
        config: InterpreterConfiguration,
        elevate: bool,
        output: Optional[OutputSink],
        preferences: Preferences,
    ) -> ProcessResult:
        with tempfile.TemporaryDirectory(prefix="pip-frontend-") as tmp_dir:
            args = [str(BOOTSTRAP_SCRIPT)]
            if preferences.bootstrap_url:
                get_pip = await asyncio.to_thread(
                    self._download_bootstrap,
                    preferences.bootstrap_url,
                    Path(tmp_dir) / "get-pip.py",
                )
                args.extend(["--get-pip", str(get_pip)])

            return await self.runner.run(
                config.interpreter_path,
                args,
                working_dir=config.prefix_path,
                env=UNBUFFERED_ENV,
                visible=False,
                output=output,
                quote_args=True,
                elevate=elevate,
            )

    def _download_bootstrap(self, url: str, dest: Path) -> Path:
        with self.bootstrap_client_factory() as client:
            return client.download(url, dest)

    # Confirmation workflows

    async def query_install(
        self,
        config: InterpreterConfiguration,
        package: str,
        gate: ConfirmationGate,
        message: str,
        elevate: bool = False,
        output: Optional[OutputSink] = None,
        preferences: Optional[Preferences] = None,
        check_installed: bool = False,
    ) -> bool:
        """Ask before installing ``package``.

        Raises:
            NotRunnableError: If the interpreter cannot be run.
            OperationCanceledError: If the user cancels. Nothing is run.
        """
        config.throw_if_not_runnable()

        if check_installed and await self.is_installed(config, package):
            logger.info("'%s' is already installed", package)
            return True

        if await ask(gate, message) == ConfirmResult.CANCEL:
            raise OperationCanceledError(f"Installing '{package}' was canceled")

        return await self.install(config, package, elevate, output, preferences)

    async def query_install_tool(
        self,
        config: InterpreterConfiguration,
        gate: ConfirmationGate,
        message: Optional[str] = None,
        elevate: bool = False,
        output: Optional[OutputSink] = None,
        preferences: Optional[Preferences] = None,
        check_installed: bool = False,
    ) -> bool:
        """Ask before installing pip; see query_install."""
        config.throw_if_not_runnable()

        if check_installed and self.has_tool(config):
            logger.info("pip is already installed for %s", config.interpreter_path)
            return True

        message = message or TOOL_INSTALL_PROMPT.format(config.interpreter_path)
        if await ask(gate, message) == ConfirmResult.CANCEL:
            raise OperationCanceledError("Installing pip was canceled")

        return await self.install_tool(config, elevate, output, preferences)

    async def install_with_bootstrap(
        self,
        config: InterpreterConfiguration,
        package: str,
        gate: Optional[ConfirmationGate] = None,
        elevate: bool = False,
        output: Optional[OutputSink] = None,
        preferences: Optional[Preferences] = None,
        message: Optional[str] = None,
        check_installed: bool = False,
    ) -> bool:
        """Install ``package``, offering to install pip first if it is missing.

        Declining the pip prompt means "did not install": returns False
        rather than raising OperationCanceledError. The package itself is
        installed without asking unless ``message`` is given, in which case
        it goes through query_install and a cancel there does raise.

        A failed pip bootstrap does not stop the package install; pip may
        still be reachable another way, and the install reports its own
        failure otherwise.

        Args:
            check_installed: Return True without prompting or running
                anything if ``package`` is already satisfied.
        """
        if check_installed and await self.is_installed(config, package):
            logger.info("'%s' is already installed", package)
            return True

        if gate is not None and not self.has_tool(config):
            try:
                await self.query_install_tool(
                    config, gate, elevate=elevate, output=output, preferences=preferences,
                )
            except OperationCanceledError:
                return False

        if gate is not None and message is not None:
            return await self.query_install(
                config, package, gate, message, elevate, output, preferences,
            )
        return await self.install(config, package, elevate, output, preferences)
