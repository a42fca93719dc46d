"""CLI entry point for pip-frontend.

Usage:
    pip-frontend [--python PATH] [--verbose] <command> [options]
"""

import asyncio
import json
import logging
import sys
from typing import Optional

import click

from .errors import OperationCanceledError, PipFrontendError
from .interpreter.configuration import InterpreterConfiguration, for_environment, from_interpreter
from .manager.confirmation import ConsoleConfirmationGate
from .manager.package_manager import TOOL_INSTALL_PROMPT, PackageManager
from .output import ConsoleOutputSink
from .preferences import load_preferences

EXIT_CANCELED = 130


class Context:
    """Objects shared by all commands of one invocation."""

    def __init__(self, python: Optional[str], prefix: Optional[str], config_file: Optional[str]):
        self.python = python
        self.prefix = prefix
        self.config_file = config_file
        self.manager = PackageManager()

    def configuration(self) -> InterpreterConfiguration:
        if self.prefix:
            return for_environment(self.prefix)
        return from_interpreter(self.python or sys.executable)

    def preferences(self):
        return load_preferences(self.config_file)


def _run(coro):
    """Run a command coroutine, mapping errors to exit codes."""
    try:
        return asyncio.run(coro)
    except OperationCanceledError as e:
        click.echo(f"Canceled: {e}", err=True)
        sys.exit(EXIT_CANCELED)
    except KeyboardInterrupt:
        click.echo("Interrupted by user", err=True)
        sys.exit(EXIT_CANCELED)
    except (PipFrontendError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option("--python", "python", type=click.Path(dir_okay=False),
              help="Interpreter to manage (default: the current one).")
@click.option("--prefix", type=click.Path(file_okay=False),
              help="Venv or installation prefix to manage instead of --python.")
@click.option("--config", "config_file", type=click.Path(dir_okay=False),
              help="Preferences file (default: ~/.pip-frontend/config.yaml).")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx, python, prefix, config_file, verbose):
    """Drive pip for a Python interpreter."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Context(python, prefix, config_file)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print a JSON list.")
@click.pass_obj
def freeze(obj: Context, as_json):
    """List installed packages."""
    async def command():
        return await obj.manager.freeze(obj.configuration())

    packages = sorted(_run(command()), key=str.lower)
    if as_json:
        click.echo(json.dumps(packages, ensure_ascii=False))
    else:
        for package in packages:
            click.echo(package)


@main.command("is-installed")
@click.argument("requirement")
@click.pass_obj
def is_installed(obj: Context, requirement):
    """Exit 0 if REQUIREMENT is satisfied."""
    async def command():
        return await obj.manager.is_installed(obj.configuration(), requirement)

    installed = _run(command())
    click.echo("installed" if installed else "not installed")
    sys.exit(0 if installed else 1)


@main.command()
@click.argument("package")
@click.option("--elevate", is_flag=True, help="Run pip with administrator rights.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.option("--check", is_flag=True, help="Skip if already installed.")
@click.pass_obj
def install(obj: Context, package, elevate, yes, check):
    """Install PACKAGE, offering to install pip first if it is missing.

    Declining the pip prompt exits 1; declining the package prompt exits 130.
    """
    async def command():
        config = obj.configuration()
        return await obj.manager.install_with_bootstrap(
            config, package, ConsoleConfirmationGate(assume_yes=yes),
            elevate=elevate,
            output=ConsoleOutputSink(),
            preferences=obj.preferences(),
            message=f"Install '{package}' into {config.interpreter_path}?",
            check_installed=check,
        )

    sys.exit(0 if _run(command()) else 1)


@main.command()
@click.argument("package")
@click.option("--elevate", is_flag=True, help="Run pip with administrator rights.")
@click.pass_obj
def uninstall(obj: Context, package, elevate):
    """Uninstall PACKAGE."""
    async def command():
        return await obj.manager.uninstall(
            obj.configuration(), package, elevate,
            ConsoleOutputSink(), obj.preferences(),
        )

    sys.exit(0 if _run(command()) else 1)


@main.command("install-pip")
@click.option("--elevate", is_flag=True, help="Run the bootstrap with administrator rights.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def install_pip(obj: Context, elevate, yes):
    """Install pip into the interpreter."""
    async def command():
        config = obj.configuration()
        return await obj.manager.query_install_tool(
            config,
            ConsoleConfirmationGate(assume_yes=yes),
            TOOL_INSTALL_PROMPT.format(config.interpreter_path),
            elevate=elevate,
            output=ConsoleOutputSink(),
            preferences=obj.preferences(),
        )

    sys.exit(0 if _run(command()) else 1)


if __name__ == "__main__":
    main()
