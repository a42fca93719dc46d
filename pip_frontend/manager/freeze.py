"""Enumerating installed packages.

Strategies are tried in order and the first one that returns a result
wins:

1. ``pip freeze``, seeded with ``pip==<version>`` from ``pip --version``
2. Scanning site-packages directory names (names only, no versions)

The last strategy never fails; an unreadable directory gives an empty set.
"""

import asyncio
import logging
import os
import re
from functools import partial
from pathlib import Path
from typing import AbstractSet, Awaitable, Callable, Optional

from ..errors import PipFrontendError
from ..interpreter.configuration import InterpreterConfiguration
from ..runner.process import ProcessResult

logger = logging.getLogger(__name__)

PACKAGE_NAME_PATTERN = re.compile(r"^(?P<name>[a-z0-9_]+)(-.+)?", re.IGNORECASE)
TOOL_VERSION_PATTERN = re.compile(r"pip (?P<version>[0-9.]+)")

# run_tool(config, *args) -> ProcessResult
ToolRunner = Callable[..., Awaitable[ProcessResult]]
FreezeStrategy = Callable[[InterpreterConfiguration], Awaitable[Optional[set[str]]]]


async def _try_run(run_tool: ToolRunner, config: InterpreterConfiguration, *args: str) -> Optional[ProcessResult]:
    try:
        return await run_tool(config, *args)
    except (PipFrontendError, OSError, ValueError, asyncio.LimitOverrunError) as e:
        logger.debug("pip %s could not run: %s", " ".join(args), e)
        return None


async def probe_tool_version(run_tool: ToolRunner, config: InterpreterConfiguration) -> set[str]:
    """Return ``{"pip==X.Y.Z"}`` from ``pip --version``, or an empty set."""
    result = await _try_run(run_tool, config, "--version")
    if result is None or not result.succeeded:
        return set()

    entries = set()
    for line in result.stdout_lines:
        match = TOOL_VERSION_PATTERN.search(line)
        if match:
            entries.add(f"pip=={match.group('version')}")
    return entries


async def freeze_with_tool(
    run_tool: ToolRunner,
    config: InterpreterConfiguration,
    seed: AbstractSet[str] = frozenset(),
) -> Optional[set[str]]:
    """Run ``pip freeze``; None if it did not succeed."""
    result = await _try_run(run_tool, config, "freeze")
    if result is None or not result.succeeded:
        return None
    packages = set(seed)
    packages.update(line.strip() for line in result.stdout_lines if line.strip())
    return packages


def _scan_directory(packages_path: Path) -> set[str]:
    names = set()
    try:
        with os.scandir(packages_path) as entries:
            for entry in entries:
                if not entry.is_dir():
                    continue
                match = PACKAGE_NAME_PATTERN.match(entry.name)
                if match:
                    names.add(match.group("name"))
    except OSError as e:
        logger.debug("Cannot scan %s: %s", packages_path, e)
        return set()
    return names


async def scan_site_packages(config: InterpreterConfiguration) -> set[str]:
    """Guess installed package names from site-packages directory names."""
    return await asyncio.to_thread(_scan_directory, config.site_packages)


async def freeze(run_tool: ToolRunner, config: InterpreterConfiguration) -> set[str]:
    """Enumerate installed packages, falling back as pip fails."""
    seed = await probe_tool_version(run_tool, config)

    strategies: list[FreezeStrategy] = [
        partial(freeze_with_tool, run_tool, seed=seed),
        scan_site_packages,
    ]
    for strategy in strategies:
        packages = await strategy(config)
        if packages is not None:
            return packages
        logger.debug("pip freeze failed for %s, scanning site-packages", config.interpreter_path)
    return set()
