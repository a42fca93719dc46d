"""Tests for resolving how pip is invoked."""

from pathlib import Path

from pip_frontend.interpreter.locator import TOOL_LOCATIONS, ToolLocator

from .conftest import make_configuration


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


def test_no_candidates_falls_back_to_module(config):
    invocation = ToolLocator().resolve(config)

    assert invocation.executable == config.interpreter_path
    assert invocation.leading_arguments == ("-m", "pip")
    assert invocation.requires_interpreter_prefix
    assert invocation.command("freeze") == ["-m", "pip", "freeze"]


def test_script_candidate_runs_through_interpreter(config):
    script = _touch(config.prefix_path / "Scripts" / "pip-script.py")

    invocation = ToolLocator().resolve(config)

    assert invocation.executable == config.interpreter_path
    assert invocation.command("--version") == [str(script), "--version"]
    assert invocation.requires_interpreter_prefix


def test_script_path_with_spaces_is_quoted(tmp_path):
    config = make_configuration(tmp_path / "Program Files")
    script = _touch(config.prefix_path / "pip-script.py")

    invocation = ToolLocator().resolve(config)

    assert invocation.leading_arguments == (f'"{script}"',)


def test_native_candidate_is_run_directly(config):
    exe = _touch(config.prefix_path / "Scripts" / "pip.exe")

    invocation = ToolLocator().resolve(config)

    assert invocation.executable == exe
    assert invocation.leading_arguments == ()
    assert not invocation.requires_interpreter_prefix


def test_candidates_are_probed_in_order(config):
    _touch(config.prefix_path / "pip.exe")
    script = _touch(config.prefix_path / "pip-script.py")

    invocation = ToolLocator().resolve(config)

    assert invocation.executable == config.interpreter_path
    assert invocation.leading_arguments == (str(script),)


def test_resolution_is_not_cached(config):
    locator = ToolLocator()
    assert locator.resolve(config).leading_arguments == ("-m", "pip")

    exe = _touch(config.prefix_path / "pip.exe")

    assert locator.resolve(config).executable == exe


def test_bin_pip_is_not_a_candidate(config):
    # A shared prefix such as /usr may hold a pip for another interpreter
    _touch(config.prefix_path / "bin" / "pip")

    invocation = ToolLocator().resolve(config)

    assert invocation.executable == config.interpreter_path
    assert invocation.leading_arguments == ("-m", "pip")


def test_custom_candidates(config):
    exe = _touch(config.prefix_path / "bin" / "pip")

    invocation = ToolLocator([(Path("bin") / "pip", False), *TOOL_LOCATIONS]).resolve(config)

    assert invocation.executable == exe
