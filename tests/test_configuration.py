"""Tests for interpreter configuration and probing."""

import sys

import pytest

from pip_frontend.errors import NotRunnableError
from pip_frontend.interpreter.configuration import from_interpreter, parse_version

from .conftest import make_configuration


@pytest.mark.parametrize("text, expected", [
    ("Python 3.12.1", (3, 12, 1)),
    ("2.5", (2, 5)),
    ("pip 21.3.1 from /usr/lib", (21, 3, 1)),
    ("no digits", None),
])
def test_parse_version(text, expected):
    assert parse_version(text) == expected


@pytest.mark.parametrize("version, secure", [
    ((2, 4), False),
    ((2, 5), False),
    ((2, 5, 6), False),
    ((2, 6), True),
    ((3, 12, 1), True),
])
def test_secure_install_threshold(tmp_path, version, secure):
    assert make_configuration(tmp_path, version=version).is_secure_install() is secure


def test_runnable_requires_interpreter(tmp_path):
    config = make_configuration(tmp_path, runnable=False)

    assert not config.is_runnable()
    with pytest.raises(NotRunnableError):
        config.throw_if_not_runnable()


def test_site_packages_is_under_library(config):
    assert config.site_packages == config.library_path / "site-packages"


def test_from_interpreter_probes_current_python():
    config = from_interpreter(sys.executable)

    assert config.version == tuple(sys.version_info[:3])
    assert config.interpreter_path.is_file()
    assert config.prefix_path.exists()


def test_from_interpreter_missing(tmp_path):
    with pytest.raises(NotRunnableError):
        from_interpreter(tmp_path / "python")
