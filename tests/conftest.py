"""
Shared fixtures for the livemod test suite.
"""

import os
from pathlib import Path

import pytest

from livemod.config import Settings
from livemod.host import ModuleHost


def _write_source(path: Path, source: str) -> Path:
    """Write module source, moving its mtime forward if the file existed"""
    previous = path.stat().st_mtime_ns if path.exists() else None
    path.write_text(source, encoding='utf-8')
    if previous is not None:
        bumped = previous + 1_000_000_000
        os.utime(path, ns=(bumped, bumped))
    return path


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config.json and the search path environment out of the user's home"""
    monkeypatch.setenv('LIVEMOD_HOME', str(tmp_path / 'home'))
    monkeypatch.delenv('LIVEMOD_PATH', raising=False)
    return tmp_path / 'home'


@pytest.fixture
def write_source():
    return _write_source


@pytest.fixture
def workdir(tmp_path):
    """Directory standing in for the notebook's working directory"""
    directory = tmp_path / 'work'
    directory.mkdir()
    return directory


@pytest.fixture
def libdir(tmp_path):
    """A shared library directory placed on the search path"""
    directory = tmp_path / 'lib'
    directory.mkdir()
    return directory


@pytest.fixture
def host(workdir, libdir):
    """Host searching workdir, then libdir"""
    return ModuleHost(Settings(search_path=(str(libdir),)), base_dir=workdir)
