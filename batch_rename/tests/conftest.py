"""Shared fixtures."""

import sys
from collections.abc import Callable, Generator
from importlib import resources
from pathlib import Path

import pytest

from batch_rename.tests import fixtures


@pytest.fixture(scope="session")
def fixtures_dir() -> Generator[Path]:
    """Directory holding the stand-in rename commands."""
    with resources.as_file(resources.files(fixtures)) as path:
        yield path


@pytest.fixture
def stub_command(fixtures_dir: Path) -> Callable[..., list[str]]:
    """Build the command line for one of the stand-in rename commands."""

    def _command(name: str, *args: str) -> list[str]:
        return [sys.executable, str(fixtures_dir / f"{name}.py"), *args]

    return _command


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    """Directory holding the files to be renamed."""
    path = tmp_path / "files"
    path.mkdir()
    return path
