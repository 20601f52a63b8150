"""Test helpers shared across test modules."""

import os
import sys
from collections.abc import Iterable
from pathlib import Path

import pytest

from batch_rename.processors.confirmation import KeyReader


# A valid POSIX file name that is not valid UTF-8 (Latin-1 "café.txt")
UNDECODABLE_NAME = os.fsdecode(b"caf\xe9.txt")

bytes_file_names = pytest.mark.skipif(
    sys.platform != "linux", reason="filesystem may reject names that are not valid UTF-8"
)


class ScriptedKeyReader(KeyReader):
    """Key reader that replays a fixed sequence of keystrokes."""

    def __init__(self, keys: Iterable[str]) -> None:
        self.keys = list(keys)
        self.reads = 0

    def read_single_key(self) -> str:
        if self.reads >= len(self.keys):
            raise AssertionError("Prompted more often than expected")
        key = self.keys[self.reads]
        self.reads += 1
        return key


def make_files(directory: Path, *names: str) -> list[Path]:
    """Create files with distinct contents and return their paths."""
    paths = []
    for name in names:
        path = directory / name
        path.write_text(f"contents of {name}", errors="surrogateescape")
        paths.append(path)
    return paths


def listing(directory: Path) -> list[str]:
    """Sorted names of the entries in `directory`."""
    return sorted(p.name for p in directory.iterdir())
