"""Exception types raised while simulating and applying renames."""

import os
import signal
from dataclasses import dataclass
from pathlib import Path


class BatchRenameError(Exception):
    """Base class for all errors reported to the user."""


class SpawnError(BatchRenameError):
    """The external command could not be started at all."""

    def __init__(self, command_line: str, reason: str = "") -> None:
        self.command_line = command_line
        message = f"failed to run `{command_line}`"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CommandFailure(BatchRenameError):
    """The external command exited with a non-zero status or was killed by a signal."""

    def __init__(self, command_line: str, returncode: int, stderr: str = "") -> None:
        self.command_line = command_line
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"`{command_line}` reported non-zero exit-status{self._status()}{self._stderr_tail()}")

    def _status(self) -> str:
        if self.returncode < 0:
            return f" (terminated by signal {_signal_name(-self.returncode)})"
        return f" ({self.returncode})"

    def _stderr_tail(self) -> str:
        return f": {self.stderr}" if self.stderr else ""


class PathError(BatchRenameError):
    """A path could not be canonicalized or lacks a parent or file name."""


class VanishedError(BatchRenameError):
    """The rename command left nothing behind in the simulation directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(f"no file found in `{directory}`; did the rename operation delete instead?")


class ExtraEntriesError(BatchRenameError):
    """The rename command left more than one entry in the simulation directory."""

    def __init__(self, directory: Path, entries: list[str]) -> None:
        self.directory = directory
        self.entries = entries
        listing = ", ".join(sorted(entries))
        super().__init__(f"expected a single file in `{directory}` after renaming, found {len(entries)}: {listing}")


class InputReadError(BatchRenameError):
    """Reading the confirmation keystroke failed."""


@dataclass
class RenameFailure:
    """A real rename that failed, together with the file it was applied to."""

    source: Path
    error: BaseException

    def __str__(self) -> str:
        return printable(f"{self.source}: {str(self.error) or type(self.error).__name__}")


class AggregateError(BatchRenameError):
    """One or more real renames failed; every failure is kept."""

    def __init__(self, failures: list[RenameFailure], attempted: int) -> None:
        self.failures = failures
        self.attempted = attempted
        super().__init__(f"{len(failures)} of {attempted} rename(s) failed")

    def details(self) -> list[str]:
        """Return one line per failed rename."""
        return [str(failure) for failure in self.failures]


def printable(text: str | os.PathLike) -> str:
    """Render a path or message for the terminal.

    File names need not be valid UTF-8; bytes that do not decode are shown as
    U+FFFD instead of failing when written out.
    """
    return os.fsencode(text).decode(errors="replace")


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return str(number)
