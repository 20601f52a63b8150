"""Learn what a rename command would do by running it on a placeholder file."""

import asyncio
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from batch_rename.errors import ExtraEntriesError, PathError, VanishedError, printable
from batch_rename.models.rename import RenameRequest, SimulationResult
from batch_rename.processors.process_runner import run


logger = logging.getLogger(__name__)

TEMP_DIR_PREFIX = "batch-rename-"


def _canonicalize(file: Path) -> tuple[Path, Path, str]:
    """Resolve `file` to an absolute path and split it into parent and name.

    Raises:
        PathError: If the path does not exist or has no file name component.
    """
    try:
        path = file.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise PathError(f"failed to canonicalize `{file}`: {e}") from e

    if not path.name:
        raise PathError(f"path `{path}` does not have file name")
    if path.parent == path:
        raise PathError(f"`{path}` does not contain a parent")
    return path, path.parent, path.name


def _create_placeholder(directory: Path, name: str) -> None:
    placeholder = directory / name
    try:
        placeholder.write_bytes(b"")
    except OSError as e:
        raise PathError(f"failed to create `{placeholder}`: {e}") from e


def _single_entry(directory: Path) -> str:
    """Return the name of the only entry left in `directory`."""
    try:
        entries = os.listdir(directory)
    except OSError as e:
        raise PathError(f"failed to read contents of directory `{directory}`: {e}") from e

    if not entries:
        raise VanishedError(directory)
    if len(entries) > 1:
        raise ExtraEntriesError(directory, entries)
    return entries[0]


async def simulate(request: RenameRequest, dry_run: bool = True) -> SimulationResult:
    """Find out the name `request.command` gives to `request.file`.

    The command is first run against an empty file with the same name inside a
    private temporary directory. The single entry it leaves behind is the
    proposed name. Only when `dry_run` is false is the command then run again in
    the real parent directory against the real file.

    Args:
        request: Command and file to rename.
        dry_run: Do not touch the real file.

    Returns:
        SimulationResult with the canonical source path and the proposed target.

    Raises:
        PathError: If the file cannot be resolved or the placeholder not created.
        VanishedError: If the command deleted the placeholder.
        ExtraEntriesError: If the command created additional entries.
        SpawnError, CommandFailure: If running the command failed.
    """
    path, directory, name = await asyncio.to_thread(_canonicalize, request.file)

    tmp = await asyncio.to_thread(tempfile.TemporaryDirectory, prefix=TEMP_DIR_PREFIX)
    try:
        tmp_dir = Path(tmp.name)
        await asyncio.to_thread(_create_placeholder, tmp_dir, name)

        # Perform the rename in our temporary directory.
        await run(request.program, [*request.args, name], tmp_dir)
        new_name = await asyncio.to_thread(_single_entry, tmp_dir)
    finally:
        await asyncio.to_thread(tmp.cleanup)

    logger.debug("Command proposes '%s' -> '%s'", printable(name), printable(new_name))

    if not dry_run:
        # Perform the rename on the live data.
        await run(request.program, [*request.args, name], directory)
        logger.info("Renamed '%s' to '%s' in %s", printable(name), printable(new_name), printable(directory))

    return SimulationResult(source=path, target=directory / new_name)


async def rename(file: Path | str, command: Sequence[str], dry_run: bool = False) -> Path:
    """Rename `file` with `command` and return its new path.

    With `dry_run` set, only the new path is computed; the file stays untouched.
    """
    request = RenameRequest(command=tuple(command), file=Path(file))
    result = await simulate(request, dry_run=dry_run)
    return result.target
