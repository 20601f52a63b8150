"""Run external commands and turn unsuccessful exits into errors."""

import asyncio
import contextlib
import logging
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from batch_rename.errors import CommandFailure, SpawnError


logger = logging.getLogger(__name__)


@dataclass
class CommandOutput:
    """Exit status and captured streams of a finished command."""

    command_line: str
    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""


def format_command(command: str, args: Sequence[str]) -> str:
    """Format a command with the given list of arguments as a single string."""
    return shlex.join([command, *args])


def evaluate(output: CommandOutput) -> None:
    """Raise if the command did not exit successfully.

    Raises:
        CommandFailure: On a non-zero exit code or termination by signal. The
            message carries the trimmed standard error, if there was any.
    """
    if output.returncode != 0:
        stderr = output.stderr.decode(errors="replace").rstrip()
        raise CommandFailure(output.command_line, output.returncode, stderr)


async def run(
    command: str,
    args: Sequence[str],
    cwd: Path,
    capture_stdout: bool = False,
) -> CommandOutput:
    """Run a command with the provided arguments inside `cwd`.

    Args:
        command: Program to execute, looked up on PATH if not a path.
        args: Arguments passed to the program.
        cwd: Working directory for the process.
        capture_stdout: Capture standard output instead of discarding it.

    Returns:
        CommandOutput of the successful invocation.

    Raises:
        SpawnError: If the process could not be started.
        CommandFailure: If the process exited unsuccessfully.
    """
    command_line = format_command(command, args)
    logger.debug("Running `%s` in %s", command_line, cwd)

    spawn = asyncio.ensure_future(
        asyncio.create_subprocess_exec(
            command,
            *args,
            cwd=cwd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE if capture_stdout else asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    )
    try:
        process = await asyncio.shield(spawn)
    except asyncio.CancelledError:
        # The child may already exist; wait for it so it can be reaped.
        with contextlib.suppress(OSError):
            await _kill(await spawn)
        raise
    except OSError as e:
        raise SpawnError(command_line, e.strerror or str(e)) from e

    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        await _kill(process)
        raise

    output = CommandOutput(
        command_line=command_line,
        returncode=process.returncode,
        stdout=stdout or b"",
        stderr=stderr or b"",
    )
    evaluate(output)
    return output


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill and reap a child so it does not outlive the directory it works in."""
    with contextlib.suppress(ProcessLookupError):
        process.kill()
    await process.wait()
