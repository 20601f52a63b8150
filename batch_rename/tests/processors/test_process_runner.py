"""Unit tests for the process runner."""

import asyncio
import os
import signal
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from batch_rename.errors import CommandFailure, SpawnError
from batch_rename.processors.process_runner import CommandOutput, evaluate, format_command, run


def python(*code: str) -> tuple[str, list[str]]:
    """Command running the given Python statements."""
    return sys.executable, ["-c", "; ".join(code)]


class TestFormatCommand:
    """Tests for format_command."""

    def test_plain_arguments(self):
        assert format_command("mv", ["a.txt", "b.txt"]) == "mv a.txt b.txt"

    def test_quotes_arguments_with_spaces(self):
        """Test that the formatted command can be pasted back into a shell."""
        assert format_command("perl-rename", ["s/ /_/g", "my file.txt"]) == "perl-rename 's/ /_/g' 'my file.txt'"

    def test_no_arguments(self):
        assert format_command("true", []) == "true"


class TestEvaluate:
    """Tests for evaluate."""

    def test_success_passes(self):
        evaluate(CommandOutput(command_line="true", returncode=0))

    def test_failure_trims_stderr(self):
        """Test that trailing whitespace of stderr is trimmed."""
        output = CommandOutput(command_line="cmd", returncode=4, stderr=b"  something broke\n\n")

        with pytest.raises(CommandFailure) as exc_info:
            evaluate(output)

        assert str(exc_info.value) == "`cmd` reported non-zero exit-status (4):   something broke"
        assert exc_info.value.returncode == 4

    def test_failure_with_invalid_utf8(self):
        """Test that undecodable stderr does not hide the failure."""
        output = CommandOutput(command_line="cmd", returncode=1, stderr=b"\xff\xfe oops")

        with pytest.raises(CommandFailure, match="oops"):
            evaluate(output)


class TestRun:
    """Tests for running commands."""

    def test_runs_in_given_directory(self, tmp_path: Path):
        """Test that the working directory is set."""
        command, args = python("import os", "open('marker', 'w').close()")

        asyncio.run(run(command, args, tmp_path))

        assert (tmp_path / "marker").exists()

    def test_captures_stdout(self, tmp_path: Path):
        """Test capturing standard output."""
        command, args = python("print('hello')")

        output = asyncio.run(run(command, args, tmp_path, capture_stdout=True))

        assert output.stdout.strip() == b"hello"
        assert output.returncode == 0

    def test_discards_stdout_by_default(self, tmp_path: Path):
        """Test that stdout is not captured unless requested."""
        command, args = python("print('hello')")

        output = asyncio.run(run(command, args, tmp_path))

        assert output.stdout == b""

    def test_stdin_is_not_inherited(self, tmp_path: Path):
        """Test that the command sees an empty stdin."""
        command, args = python("import sys", "print(repr(sys.stdin.read()))")

        output = asyncio.run(run(command, args, tmp_path, capture_stdout=True))

        assert output.stdout.strip() == b"''"

    def test_non_zero_exit(self, tmp_path: Path):
        """Test that a failing command raises CommandFailure with its stderr."""
        command, args = python("import sys", "sys.stderr.write('nope\\n')", "sys.exit(5)")

        with pytest.raises(CommandFailure) as exc_info:
            asyncio.run(run(command, args, tmp_path))

        assert exc_info.value.returncode == 5
        assert "(5): nope" in str(exc_info.value)
        assert exc_info.value.command_line.endswith("sys.exit(5)'")

    def test_terminated_by_signal(self, tmp_path: Path):
        """Test that death by signal is reported as such."""
        command, args = python("import os, signal", "os.kill(os.getpid(), signal.SIGTERM)")

        with pytest.raises(CommandFailure, match="terminated by signal SIGTERM"):
            asyncio.run(run(command, args, tmp_path))

    def test_missing_binary(self, tmp_path: Path):
        """Test that a missing program raises SpawnError with the command line."""
        with pytest.raises(SpawnError, match="failed to run `batch-rename-no-such-program a.txt`"):
            asyncio.run(run("batch-rename-no-such-program", ["a.txt"], tmp_path))

    def test_cancellation_kills_process(self, tmp_path: Path):
        """Test that cancelling the caller terminates the child process."""
        command, args = python(
            "import os, time",
            "open('pid.tmp', 'w').write(str(os.getpid()))",
            "os.rename('pid.tmp', 'pid')",
            "time.sleep(30)",
            "open('finished', 'w').close()",
        )

        async def cancel_soon() -> None:
            task = asyncio.create_task(run(command, args, tmp_path))
            for _ in range(200):
                if (tmp_path / "pid").exists():
                    break
                await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(cancel_soon())

        pid = int((tmp_path / "pid").read_text())
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)
        assert not (tmp_path / "finished").exists()

    def test_cancellation_during_spawn_kills_process(self, tmp_path: Path):
        """Test that a child started after the caller was cancelled is killed and reaped."""
        command, args = python("import time", "time.sleep(30)")
        spawn_process = asyncio.create_subprocess_exec
        spawned: list[asyncio.subprocess.Process] = []

        async def cancel_while_spawning() -> None:
            spawning = asyncio.Event()
            release = asyncio.Event()

            async def delayed_spawn(*spawn_args, **kwargs):
                spawning.set()
                await release.wait()
                process = await spawn_process(*spawn_args, **kwargs)
                spawned.append(process)
                return process

            with patch.object(asyncio, "create_subprocess_exec", delayed_spawn):
                task = asyncio.create_task(run(command, args, tmp_path))
                await spawning.wait()
                task.cancel()
                await asyncio.sleep(0)
                release.set()
                with pytest.raises(asyncio.CancelledError):
                    await task

        asyncio.run(cancel_while_spawning())

        assert len(spawned) == 1
        assert spawned[0].returncode == -signal.SIGKILL
