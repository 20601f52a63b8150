"""Interactive per-file confirmation of proposed renames."""

import asyncio
from abc import ABC, abstractmethod

import click
from rich.console import Console
from rich.markup import escape

from batch_rename.errors import InputReadError, printable
from batch_rename.models.rename import Decision


class KeyReader(ABC):
    """Source of single keystrokes for the confirmation prompt."""

    @abstractmethod
    def read_single_key(self) -> str:
        """Block until one key is pressed and return it.

        Returns:
            The character read, or an empty string if nothing was entered.

        Raises:
            InputReadError: If reading from the input source failed.
        """
        pass


class TerminalKeyReader(KeyReader):
    """Reads one raw keystroke from the controlling terminal without echo."""

    def read_single_key(self) -> str:
        try:
            return click.getchar(echo=False)
        except EOFError as e:
            raise InputReadError("end of input while waiting for a response") from e
        except OSError as e:
            raise InputReadError(f"failed to read response: {e}") from e


class Confirmer:
    """Asks the user whether a proposed rename should be applied."""

    PROMPT = "Accept? (Y/n/q)"

    def __init__(self, key_reader: KeyReader | None = None, console: Console | None = None) -> None:
        """Initialize the confirmer.

        Args:
            key_reader: Where keystrokes come from. Defaults to the terminal.
            console: Console the prompt is printed on.
        """
        self.key_reader = key_reader or TerminalKeyReader()
        self.console = console or Console()
        self.prompts = 0

    def _show(self, src_name: str, dst_name: str) -> None:
        src, dst = escape(printable(src_name)), escape(printable(dst_name))
        self.console.print(
            f"Would rename:\n[bold blue]{src}[/bold blue]\nto\n[bold blue]{dst}[/bold blue]",
            highlight=False,
        )
        self.console.print(self.PROMPT, highlight=False)

    async def confirm(self, src_name: str, dst_name: str) -> Decision:
        """Prompt until the user gives a recognized answer for this rename.

        The keystroke is read on a worker thread so that simulations and renames
        already running keep making progress while the user thinks.
        """
        while True:
            self._show(src_name, dst_name)
            self.prompts += 1
            key = await asyncio.to_thread(self.key_reader.read_single_key)

            decision = Decision.from_key(key)
            if decision is not None:
                return decision
            self.console.print(f"Response '{escape(printable(key))}' not understood", highlight=False)
