"""CLI entrypoints."""

import asyncio
import os
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from batch_rename import __version__
from batch_rename.errors import AggregateError, BatchRenameError, printable
from batch_rename.logging_setup import setup_logging
from batch_rename.processors.batch_orchestrator import (
    DEFAULT_DRY_RUN_CONCURRENCY,
    DEFAULT_RENAME_CONCURRENCY,
    BatchOrchestrator,
)
from batch_rename.processors.confirmation import Confirmer
from batch_rename.processors.rename_simulator import rename


console = Console()


class SeparatedFilesCommand(click.Command):
    """Command whose raw arguments are split at the first `--`.

    Everything before the separator is parsed as usual; everything after it is
    passed to the callback untouched as the `files` parameter.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        files: list[str] | None = None
        if "--" in args:
            separator = args.index("--")
            files = args[separator + 1 :]
            args = args[:separator]

        rest = super().parse_args(ctx, args)

        if files is None and not ctx.resilient_parsing:
            ctx.fail("Missing `--` between RENAME_COMMAND and FILE arguments.")
        ctx.params["files"] = tuple(files or ())
        return rest

    def collect_usage_pieces(self, ctx: click.Context) -> list[str]:
        return [*super().collect_usage_pieces(ctx), "-- FILE..."]


def _report_error(error: BatchRenameError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(printable(str(error)))}", soft_wrap=True)
    if isinstance(error, AggregateError):
        for line in error.details():
            console.print(f"  {escape(line)}", soft_wrap=True)


@click.group(context_settings=dict(show_default=True, auto_envvar_prefix="BATCH_RENAME"))
@click.version_option(version=__version__, prog_name="batch-rename")
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """batch-rename - Rename files in bulk by delegating to any external command."""
    setup_logging(verbose)


@cli.command(
    "run",
    cls=SeparatedFilesCommand,
    context_settings=dict(ignore_unknown_options=True, allow_interspersed_args=False),
)
@click.argument("rename_command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.option(
    "--dry-run-jobs",
    type=click.IntRange(min=1),
    default=DEFAULT_DRY_RUN_CONCURRENCY,
    help="Maximum number of dry-run simulations running at once.",
)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    default=DEFAULT_RENAME_CONCURRENCY,
    help="Maximum number of accepted renames running at once.",
)
@click.option("--progress", is_flag=True, default=False, help="Show progress while applying accepted renames.")
def run_batch(
    rename_command: tuple[str, ...],
    files: tuple[str, ...],
    dry_run_jobs: int,
    jobs: int,
    progress: bool,
) -> None:
    """Interactively rename FILEs with RENAME_COMMAND.

    RENAME_COMMAND is run once per file with the file name appended as its last
    argument, first on an empty stand-in file in a temporary directory to find
    out the new name. Each change is shown for confirmation: press Enter or y to
    accept, n to skip, q to stop asking.

    Examples:

        batch-rename run perl-rename 's/ /_/g' -- *.txt

        batch-rename run --jobs 8 my-normalizer --lowercase -- photos/*
    """
    orchestrator = BatchOrchestrator(
        command=rename_command,
        confirmer=Confirmer(console=console),
        dry_run_concurrency=dry_run_jobs,
        rename_concurrency=jobs,
        show_progress=progress,
    )

    try:
        asyncio.run(orchestrator.run([Path(f) for f in files]))
    except BatchRenameError as e:
        _report_error(e)
        raise SystemExit(1) from e


@cli.command(
    "print",
    context_settings=dict(ignore_unknown_options=True, allow_interspersed_args=False),
)
@click.option("-n", "--dry-run", is_flag=True, default=False, help="Do not actually perform the rename.")
@click.argument("rename_command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.argument("file", type=click.Path(exists=True, path_type=Path))
def print_rename(dry_run: bool, rename_command: tuple[str, ...], file: Path) -> None:
    """Rename FILE with RENAME_COMMAND and print its new path.

    With --dry-run the new path is only computed and printed; FILE is left alone.
    """
    try:
        new_path = asyncio.run(rename(file, rename_command, dry_run=dry_run))
    except BatchRenameError as e:
        _report_error(e)
        raise SystemExit(1) from e

    click.echo(os.fsencode(new_path))
