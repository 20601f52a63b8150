"""Simulate, confirm and apply renames for a batch of files."""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from tqdm import tqdm

from batch_rename.errors import AggregateError, RenameFailure, printable
from batch_rename.models.rename import BatchReport, Decision, RenameRequest, SimulationResult
from batch_rename.processors.confirmation import Confirmer
from batch_rename.processors.rename_simulator import simulate


logger = logging.getLogger(__name__)

# Maximum number of dry-run simulations in flight at once
DEFAULT_DRY_RUN_CONCURRENCY = 32

# Maximum number of real renames in flight at once
DEFAULT_RENAME_CONCURRENCY = 64


class BatchOrchestrator:
    """Drives a batch of files through simulation, confirmation and renaming."""

    def __init__(
        self,
        command: Sequence[str],
        confirmer: Confirmer,
        dry_run_concurrency: int = DEFAULT_DRY_RUN_CONCURRENCY,
        rename_concurrency: int = DEFAULT_RENAME_CONCURRENCY,
        show_progress: bool = False,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            command: Rename command and its arguments; the file name is appended.
            confirmer: Asks the user about every rename that changes a name.
            dry_run_concurrency: Maximum simultaneous dry-run simulations.
            rename_concurrency: Maximum simultaneous real renames.
            show_progress: Show a progress bar while waiting for real renames.
        """
        if dry_run_concurrency < 1 or rename_concurrency < 1:
            raise ValueError("Concurrency limits must be at least 1.")

        self.command = tuple(command)
        self.confirmer = confirmer
        self.dry_run_concurrency = dry_run_concurrency
        self.rename_concurrency = rename_concurrency
        self.show_progress = show_progress

    async def _simulate(self, semaphore: asyncio.Semaphore, file: Path) -> SimulationResult:
        async with semaphore:
            return await simulate(RenameRequest(command=self.command, file=file), dry_run=True)

    async def _apply(self, semaphore: asyncio.Semaphore, source: Path) -> Path:
        async with semaphore:
            result = await simulate(RenameRequest(command=self.command, file=source), dry_run=False)
            return result.target

    async def run(self, files: Sequence[Path | str]) -> BatchReport:
        """Rename `files` after asking the user about each proposed change.

        Dry-runs are consumed in completion order. Accepted renames start right
        away in the background; all of them are waited for before returning,
        even after the user quits or a dry-run fails.

        Returns:
            BatchReport describing the run.

        Raises:
            AggregateError: If one or more real renames failed.
            BatchRenameError: If a dry-run failed; this aborts the batch.
        """
        report = BatchReport()
        dry_run_semaphore = asyncio.Semaphore(self.dry_run_concurrency)
        rename_semaphore = asyncio.Semaphore(self.rename_concurrency)

        simulations = [asyncio.create_task(self._simulate(dry_run_semaphore, Path(file))) for file in files]
        handles: list[tuple[Path, asyncio.Task[Path]]] = []

        completed = False
        try:
            for next_result in asyncio.as_completed(simulations):
                result = await next_result
                report.simulated += 1

                if not result.changed:
                    report.unchanged += 1
                    continue

                decision = await self.confirmer.confirm(result.source.name, result.target.name)
                if decision is Decision.ACCEPT:
                    report.accepted += 1
                    handle = asyncio.create_task(self._apply(rename_semaphore, result.source))
                    handles.append((result.source, handle))
                elif decision is Decision.REJECT:
                    report.rejected += 1
                else:
                    report.quit = True
                    break
            completed = True
        finally:
            await self._cancel(simulations)
            failures = await self._drain(handles)
            if not completed:
                # A propagating dry-run error replaces AggregateError; nothing else reports these.
                for failure in failures:
                    logger.error("Failed to rename %s", failure)

        report.failed = len(failures)
        report.renamed = len(handles) - len(failures)
        logger.info(report.summary())

        if failures:
            raise AggregateError(failures, attempted=len(handles))
        return report

    async def _cancel(self, simulations: list[asyncio.Task[SimulationResult]]) -> None:
        """Stop simulations whose results will not be consumed anymore."""
        pending = [task for task in simulations if not task.done()]
        for task in pending:
            task.cancel()
        # Retrieve outcomes so abandoned failures are not reported as never retrieved.
        await asyncio.gather(*simulations, return_exceptions=True)
        if pending:
            logger.debug("Cancelled %d pending simulation(s)", len(pending))

    async def _drain(self, handles: list[tuple[Path, asyncio.Task[Path]]]) -> list[RenameFailure]:
        """Wait for every real rename and collect the ones that failed."""
        if not handles:
            return []

        failures: list[RenameFailure] = []
        with tqdm(total=len(handles), desc="Applying renames...", disable=not self.show_progress) as progress:
            for _, handle in handles:
                handle.add_done_callback(lambda _task: progress.update(1))
            outcomes = await asyncio.gather(*(handle for _, handle in handles), return_exceptions=True)

        for (source, _), outcome in zip(handles, outcomes):
            if isinstance(outcome, BaseException):
                logger.debug("Failed to rename '%s': %s", printable(source), printable(str(outcome)))
                failures.append(RenameFailure(source=source, error=outcome))
        return failures
