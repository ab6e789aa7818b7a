"""Rich live display for sync runs."""

from __future__ import annotations

from types import TracebackType

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from todoist_backup.contracts.progress import SyncProgress

_DETAIL_WIDTH = 40


def _shorten(text: str, width: int = _DETAIL_WIDTH) -> str:
    return text if len(text) <= width else "…" + text[-(width - 1) :]


class RichSyncProgress(SyncProgress):
    """One row per phase showing the page in hand and the run's block writes.

    ``Reconcile`` counts pages, ``Cleanup`` runs without a total, and both
    rows carry a ``+created ~updated -deleted`` tally once writes start::

        with RichSyncProgress() as progress:
            outcome = await session.sync(progress=progress)
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description:<11}"),
            BarColumn(bar_width=24),
            MofNCompleteColumn(),
            TextColumn("[dim]{task.fields[page]}[/dim]"),
            TextColumn("{task.fields[writes]}"),
            TimeElapsedColumn(),
            console=self._console,
        )
        self._rows: dict[str, RichTaskID] = {}
        self._writes = ""

    def __enter__(self) -> RichSyncProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def phase_start(self, phase: str, total: int | None = None) -> None:
        self._rows[phase] = self._progress.add_task(phase, total=total, page="", writes=self._writes)

    def location_start(self, phase: str, location: str) -> None:
        row = self._rows.get(phase)
        if row is not None:
            self._progress.update(row, page=_shorten(location))

    def mutations_applied(self, created: int, updated: int, deleted: int) -> None:
        if not (created or updated or deleted):
            return
        self._writes = f"[green]+{created}[/] [yellow]~{updated}[/] [red]-{deleted}[/]"
        for row in self._rows.values():
            if not self._progress.tasks[row].finished:
                self._progress.update(row, writes=self._writes)

    def item_done(self, phase: str) -> None:
        row = self._rows.get(phase)
        if row is not None:
            self._progress.advance(row)

    def phase_done(self, phase: str) -> None:
        row = self._rows.get(phase)
        if row is None:
            return
        total = self._progress.tasks[row].total or 1
        self._progress.update(row, total=total, completed=total, page="")

    def phase_error(self, phase: str, error: BaseException) -> None:
        row = self._rows.get(phase)
        if row is None:
            return
        self._progress.update(row, description=f"[red]✗ {phase}[/red]", page=_shorten(str(error)))
