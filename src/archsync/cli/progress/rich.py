"""Rich-based sync progress display."""

from __future__ import annotations

from types import TracebackType
from typing import ClassVar

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from archsync.contracts.events import CountPayload, DeletionProgressPayload, SyncEvent, SyncEventType
from archsync.engine.progress import SyncProgress

_ITEM_EVENTS = frozenset(
    {
        SyncEventType.EPIC_CREATED,
        SyncEventType.EPIC_FAILED,
        SyncEventType.FEATURE_CREATED,
        SyncEventType.FEATURE_FAILED,
        SyncEventType.USER_STORY_CREATED,
        SyncEventType.USER_STORY_FAILED,
    }
)


class RichSyncProgress(SyncProgress):
    """Live terminal progress bars for the delete and create phases.

    Use as a context manager so the live display is properly started/stopped::

        with RichSyncProgress(total_items=12) as progress:
            outcome = await sdk.sync(request, progress=progress)
    """

    _PHASE_LABELS: ClassVar[dict[str, str]] = {
        "Delete": "[yellow]Delete[/]",
        "Create": "[green]Create[/]",
    }

    def __init__(self, *, total_items: int | None = None, console: Console | None = None) -> None:
        self._console = console or Console(stderr=True)
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description:>14}"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=False,
        )
        self._total_items = total_items
        self._task_ids: dict[str, RichTaskID] = {}
        self._failed = 0

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

    @property
    def failed(self) -> int:
        return self._failed

    def emit(self, event: SyncEvent) -> None:
        payload = event.payload
        if event.type == SyncEventType.OVERWRITE_STARTED:
            self._phase_start("Delete")
        elif event.type == SyncEventType.OVERWRITE_DELETING and isinstance(payload, CountPayload):
            self._update("Delete", total=payload.count, completed=0)
        elif event.type == SyncEventType.OVERWRITE_PROGRESS and isinstance(payload, DeletionProgressPayload):
            self._update("Delete", total=payload.total, completed=payload.deleted)
        elif event.type in (SyncEventType.OVERWRITE_DELETED, SyncEventType.OVERWRITE_NO_ITEMS):
            self._phase_done("Delete")
        elif event.type == SyncEventType.OVERWRITE_ERROR:
            self._phase_error("Delete")
        elif event.type in _ITEM_EVENTS:
            if "Create" not in self._task_ids:
                self._phase_start("Create", total=self._total_items)
            if event.type.value.endswith(":failed"):
                self._failed += 1
            self._progress.advance(self._task_ids["Create"])
        elif event.type == SyncEventType.SYNC_COMPLETE:
            self._phase_done("Create")
        elif event.type == SyncEventType.SYNC_ERROR:
            self._phase_error("Delete" if "Create" not in self._task_ids else "Create")

    def _phase_start(self, phase: str, total: int | None = None) -> None:
        label = self._PHASE_LABELS.get(phase, phase)
        self._task_ids[phase] = self._progress.add_task(label, total=total)

    def _update(self, phase: str, **fields: int) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is not None:
            self._progress.update(task_id, **fields)

    def _phase_done(self, phase: str) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is None:
            return
        task = self._progress.tasks[task_id]
        if task.total:
            self._progress.update(task_id, completed=task.total)
        else:
            self._progress.update(task_id, total=1, completed=1)

    def _phase_error(self, phase: str) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is None:
            return
        self._progress.update(task_id, description=f"[red]✗[/red] {phase:>10}")
