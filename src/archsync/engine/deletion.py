"""Batched deletion of existing work items for overwrite mode."""

from __future__ import annotations

import logging

from archsync.contracts.events import (
    CountPayload,
    DeletionProgressPayload,
    MessagePayload,
    OverwriteErrorPayload,
    SyncEvent,
    SyncEventType,
)
from archsync.contracts.exceptions import OverwriteError
from archsync.contracts.target import WorkItemTarget
from archsync.engine.progress import NullSyncProgress, SyncProgress
from archsync.engine.utils import chunked
from archsync.history.recorder import HistoryRecorder

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 20
ABORT_MESSAGE = "Overwrite operation failed. Aborting work item creation."


class ChunkedDeleter:
    """Deletes ids in sequential fixed-size batches, reporting after each batch.

    The first failing batch emits ``overwrite:error`` and raises
    ``OverwriteError``; later batches are never sent.
    """

    def __init__(
        self,
        target: WorkItemTarget,
        *,
        progress: SyncProgress | None = None,
        recorder: HistoryRecorder | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        permanent: bool = True,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._target = target
        self._progress: SyncProgress = progress or NullSyncProgress()
        self._recorder = recorder or HistoryRecorder()
        self._batch_size = batch_size
        self._permanent = permanent

    async def delete(self, project: str, ids: list[int], *, run_id: str | None = None) -> int:
        if not ids:
            self._progress.emit(
                SyncEvent(
                    type=SyncEventType.OVERWRITE_NO_ITEMS,
                    payload=MessagePayload(message="No existing work items found. Proceeding with creation."),
                )
            )
            return 0

        total = len(ids)
        batches = chunked(ids, self._batch_size)
        self._progress.emit(
            SyncEvent(
                type=SyncEventType.OVERWRITE_DELETING,
                payload=CountPayload(
                    message=f"Found {total} existing work items. Deleting in chunks of {self._batch_size}...",
                    count=total,
                ),
            )
        )

        deleted = 0
        for index, batch in enumerate(batches, start=1):
            try:
                await self._target.delete_items(project, batch, permanent=self._permanent)
            except Exception as exc:
                logger.error("Deleting batch %d of %d in %s failed: %s", index, len(batches), project, exc)
                self.report_failure(exc)
                raise OverwriteError(
                    f"Deleting batch {index} of {len(batches)} failed: {exc}",
                    deleted=deleted,
                    total=total,
                ) from exc

            deleted += len(batch)
            await self._recorder.increment_counters(run_id, {"deletion_count": len(batch)})
            self._progress.emit(
                SyncEvent(
                    type=SyncEventType.OVERWRITE_PROGRESS,
                    payload=DeletionProgressPayload(
                        message=f"Deleted chunk {index} of {len(batches)} ({len(batch)} items)",
                        deleted=deleted,
                        total=total,
                        current_chunk=index,
                        total_chunks=len(batches),
                    ),
                )
            )

        self._progress.emit(
            SyncEvent(
                type=SyncEventType.OVERWRITE_DELETED,
                payload=CountPayload(message=f"Successfully deleted {total} existing work items", count=total),
            )
        )
        return deleted

    def report_failure(self, error: BaseException) -> None:
        self._progress.emit(
            SyncEvent(
                type=SyncEventType.OVERWRITE_ERROR,
                payload=OverwriteErrorPayload(error=str(error), message=ABORT_MESSAGE),
            )
        )
