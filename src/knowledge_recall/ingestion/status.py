"""
Observable processing status for ingestion and deletion operations.

The tracker is an explicitly owned state holder: create one and inject it
into the pipeline and into whatever renders progress. Every status change is
pushed through a single-consumer asyncio.Queue. Terminal statuses revert to
Idle after a short delay scheduled on the event loop, so observers can show
"completed" or "failed" before it disappears.
"""

import asyncio
import logging
from typing import List, Optional

from knowledge_recall.ingestion.models import (
    Completed,
    Deleting,
    Failed,
    Idle,
    ProcessingStatus,
)

logger = logging.getLogger(__name__)

COMPLETED_VISIBILITY_SECONDS = 1.5
FAILED_VISIBILITY_SECONDS = 3.0
DELETED_VISIBILITY_SECONDS = 0.5


class ProcessingStatusTracker:
    """
    Holds the current ProcessingStatus and publishes every change.

    Example:
        >>> tracker = ProcessingStatusTracker()
        >>> pipeline = DocumentIngestionPipeline(store, embedding, status=tracker)
        >>> while True:
        ...     status = await tracker.next_update()
        ...     render(status)
    """

    def __init__(
        self,
        completed_delay: float = COMPLETED_VISIBILITY_SECONDS,
        failed_delay: float = FAILED_VISIBILITY_SECONDS,
        deleted_delay: float = DELETED_VISIBILITY_SECONDS,
        max_pending: int = 256,
    ):
        """
        Args:
            completed_delay: Seconds Completed stays visible before Idle
            failed_delay: Seconds Failed stays visible before Idle
            deleted_delay: Seconds a finished deletion stays visible before Idle
            max_pending: Updates kept for a slow consumer; the oldest are
                dropped beyond this
        """
        self.completed_delay = completed_delay
        self.failed_delay = failed_delay
        self.deleted_delay = deleted_delay

        self._status: ProcessingStatus = Idle()
        self._updates: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    @property
    def status(self) -> ProcessingStatus:
        """The current status."""
        return self._status

    def publish(self, status: ProcessingStatus) -> None:
        """Set the current status and cancel any pending revert to Idle."""
        self._cancel_reset()
        self._set(status)

    def complete(self, document_id: str) -> None:
        """Publish Completed and schedule the revert to Idle."""
        self._finish(Completed(document_id=document_id), self.completed_delay)

    def fail(self, document_id: str, reason: str) -> None:
        """Publish Failed and schedule the revert to Idle."""
        self._finish(Failed(document_id=document_id, reason=reason), self.failed_delay)

    def deleted(self, document_id: str, document_name: str) -> None:
        """Publish a finished deletion and schedule the revert to Idle."""
        self._finish(
            Deleting(document_id=document_id, document_name=document_name, progress=100),
            self.deleted_delay,
        )

    def reset(self) -> None:
        """Return to Idle immediately."""
        self._cancel_reset()
        if not isinstance(self._status, Idle):
            self._set(Idle())

    async def next_update(self) -> ProcessingStatus:
        """Wait for and return the next status change."""
        return await self._updates.get()

    def drain(self) -> List[ProcessingStatus]:
        """Return all queued status changes without waiting."""
        updates = []
        while not self._updates.empty():
            updates.append(self._updates.get_nowait())
        return updates

    def _finish(self, status: ProcessingStatus, delay: float) -> None:
        self.publish(status)
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(delay, self._revert_to_idle)

    def _revert_to_idle(self) -> None:
        self._reset_handle = None
        self._set(Idle())

    def _cancel_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _set(self, status: ProcessingStatus) -> None:
        self._status = status

        if self._updates.full():
            dropped = self._updates.get_nowait()
            logger.debug(f"Status queue full, dropped {dropped}")

        self._updates.put_nowait(status)
        logger.debug(f"Processing status: {status}")
