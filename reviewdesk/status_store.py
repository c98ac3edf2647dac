"""Status Store -- local review-status mapping with optimistic writes.

``set_status`` answers from local state straight away and hands the remote
write to a background task.  When that task finishes it re-reads the whole
mapping from the authority, so the optimistic guess is replaced by ground
truth.  A failed remote write leaves the optimistic value in place until the
next successful refresh.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Coroutine, Protocol

from reviewdesk.errors import TransportFailure
from reviewdesk.models import ReviewStatus, StatusRecord
from reviewdesk.notices import NoticeBoard

logger = logging.getLogger("reviewdesk.status_store")


class ChecklistAuthority(Protocol):
    async def get_all(self) -> dict[str, StatusRecord]: ...

    async def patch(
        self, path: str, status: ReviewStatus | None = None, note: str | None = None
    ) -> StatusRecord: ...


class StatusStore:
    """Per-artifact review status, synchronized with the remote checklist."""

    def __init__(self, authority: ChecklistAuthority, notices: NoticeBoard | None = None) -> None:
        self._authority = authority
        self._notices = notices
        self._records: dict[str, StatusRecord] = {}
        self._pending: set[asyncio.Task] = set()
        self._unconfirmed: dict[str, str] = {}

    def get_all(self) -> dict[str, StatusRecord]:
        """Snapshot of the local mapping, in store iteration order."""
        return dict(self._records)

    def get(self, artifact_id: str) -> StatusRecord | None:
        return self._records.get(artifact_id)

    def status_of(self, artifact_id: str) -> ReviewStatus:
        """Current status; an artifact without a record is implicitly ``todo``."""
        record = self._records.get(artifact_id)
        return record.status if record else ReviewStatus.TODO

    async def refresh(self) -> dict[str, StatusRecord]:
        """Replace the local mapping with the authority's.

        Raises:
            TransportFailure: If the checklist cannot be fetched; the local
                mapping is left unchanged.
        """
        records = await self._authority.get_all()
        self._records = dict(records)
        logger.debug("Refreshed %d status records", len(self._records))
        return self.get_all()

    def set_status(self, artifact_id: str, status: ReviewStatus | str) -> StatusRecord:
        """Optimistically set a status and reconcile in the background.

        Must be called from inside a running event loop.
        """
        status = ReviewStatus(status)
        previous = self._records.get(artifact_id)
        record = StatusRecord(
            artifact_id=artifact_id,
            status=status,
            note=previous.note if previous else "",
            updated_at=int(time.time()),
        )
        self._records[artifact_id] = record
        self._spawn(self._reconcile(artifact_id, status=status))
        return record

    def set_note(self, artifact_id: str, note: str) -> StatusRecord:
        """Optimistically set the note, keeping the status."""
        previous = self._records.get(artifact_id)
        record = StatusRecord(
            artifact_id=artifact_id,
            status=previous.status if previous else ReviewStatus.TODO,
            note=note,
            updated_at=int(time.time()),
        )
        self._records[artifact_id] = record
        self._spawn(self._reconcile(artifact_id, note=note))
        return record

    @property
    def unconfirmed(self) -> dict[str, str]:
        """Artifacts whose latest remote write failed, with the failure message."""
        return dict(self._unconfirmed)

    @property
    def pending(self) -> int:
        """Number of reconciliation tasks still running."""
        return len(self._pending)

    async def wait_idle(self) -> None:
        """Wait until every outstanding reconciliation has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _spawn(self, coro: Coroutine) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _reconcile(
        self, artifact_id: str, status: ReviewStatus | None = None, note: str | None = None
    ) -> None:
        try:
            await self._authority.patch(artifact_id, status=status, note=note)
        except TransportFailure as exc:
            logger.warning("Status update for %s not confirmed: %s", artifact_id, exc)
            self._unconfirmed[artifact_id] = str(exc)
            if self._notices:
                self._notices.error(f"Could not update status of {artifact_id}")
            return

        self._unconfirmed.pop(artifact_id, None)

        try:
            await self.refresh()
        except TransportFailure as exc:
            logger.warning("Checklist refresh after update failed: %s", exc)
