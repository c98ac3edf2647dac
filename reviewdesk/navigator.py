"""Navigation Controller -- "save current, advance to next" through the queue."""

from __future__ import annotations

import logging
from typing import Sequence

from reviewdesk.errors import ConflictDeclined, TransportFailure
from reviewdesk.models import (
    CONFLICT,
    DECLINED,
    END_OF_QUEUE,
    TRANSPORT_FAILURE,
    AdvanceResult,
    QueueEntry,
)
from reviewdesk.session import ConfirmDiscard, SessionManager

logger = logging.getLogger("reviewdesk.navigator")


def next_entry(queue: Sequence[QueueEntry], current_artifact_id: str | None) -> QueueEntry | None:
    """The entry right after ``current_artifact_id``, or None if it is last or absent."""
    for index, entry in enumerate(queue):
        if entry.artifact_id == current_artifact_id:
            return queue[index + 1] if index + 1 < len(queue) else None
    return None


class NavigationController:
    """Sequential review driven off a queue snapshot."""

    def __init__(self, sessions: SessionManager) -> None:
        self._sessions = sessions

    async def save_and_advance(
        self,
        queue: Sequence[QueueEntry],
        current_artifact_id: str | None = None,
        confirm_discard: ConfirmDiscard | None = None,
    ) -> AdvanceResult:
        """Save the open document if needed, then open the next queue entry.

        The destination is taken from ``queue`` before saving, because a
        successful save may refresh the hits and reorder or shrink the queue.
        Nothing is navigated away from unless its edits were persisted.
        """
        if current_artifact_id is None and self._sessions.current is not None:
            current_artifact_id = self._sessions.current.artifact_id

        target = next_entry(queue, current_artifact_id)

        if self._sessions.dirty:
            try:
                saved = await self._sessions.save()
            except TransportFailure as exc:
                logger.warning("Not advancing: save of %s failed: %s", current_artifact_id, exc)
                return AdvanceResult(advanced=False, reason=TRANSPORT_FAILURE, message=f"Save failed: {exc}")
            if not saved.ok:
                return AdvanceResult(advanced=False, reason=CONFLICT, message=saved.message)

        if target is None:
            logger.info("End of queue after %s", current_artifact_id)
            return AdvanceResult(advanced=False, reason=END_OF_QUEUE, message="End of list")

        try:
            await self._sessions.open(target.artifact_id, confirm_discard)
        except ConflictDeclined as exc:
            return AdvanceResult(advanced=False, reason=DECLINED, message=str(exc))
        except TransportFailure as exc:
            logger.warning("Could not open %s: %s", target.artifact_id, exc)
            return AdvanceResult(advanced=False, reason=TRANSPORT_FAILURE, message=f"Could not open file: {exc}")

        return AdvanceResult(advanced=True, target=target)
