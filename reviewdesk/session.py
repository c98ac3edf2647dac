"""Document Session -- the single open artifact, its buffer and version token."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol, Union

from reviewdesk.errors import ConflictDeclined, NoOpenDocument
from reviewdesk.models import CONFLICT, ReviewStatus, SaveResult, VersionedContent, WriteAck
from reviewdesk.status_store import StatusStore

logger = logging.getLogger("reviewdesk.session")

ConfirmDiscard = Callable[[], Union[bool, Awaitable[bool]]]


class ArtifactAuthority(Protocol):
    async def read(self, path: str) -> VersionedContent: ...

    async def write(self, path: str, content: str, version_token: str) -> WriteAck: ...


@dataclass
class DocumentSession:
    """The open artifact.

    ``dirty`` is set by :meth:`SessionManager.edit` and cleared only by a
    successful save or an explicit reload.  ``version_token`` is replaced
    only by the token a successful save returns.
    """

    artifact_id: str
    content: str
    version_token: str
    dirty: bool = False


AfterSave = Callable[[DocumentSession], Awaitable[None]]


async def _confirmed(confirm: ConfirmDiscard | None) -> bool:
    if confirm is None:
        return False
    answer = confirm()
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)


class SessionManager:
    """Owns the one-slot session and every operation that mutates it."""

    def __init__(
        self,
        authority: ArtifactAuthority,
        statuses: StatusStore,
        *,
        after_save: AfterSave | None = None,
    ) -> None:
        self._authority = authority
        self._statuses = statuses
        self._after_save = after_save
        self._current: DocumentSession | None = None

    @property
    def current(self) -> DocumentSession | None:
        return self._current

    @property
    def dirty(self) -> bool:
        return self._current is not None and self._current.dirty

    def _require(self) -> DocumentSession:
        if self._current is None:
            raise NoOpenDocument("No document is open")
        return self._current

    async def open(self, artifact_id: str, confirm_discard: ConfirmDiscard | None = None) -> DocumentSession:
        """Replace the open document with ``artifact_id``.

        Unsaved edits are only discarded when ``confirm_discard`` agrees; with
        no callback they are kept.  Opening a ``todo`` artifact marks it
        ``in_progress``.

        Raises:
            ConflictDeclined: Discard refused; the current session is untouched.
            TransportFailure: Read failed; the current session is untouched.
        """
        if self.dirty and not await _confirmed(confirm_discard):
            logger.info("Kept unsaved changes to %s; not opening %s", self._current.artifact_id, artifact_id)
            raise ConflictDeclined(f"Unsaved changes to {self._current.artifact_id} were kept")

        loaded = await self._authority.read(artifact_id)
        self._current = DocumentSession(
            artifact_id=artifact_id,
            content=loaded.content,
            version_token=loaded.version_token,
        )
        logger.info("Opened %s", artifact_id)

        if self._statuses.status_of(artifact_id) is ReviewStatus.TODO:
            self._statuses.set_status(artifact_id, ReviewStatus.IN_PROGRESS)
        return self._current

    def edit(self, new_content: str) -> None:
        """Replace the buffer. Any edit, even a no-op one, marks the session dirty."""
        session = self._require()
        session.content = new_content
        session.dirty = True

    async def save(self) -> SaveResult:
        """Write the buffer back under the session's version token.

        On conflict the buffer and dirty flag are left as they are; the
        caller has to :meth:`reload` explicitly.

        Raises:
            NoOpenDocument: Nothing is open.
            TransportFailure: The write did not reach the authority.
        """
        session = self._require()
        sent = session.content
        ack = await self._authority.write(session.artifact_id, sent, session.version_token)

        if not ack.accepted:
            logger.warning("Save conflict on %s: %s", session.artifact_id, ack.message or "version mismatch")
            return SaveResult(ok=False, reason=CONFLICT, message=ack.message)

        session.version_token = ack.new_version_token
        # Edits made while the write was in flight are still unsaved
        session.dirty = session.content != sent
        logger.info("Saved %s", session.artifact_id)
        if self._after_save is not None:
            await self._after_save(session)
        return SaveResult(ok=True, new_version_token=ack.new_version_token)

    async def reload(self) -> DocumentSession:
        """Re-read the open artifact from the authority, dropping local edits.

        Raises:
            NoOpenDocument: Nothing is open.
            TransportFailure: Read failed; the session is untouched.
        """
        session = self._require()
        loaded = await self._authority.read(session.artifact_id)
        session.content = loaded.content
        session.version_token = loaded.version_token
        session.dirty = False
        logger.info("Reloaded %s", session.artifact_id)
        return session

    async def close(self, confirm_discard: ConfirmDiscard | None = None) -> None:
        """Empty the slot.

        Raises:
            ConflictDeclined: The session is dirty and discarding was refused.
        """
        if self.dirty and not await _confirmed(confirm_discard):
            raise ConflictDeclined(f"Unsaved changes to {self._current.artifact_id} were kept")
        self._current = None
