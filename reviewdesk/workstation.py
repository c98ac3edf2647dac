"""ReviewWorkstation -- what a front end drives.

Wires the Status Store, Match Aggregator, Document Session, Navigation
Controller and Match Highlighter together, and turns every failure into a
notice instead of an exception.  Overlapping searches or opens are not
sequenced: whichever response arrives last wins.
"""

from __future__ import annotations

import logging

from reviewdesk.aggregator import aggregate
from reviewdesk.client.authority import RemoteAuthority
from reviewdesk.config import ReviewDeskConfig
from reviewdesk.errors import ConflictDeclined, NoOpenDocument, TransportFailure
from reviewdesk.highlighter import TextRange, locate
from reviewdesk.models import (
    CONFLICT,
    DECLINED,
    END_OF_QUEUE,
    AdvanceResult,
    MatchHit,
    QueueEntry,
    ReviewStatus,
    StatusRecord,
)
from reviewdesk.navigator import NavigationController
from reviewdesk.notices import NoticeBoard
from reviewdesk.session import ConfirmDiscard, DocumentSession, SessionManager
from reviewdesk.status_store import StatusStore

logger = logging.getLogger("reviewdesk.workstation")

CONFLICT_TEXT = "CONFLICT: File changed on disk. Reload required."


class ReviewWorkstation:
    """Review session controller exposed to the presentation layer."""

    def __init__(
        self,
        authority: RemoteAuthority,
        *,
        notices: NoticeBoard | None = None,
        confirm_discard: ConfirmDiscard | None = None,
    ) -> None:
        self.authority = authority
        self.notices = notices or NoticeBoard()
        self.confirm_discard = confirm_discard

        self.statuses = StatusStore(authority.checklist, self.notices)
        self.sessions = SessionManager(authority.files, self.statuses, after_save=self._after_save)
        self.navigator = NavigationController(self.sessions)

        self.query = ""
        self.is_regex = False
        self.glob: str | None = None
        self.focus_line: int | None = None
        self._hits: list[MatchHit] = []
        self._highlights: list[TextRange] = []

    @classmethod
    def from_config(cls, config: ReviewDeskConfig, **kwargs) -> ReviewWorkstation:
        authority = RemoteAuthority.connect(
            config.api_url,
            timeout=config.timeout,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )
        return cls(authority, **kwargs)

    async def __aenter__(self) -> ReviewWorkstation:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Let pending status writes finish, then drop the connections."""
        await self.statuses.wait_idle()
        await self.authority.close()

    # ── Derived state ─────────────────────────────────────────────────

    @property
    def query_active(self) -> bool:
        return bool(self.query.strip())

    @property
    def hits(self) -> list[MatchHit]:
        return list(self._hits)

    @property
    def queue(self) -> list[QueueEntry]:
        return aggregate(self._hits, self.statuses.get_all(), self.query_active)

    @property
    def session(self) -> DocumentSession | None:
        return self.sessions.current

    @property
    def dirty(self) -> bool:
        return self.sessions.dirty

    @property
    def highlights(self) -> list[TextRange]:
        return list(self._highlights)

    # ── Actions ───────────────────────────────────────────────────────

    async def refresh_statuses(self) -> bool:
        try:
            await self.statuses.refresh()
        except TransportFailure as exc:
            logger.warning("Checklist refresh failed: %s", exc)
            self.notices.error("Could not load checklist")
            return False
        return True

    async def search(self, query: str, is_regex: bool | None = None, glob: str | None = None) -> list[QueueEntry]:
        """Run a search and return the new queue.

        A blank query clears the hits without contacting the authority.  On
        failure the previous query and hits stay.
        """
        regex = self.is_regex if is_regex is None else is_regex

        if query.strip():
            try:
                hits = await self.authority.search.search(query, regex, glob)
            except TransportFailure as exc:
                logger.warning("Search %r failed: %s", query, exc)
                self.notices.error("Search failed")
                return self.queue
        else:
            hits = []

        self.query, self.is_regex, self.glob = query, regex, glob
        self._hits = hits
        self._rehighlight()
        return self.queue

    async def open(self, artifact_id: str, line: int | None = None) -> DocumentSession | None:
        """Open an artifact, asking before unsaved edits are discarded."""
        try:
            session = await self.sessions.open(artifact_id, self.confirm_discard)
        except ConflictDeclined:
            return None
        except TransportFailure as exc:
            logger.warning("Open %s failed: %s", artifact_id, exc)
            self.notices.error("Could not open file")
            return None

        self.focus_line = line
        self._rehighlight()
        return session

    def edit(self, new_content: str) -> bool:
        """Replace the open buffer. Returns False when nothing is open."""
        try:
            self.sessions.edit(new_content)
        except NoOpenDocument:
            return False
        self._rehighlight(report=False)
        return True

    async def save(self) -> bool:
        """Save the open document. Returns True when the authority accepted it."""
        try:
            result = await self.sessions.save()
        except NoOpenDocument:
            return False
        except TransportFailure as exc:
            logger.warning("Save failed: %s", exc)
            self.notices.error("Save failed")
            return False

        if not result.ok:
            self.notices.error(CONFLICT_TEXT)
            return False
        self.notices.success("Saved successfully")
        return True

    async def save_and_advance(self) -> AdvanceResult:
        current = self.session.artifact_id if self.session else None
        result = await self.navigator.save_and_advance(self.queue, current, self.confirm_discard)

        if result.advanced:
            self.focus_line = result.target.first_match_line
            self._rehighlight()
        elif result.reason == END_OF_QUEUE:
            self.notices.info("End of list")
        elif result.reason == CONFLICT:
            self.notices.error(CONFLICT_TEXT)
        elif result.message and result.reason != DECLINED:
            self.notices.error(result.message)
        return result

    async def reload(self) -> DocumentSession | None:
        """Discard local edits and re-read the open artifact (conflict resolution)."""
        try:
            session = await self.sessions.reload()
        except NoOpenDocument:
            return None
        except TransportFailure as exc:
            logger.warning("Reload failed: %s", exc)
            self.notices.error("Could not reload file")
            return None
        self._rehighlight()
        self.notices.info(f"Reloaded {session.artifact_id}")
        return session

    def set_status(self, artifact_id: str, status: ReviewStatus | str) -> StatusRecord:
        return self.statuses.set_status(artifact_id, status)

    def set_note(self, artifact_id: str, note: str) -> StatusRecord:
        return self.statuses.set_note(artifact_id, note)

    def mark_done(self) -> StatusRecord | None:
        if self.session is None:
            return None
        return self.set_status(self.session.artifact_id, ReviewStatus.DONE)

    def reopen(self) -> StatusRecord | None:
        if self.session is None:
            return None
        return self.set_status(self.session.artifact_id, ReviewStatus.IN_PROGRESS)

    # ── Internals ─────────────────────────────────────────────────────

    async def _after_save(self, session: DocumentSession) -> None:
        # Saved content may move or remove matches
        if not self.query_active:
            return
        try:
            self._hits = await self.authority.search.search(self.query, self.is_regex, self.glob)
        except TransportFailure as exc:
            logger.warning("Search refresh after save failed: %s", exc)
            self.notices.error("Search failed")

    def _rehighlight(self, report: bool = True) -> None:
        session = self.sessions.current
        if session is None or not self.query_active:
            self._highlights = []
            return
        self._highlights = locate(
            session.content,
            self.query,
            self.is_regex,
            self.notices if report else None,
        )
