"""Notice board -- transient, dismissible messages for the operator."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

logger = logging.getLogger("reviewdesk.notices")

NOTICE_KINDS = ("info", "success", "warning", "error")

_LOG_LEVELS = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.WARNING,
}


@dataclass
class Notice:
    """A status message for the presentation layer."""

    id: str
    kind: str  # "info", "success", "warning", "error"
    text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    dismissed: bool = False


class NoticeBoard:
    """Status-message channel.

    Only the most recent undismissed notice is "current"; older ones stay in
    the history.  Listeners are called synchronously for every new notice.
    """

    def __init__(self, max_history: int = 200) -> None:
        self._history: list[Notice] = []
        self._max_history = max_history
        self._listeners: list[Callable[[Notice], None]] = []

    def post(self, kind: str, text: str) -> Notice:
        """Publish a notice.

        Raises:
            ValueError: If ``kind`` is not a known notice kind.
        """
        if kind not in NOTICE_KINDS:
            raise ValueError(f"Unknown notice kind '{kind}'")
        notice = Notice(id=f"notice-{uuid.uuid4().hex[:8]}", kind=kind, text=text)
        self._history.append(notice)
        if len(self._history) > self._max_history:
            del self._history[: len(self._history) - self._max_history]
        logger.log(_LOG_LEVELS[kind], "[%s] %s", kind, text)
        for listener in list(self._listeners):
            listener(notice)
        return notice

    def info(self, text: str) -> Notice:
        return self.post("info", text)

    def success(self, text: str) -> Notice:
        return self.post("success", text)

    def warning(self, text: str) -> Notice:
        return self.post("warning", text)

    def error(self, text: str) -> Notice:
        return self.post("error", text)

    @property
    def current(self) -> Notice | None:
        """The latest notice, unless it was dismissed."""
        if self._history and not self._history[-1].dismissed:
            return self._history[-1]
        return None

    def dismiss(self, notice_id: str | None = None) -> None:
        """Dismiss a notice by id, or the current one."""
        for notice in reversed(self._history):
            if notice_id is None or notice.id == notice_id:
                notice.dismissed = True
                return

    def history(self, kind: str | None = None, limit: int = 20) -> list[Notice]:
        """Most recent notices first, optionally filtered by kind."""
        items = [n for n in reversed(self._history) if kind is None or n.kind == kind]
        return items[:limit]

    def subscribe(self, listener: Callable[[Notice], None]) -> None:
        self._listeners.append(listener)
