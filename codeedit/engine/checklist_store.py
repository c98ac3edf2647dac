"""Checklist store -- per-file review status persisted as JSON."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass, asdict
from pathlib import Path

logger = logging.getLogger("engine.checklist_store")

CHECKLIST_DIR = "codeedit"
CHECKLIST_FILE = "checklist.json"

VALID_STATUSES = ("todo", "in_progress", "done")


@dataclass
class ChecklistItem:
    """Review state of one file."""

    status: str = "todo"
    note: str = ""
    updated_ts: int = 0


def _now() -> int:
    return int(time.time())


class ChecklistStore:
    """Keeps the checklist in memory and rewrites the JSON file on every change.

    State is persisted to {repo_root}/codeedit/checklist.json.
    """

    def __init__(self, repo_root: Path) -> None:
        self._path = repo_root / CHECKLIST_DIR / CHECKLIST_FILE
        self._items: dict[str, ChecklistItem] = {}
        self._lock = threading.Lock()
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        """Load checklist state from disk."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            for key, item in sorted(data.items()):
                self._items[key] = ChecklistItem(**item)
            logger.info("Loaded %d checklist items from %s", len(self._items), self._path)
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning("Failed to load checklist, starting empty: %s", e)
            self._items = {}

    def _save(self) -> None:
        """Save checklist state to disk atomically."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        data = {k: asdict(v) for k, v in sorted(self._items.items())}
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    def all(self) -> dict[str, ChecklistItem]:
        """Snapshot of every item, ordered by path."""
        with self._lock:
            return {k: ChecklistItem(**asdict(v)) for k, v in sorted(self._items.items())}

    def get(self, path: str) -> ChecklistItem | None:
        with self._lock:
            return self._items.get(path)

    def patch(self, path: str, status: str | None = None, note: str | None = None) -> ChecklistItem:
        """Create or update the item for ``path``.

        Fields left as ``None`` keep their current value; a new item starts as
        ``todo`` with an empty note.  ``updated_ts`` is always refreshed.

        Raises:
            ValueError: If ``status`` is not a known review status.
        """
        if status is not None and status not in VALID_STATUSES:
            raise ValueError(f"Unknown status '{status}'")

        with self._lock:
            item = self._items.setdefault(path, ChecklistItem(updated_ts=_now()))
            if status is not None:
                item.status = status
            if note is not None:
                item.note = note
            item.updated_ts = _now()
            try:
                self._save()
            except OSError as e:
                # Memory stays authoritative for this process
                logger.error("Failed to persist checklist to %s: %s", self._path, e)
            logger.info("Checklist %s -> %s", path, item.status)
            return ChecklistItem(**asdict(item))
