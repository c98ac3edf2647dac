"""Pydantic request/response models for the CodeEdit API."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

StatusValue = Literal["todo", "in_progress", "done"]


# ── Search ────────────────────────────────────────────────────────────────


class SearchResultResponse(BaseModel):
    """A single search hit."""

    file: str
    line: int
    column: int
    preview: str


# ── Files ─────────────────────────────────────────────────────────────────


class FileContentResponse(BaseModel):
    """File content plus its version token."""

    content: str
    etag: str


class SaveFileRequest(BaseModel):
    """Request body for a compare-and-swap save."""

    path: str = Field(..., min_length=1)
    content: str
    etag: str


class SaveFileResponse(BaseModel):
    """Outcome of a save: ``ok`` with the new etag, or ``conflict``."""

    status: Literal["ok", "conflict"]
    new_etag: str | None = None
    message: str = ""


# ── Checklist ─────────────────────────────────────────────────────────────


class ChecklistItemModel(BaseModel):
    """Review state of one file."""

    status: StatusValue = "todo"
    note: str = ""
    updated_ts: int = 0


class PatchChecklistRequest(BaseModel):
    """Partial update of a checklist item."""

    path: str = Field(..., min_length=1)
    status: StatusValue | None = None
    note: str | None = None


class PatchChecklistResponse(BaseModel):
    """Result of a checklist update."""

    ok: bool = True
    path: str
    item: ChecklistItemModel
