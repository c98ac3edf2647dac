"""Pydantic models for review state, search hits, the work queue and results."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# ── Review status ─────────────────────────────────────────────────────

class ReviewStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class StatusRecord(BaseModel):
    """Review state of one artifact, as known to the Status Store."""

    artifact_id: str
    status: ReviewStatus = ReviewStatus.TODO
    note: str = ""
    updated_at: int = 0  # unix seconds

    @classmethod
    def from_wire(cls, artifact_id: str, data: dict[str, Any]) -> StatusRecord:
        """Build from a checklist item (``{status, note, updated_ts}``)."""
        return cls(
            artifact_id=artifact_id,
            status=data.get("status") or ReviewStatus.TODO,
            note=data.get("note") or "",
            updated_at=int(data.get("updated_ts") or 0),
        )


# ── Search ────────────────────────────────────────────────────────────

class MatchHit(BaseModel):
    """One match location returned by the search capability."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    artifact_id: str = Field(alias="file")
    line: int = Field(ge=1)
    column: int = Field(ge=1)
    preview: str = ""


class QueueEntry(BaseModel):
    """One artifact in the derived work queue."""

    model_config = ConfigDict(frozen=True)

    artifact_id: str
    match_count: int = Field(default=0, ge=0)
    first_match_line: int = Field(default=1, ge=1)
    status: ReviewStatus = ReviewStatus.TODO


# ── Artifact transport ────────────────────────────────────────────────

class VersionedContent(BaseModel):
    """Artifact content plus the version token it was read at."""

    content: str
    version_token: str


class WriteAck(BaseModel):
    """Authority's answer to a versioned write."""

    accepted: bool
    new_version_token: str | None = None
    message: str = ""


# ── Operation results ─────────────────────────────────────────────────

CONFLICT = "conflict"
END_OF_QUEUE = "end-of-queue"
TRANSPORT_FAILURE = "transport-failure"
DECLINED = "declined"


class SaveResult(BaseModel):
    ok: bool
    new_version_token: str | None = None
    reason: Literal["conflict"] | None = None
    message: str = ""


class AdvanceResult(BaseModel):
    advanced: bool
    target: QueueEntry | None = None
    reason: Literal["end-of-queue", "conflict", "transport-failure", "declined"] | None = None
    message: str = ""
