"""CodeEdit engine -- search, artifact storage, review checklist."""

from codeedit.engine.search import SearchHit, perform_search
from codeedit.engine.artifact_store import (
    ArtifactStore,
    ArtifactContent,
    WriteOutcome,
    InvalidArtifactPath,
    ArtifactNotFound,
    BinaryArtifact,
    generate_etag,
)
from codeedit.engine.checklist_store import ChecklistStore, ChecklistItem

__all__ = [
    "SearchHit",
    "perform_search",
    "ArtifactStore",
    "ArtifactContent",
    "WriteOutcome",
    "InvalidArtifactPath",
    "ArtifactNotFound",
    "BinaryArtifact",
    "generate_etag",
    "ChecklistStore",
    "ChecklistItem",
]
