"""FastAPI dependency injection functions for shared state."""

from __future__ import annotations

from pathlib import Path

from fastapi import Request

from codeedit.engine.artifact_store import ArtifactStore
from codeedit.engine.checklist_store import ChecklistStore


def get_repo_root(request: Request) -> Path:
    """Get the repository root being served."""
    return request.app.state.repo_root


def get_artifacts(request: Request) -> ArtifactStore:
    """Get the shared ArtifactStore from app state."""
    return request.app.state.artifacts


def get_checklist(request: Request) -> ChecklistStore:
    """Get the shared ChecklistStore from app state."""
    return request.app.state.checklist


def get_max_results(request: Request) -> int:
    """Get the search result cap."""
    return request.app.state.max_results
