"""File read/save routes with etag-based optimistic concurrency."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from codeedit.api.deps import get_artifacts
from codeedit.api.models import FileContentResponse, SaveFileRequest, SaveFileResponse
from codeedit.engine.artifact_store import (
    ArtifactStore,
    ArtifactNotFound,
    BinaryArtifact,
    InvalidArtifactPath,
)

logger = logging.getLogger("api.files")

router = APIRouter(prefix="/api", tags=["files"])


@router.get("/file", response_model=FileContentResponse)
async def read_file(
    path: str,
    artifacts: ArtifactStore = Depends(get_artifacts),
) -> FileContentResponse:
    """Read a text file and its etag."""
    try:
        loaded = artifacts.read(path)
    except InvalidArtifactPath as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BinaryArtifact as e:
        raise HTTPException(status_code=415, detail=str(e))
    except ArtifactNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    return FileContentResponse(content=loaded.content, etag=loaded.etag)


@router.post("/file", response_model=SaveFileResponse)
async def save_file(
    body: SaveFileRequest,
    artifacts: ArtifactStore = Depends(get_artifacts),
) -> SaveFileResponse:
    """Save a file if its etag still matches the copy on disk.

    A version mismatch is reported in the body (``status: conflict``), not as
    an HTTP error, so the client can keep the unsaved buffer.
    """
    try:
        outcome = artifacts.write(body.path, body.content, body.etag)
    except InvalidArtifactPath as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        logger.error("[FILES] Save failed for %s: %s", body.path, e)
        raise HTTPException(status_code=500, detail=str(e))

    if not outcome.accepted:
        return SaveFileResponse(status="conflict", message=outcome.message)
    return SaveFileResponse(status="ok", new_etag=outcome.new_etag)
