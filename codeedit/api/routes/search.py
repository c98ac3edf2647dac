"""Search route -- filename and content matches across the repository."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Query

from codeedit.api.deps import get_repo_root, get_max_results
from codeedit.api.models import SearchResultResponse
from codeedit.engine.search import perform_search

logger = logging.getLogger("api.search")

router = APIRouter(prefix="/api", tags=["search"])


@router.get("/search", response_model=list[SearchResultResponse])
async def search(
    q: str,
    regex: bool = False,
    glob: str | None = Query(default=None),
    repo_root: Path = Depends(get_repo_root),
    max_results: int = Depends(get_max_results),
) -> list[SearchResultResponse]:
    """Search file paths and contents.

    Walks the repository off the event loop; results keep walk order.
    """
    hits = await asyncio.to_thread(
        perform_search, repo_root, q, regex, glob, max_results
    )
    logger.info("[SEARCH] %r (regex=%s, glob=%s) -> %d hits", q, regex, glob, len(hits))
    return [
        SearchResultResponse(file=h.file, line=h.line, column=h.column, preview=h.preview)
        for h in hits
    ]
