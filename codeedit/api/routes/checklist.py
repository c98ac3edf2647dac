"""Checklist routes -- review status per file."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from codeedit.api.deps import get_checklist
from codeedit.api.models import (
    ChecklistItemModel,
    PatchChecklistRequest,
    PatchChecklistResponse,
)
from codeedit.engine.checklist_store import ChecklistStore

logger = logging.getLogger("api.checklist")

router = APIRouter(prefix="/api", tags=["checklist"])


@router.get("/checklist", response_model=dict[str, ChecklistItemModel])
async def get_checklist_items(
    checklist: ChecklistStore = Depends(get_checklist),
) -> dict[str, ChecklistItemModel]:
    """Return every checklist item keyed by path."""
    return {
        path: ChecklistItemModel(**asdict(item))
        for path, item in checklist.all().items()
    }


@router.patch("/checklist", response_model=PatchChecklistResponse)
async def patch_checklist(
    body: PatchChecklistRequest,
    checklist: ChecklistStore = Depends(get_checklist),
) -> PatchChecklistResponse:
    """Create or update the checklist item for a path."""
    item = checklist.patch(body.path, status=body.status, note=body.note)
    return PatchChecklistResponse(
        ok=True,
        path=body.path,
        item=ChecklistItemModel(**asdict(item)),
    )
