"""Review checklist client."""
from __future__ import annotations
from reviewdesk.client.base import BaseClient
from reviewdesk.models import ReviewStatus, StatusRecord


class ChecklistClient(BaseClient):
    async def get_all(self) -> dict[str, StatusRecord]:
        resp = await self._get("/api/checklist")
        return {path: StatusRecord.from_wire(path, item) for path, item in resp.items()}

    async def patch(self, path: str, status: ReviewStatus | None = None, note: str | None = None) -> StatusRecord:
        body: dict = {"path": path}
        if status is not None:
            body["status"] = ReviewStatus(status).value
        if note is not None:
            body["note"] = note
        resp = await self._patch("/api/checklist", body=body)
        return StatusRecord.from_wire(path, resp.get("item", {}))
