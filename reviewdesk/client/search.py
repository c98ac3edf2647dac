"""Search client."""
from __future__ import annotations
from reviewdesk.client.base import BaseClient
from reviewdesk.models import MatchHit


class SearchClient(BaseClient):
    async def search(self, query: str, is_regex: bool = False, glob: str | None = None) -> list[MatchHit]:
        """GET /api/search -- flat, ordered hit list (several hits per file possible)."""
        params: dict = {"q": query, "regex": "true" if is_regex else "false"}
        if glob:
            params["glob"] = glob
        resp = await self._get("/api/search", **params)
        rows = resp if isinstance(resp, list) else resp.get("results", [])
        return [MatchHit.model_validate(row) for row in rows]
