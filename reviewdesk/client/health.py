"""Health check client."""
from __future__ import annotations
from reviewdesk.client.base import BaseClient
from reviewdesk.errors import TransportFailure

class HealthClient(BaseClient):
    async def check(self) -> dict:
        """GET /api/health -- liveness of the CodeEdit service."""
        return await self._get("/api/health")

    async def is_healthy(self) -> bool:
        """Returns True if the API is reachable and healthy."""
        try:
            resp = await self.check()
        except TransportFailure:
            return False
        return resp.get("status") == "ok"
