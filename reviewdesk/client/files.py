"""Versioned artifact read/write client."""
from __future__ import annotations
from reviewdesk.client.base import BaseClient
from reviewdesk.models import VersionedContent, WriteAck


class FileClient(BaseClient):
    async def read(self, path: str) -> VersionedContent:
        resp = await self._get("/api/file", path=path)
        return VersionedContent(content=resp["content"], version_token=resp["etag"])

    async def write(self, path: str, content: str, version_token: str) -> WriteAck:
        """POST /api/file -- the authority compares ``version_token`` with the stored copy."""
        resp = await self._post(
            "/api/file",
            body={"path": path, "content": content, "etag": version_token},
        )
        if resp.get("status") == "ok":
            return WriteAck(accepted=True, new_version_token=resp.get("new_etag"))
        return WriteAck(accepted=False, message=resp.get("message", ""))
