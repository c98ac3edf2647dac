"""Bundle of the clients the review core talks to."""
from __future__ import annotations

from dataclasses import dataclass

import httpx

from reviewdesk.client.checklist import ChecklistClient
from reviewdesk.client.files import FileClient
from reviewdesk.client.health import HealthClient
from reviewdesk.client.search import SearchClient


@dataclass
class RemoteAuthority:
    """One client per resource, all pointed at the same CodeEdit service."""

    search: SearchClient
    files: FileClient
    checklist: ChecklistClient
    health: HealthClient

    @classmethod
    def connect(
        cls,
        base_url: str,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> RemoteAuthority:
        kwargs = dict(timeout=timeout, max_retries=max_retries, retry_delay=retry_delay, transport=transport)
        return cls(
            search=SearchClient(base_url, **kwargs),
            files=FileClient(base_url, **kwargs),
            checklist=ChecklistClient(base_url, **kwargs),
            health=HealthClient(base_url, **kwargs),
        )

    async def close(self) -> None:
        for client in (self.search, self.files, self.checklist, self.health):
            await client.close()
