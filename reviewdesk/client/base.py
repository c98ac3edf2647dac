"""Base async HTTP client with retry logic."""
from __future__ import annotations
import httpx
import asyncio
import logging
from typing import Any

from reviewdesk.errors import TransportFailure

logger = logging.getLogger("reviewdesk.client")

# Only these are retried on 5xx; a write is never replayed after the server saw it.
_IDEMPOTENT = frozenset({"GET", "HEAD"})


class BaseClient:
    """Thin async HTTP wrapper around httpx.

    Every transport-level problem (connection, timeout, HTTP error status)
    surfaces as :class:`TransportFailure`.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, endpoint: str, *, body: dict | None = None, params: dict | None = None) -> Any:
        """Make an HTTP request with retry logic for 5xx and connection errors."""
        last_exc: Exception | None = None
        for attempt in range(self.max_retries + 1):
            try:
                client = await self._ensure_client()
                resp = await client.request(method, endpoint, json=body, params=params)
                if resp.status_code >= 500 and method in _IDEMPOTENT and attempt < self.max_retries:
                    logger.warning("Server error %d on %s %s (attempt %d)", resp.status_code, method, endpoint, attempt + 1)
                    await asyncio.sleep(self.retry_delay * (attempt + 1))
                    continue
                resp.raise_for_status()
                if resp.status_code == 204 or not resp.content:
                    return {}
                return resp.json()
            except httpx.ConnectError as exc:
                last_exc = exc
                if attempt < self.max_retries:
                    delay = min(self.retry_delay * (2 ** attempt), 30.0)
                    logger.warning("Connection error on %s %s (attempt %d), retrying in %.1fs", method, endpoint, attempt + 1, delay)
                    await asyncio.sleep(delay)
                    continue
                raise TransportFailure(f"Cannot reach {self.base_url}: {exc}") from exc
            except httpx.HTTPStatusError as exc:
                detail = _error_detail(exc.response)
                raise TransportFailure(
                    f"{method} {endpoint} failed ({exc.response.status_code}): {detail}",
                    status_code=exc.response.status_code,
                ) from exc
            except httpx.HTTPError as exc:
                raise TransportFailure(f"{method} {endpoint} failed: {exc}") from exc
            except ValueError as exc:
                raise TransportFailure(f"{method} {endpoint} returned invalid JSON") from exc
        if last_exc:
            raise TransportFailure(f"Cannot reach {self.base_url}: {last_exc}") from last_exc
        raise RuntimeError("Retry loop exited unexpectedly")

    async def _get(self, endpoint: str, **params) -> Any:
        return await self._request("GET", endpoint, params=params if params else None)

    async def _post(self, endpoint: str, body: dict | None = None) -> Any:
        return await self._request("POST", endpoint, body=body)

    async def _patch(self, endpoint: str, body: dict | None = None) -> Any:
        return await self._request("PATCH", endpoint, body=body)

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


def _error_detail(response: httpx.Response) -> str:
    try:
        return str(response.json().get("detail", response.text))
    except (ValueError, AttributeError):
        return response.text
