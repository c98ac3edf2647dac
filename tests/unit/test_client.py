"""Tests for the async HTTP clients of the review workstation."""

from __future__ import annotations

import json

import httpx
import pytest

from reviewdesk.client import RemoteAuthority
from reviewdesk.client.base import BaseClient
from reviewdesk.client.checklist import ChecklistClient
from reviewdesk.client.files import FileClient
from reviewdesk.client.health import HealthClient
from reviewdesk.client.search import SearchClient
from reviewdesk.errors import TransportFailure
from reviewdesk.models import MatchHit, ReviewStatus


# ── Helpers ───────────────────────────────────────────────────────────────


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def _client(cls, recorder: Recorder, **kwargs):
    return cls("http://test", retry_delay=0, transport=recorder.transport, **kwargs)


# ── BaseClient ────────────────────────────────────────────────────────────


class TestBaseClient:
    @pytest.mark.asyncio
    async def test_get_retries_on_5xx(self):
        rec = Recorder(httpx.Response(503), httpx.Response(200, json={"status": "ok"}))
        client = _client(BaseClient, rec)
        assert await client._get("/api/health") == {"status": "ok"}
        assert len(rec.requests) == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_get_passes_path_as_query_param(self):
        rec = Recorder(httpx.Response(200, json={"content": "x", "etag": "e"}))
        client = _client(BaseClient, rec)
        await client._get("/api/file", path="src/a.py")
        assert rec.requests[0].url.path == "/api/file"
        assert rec.requests[0].url.params["path"] == "src/a.py"
        await client.close()

    @pytest.mark.asyncio
    async def test_post_is_not_retried(self):
        rec = Recorder(httpx.Response(500, json={"detail": "disk full"}))
        client = _client(BaseClient, rec)
        with pytest.raises(TransportFailure) as exc_info:
            await client._post("/api/file", body={})
        assert len(rec.requests) == 1
        assert exc_info.value.status_code == 500
        assert "disk full" in str(exc_info.value)
        await client.close()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        rec = Recorder(httpx.Response(502, text="bad gateway"))
        client = _client(BaseClient, rec, max_retries=2)
        with pytest.raises(TransportFailure):
            await client._get("/api/checklist")
        assert len(rec.requests) == 3
        await client.close()

    @pytest.mark.asyncio
    async def test_4xx_becomes_transport_failure(self):
        rec = Recorder(httpx.Response(404, json={"detail": "File not found: x"}))
        client = _client(BaseClient, rec)
        with pytest.raises(TransportFailure) as exc_info:
            await client._get("/api/file", path="x")
        assert exc_info.value.status_code == 404
        assert len(rec.requests) == 1
        await client.close()

    @pytest.mark.asyncio
    async def test_connect_error_becomes_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = BaseClient("http://test", max_retries=1, retry_delay=0, transport=httpx.MockTransport(refuse))
        with pytest.raises(TransportFailure, match="Cannot reach"):
            await client._get("/api/health")
        await client.close()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        rec = Recorder(httpx.Response(200, text="<html>"))
        client = _client(BaseClient, rec)
        with pytest.raises(TransportFailure, match="invalid JSON"):
            await client._get("/api/health")
        await client.close()

    @pytest.mark.asyncio
    async def test_empty_body(self):
        rec = Recorder(httpx.Response(204))
        client = _client(BaseClient, rec)
        assert await client._patch("/api/checklist", body={}) == {}
        await client.close()


# ── Resource clients ──────────────────────────────────────────────────────


class TestSearchClient:
    @pytest.mark.asyncio
    async def test_search(self):
        rec = Recorder(httpx.Response(200, json=[
            {"file": "a.py", "line": 3, "column": 2, "preview": "foo"},
            {"file": "a.py", "line": 7, "column": 1, "preview": "foo()"},
        ]))
        client = _client(SearchClient, rec)
        hits = await client.search("foo", is_regex=True, glob="*.py")
        assert hits == [
            MatchHit(artifact_id="a.py", line=3, column=2, preview="foo"),
            MatchHit(artifact_id="a.py", line=7, column=1, preview="foo()"),
        ]
        params = rec.requests[0].url.params
        assert params["q"] == "foo"
        assert params["regex"] == "true"
        assert params["glob"] == "*.py"
        await client.close()

    @pytest.mark.asyncio
    async def test_search_without_glob(self):
        rec = Recorder(httpx.Response(200, json=[]))
        client = _client(SearchClient, rec)
        assert await client.search("x") == []
        assert "glob" not in rec.requests[0].url.params
        assert rec.requests[0].url.params["regex"] == "false"
        await client.close()


class TestFileClient:
    @pytest.mark.asyncio
    async def test_read(self):
        rec = Recorder(httpx.Response(200, json={"content": "hello", "etag": "e1"}))
        client = _client(FileClient, rec)
        loaded = await client.read("a.py")
        assert loaded.content == "hello"
        assert loaded.version_token == "e1"
        assert rec.requests[0].url.params["path"] == "a.py"
        await client.close()

    @pytest.mark.asyncio
    async def test_write_accepted(self):
        rec = Recorder(httpx.Response(200, json={"status": "ok", "new_etag": "e2"}))
        client = _client(FileClient, rec)
        ack = await client.write("a.py", "new", "e1")
        assert ack.accepted
        assert ack.new_version_token == "e2"
        assert json.loads(rec.requests[0].content) == {"path": "a.py", "content": "new", "etag": "e1"}
        await client.close()

    @pytest.mark.asyncio
    async def test_write_conflict(self):
        rec = Recorder(httpx.Response(200, json={
            "status": "conflict", "new_etag": None, "message": "File has changed on disk. Reload required.",
        }))
        client = _client(FileClient, rec)
        ack = await client.write("a.py", "new", "stale")
        assert not ack.accepted
        assert ack.new_version_token is None
        assert "Reload required" in ack.message
        await client.close()


class TestChecklistClient:
    @pytest.mark.asyncio
    async def test_get_all(self):
        rec = Recorder(httpx.Response(200, json={
            "a.py": {"status": "done", "note": "ok", "updated_ts": 10},
            "b.py": {"status": "in_progress", "note": "", "updated_ts": 11},
        }))
        client = _client(ChecklistClient, rec)
        records = await client.get_all()
        assert list(records) == ["a.py", "b.py"]
        assert records["a.py"].status is ReviewStatus.DONE
        assert records["a.py"].note == "ok"
        assert records["a.py"].updated_at == 10
        await client.close()

    @pytest.mark.asyncio
    async def test_patch_sends_only_given_fields(self):
        rec = Recorder(httpx.Response(200, json={
            "ok": True, "path": "a.py", "item": {"status": "todo", "note": "n", "updated_ts": 1},
        }))
        client = _client(ChecklistClient, rec)
        record = await client.patch("a.py", note="n")
        assert json.loads(rec.requests[0].content) == {"path": "a.py", "note": "n"}
        assert rec.requests[0].method == "PATCH"
        assert record.note == "n"
        await client.close()

    @pytest.mark.asyncio
    async def test_patch_status(self):
        rec = Recorder(httpx.Response(200, json={
            "ok": True, "path": "a.py", "item": {"status": "done", "note": "", "updated_ts": 1},
        }))
        client = _client(ChecklistClient, rec)
        record = await client.patch("a.py", status=ReviewStatus.DONE)
        assert json.loads(rec.requests[0].content) == {"path": "a.py", "status": "done"}
        assert record.status is ReviewStatus.DONE
        await client.close()


class TestHealthClient:
    @pytest.mark.asyncio
    async def test_healthy(self):
        client = _client(HealthClient, Recorder(httpx.Response(200, json={"status": "ok"})))
        assert await client.is_healthy()
        await client.close()

    @pytest.mark.asyncio
    async def test_unhealthy(self):
        client = _client(HealthClient, Recorder(httpx.Response(503)), max_retries=0)
        assert not await client.is_healthy()
        await client.close()


class TestRemoteAuthority:
    @pytest.mark.asyncio
    async def test_connect_shares_settings(self):
        authority = RemoteAuthority.connect("http://test", timeout=5, max_retries=1)
        for client in (authority.search, authority.files, authority.checklist, authority.health):
            assert client.base_url == "http://test"
            assert client.timeout == 5
            assert client.max_retries == 1
        await authority.close()
