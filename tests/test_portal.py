"""Tests for the mod portal client and bulk download (httpx mocked)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from mod_crater.catalog.loader import load_catalog
from mod_crater.catalog.portal import USER_AGENT, PortalClient, download_catalog
from mod_crater.exceptions import PortalError
from mod_crater.progress import DownloadEvent, ProgressTracker

# ── helpers ──────────────────────────────────────────────────────────────


def _mod_list(*names: str) -> dict:
    return {
        "results": [
            {"name": n, "latest_release": {"version": "1.0.0", "info_json": {"factorio_version": "1.1"}}}
            for n in names
        ]
    }


def _mod_full(name: str, deps) -> dict:
    return {
        "name": name,
        "releases": [
            {"version": "1.0.0", "info_json": {"factorio_version": "1.1", "dependencies": deps}}
        ],
    }


def _portal(mods: dict[str, dict], *, fail: set[str] | None = None, seen: list | None = None):
    """A MockTransport serving /api/mods and /api/mods/<name>/full."""
    fail = fail or set()

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        path = request.url.path
        if path == "/api/mods":
            return httpx.Response(200, json=_mod_list(*mods))
        name = path.removeprefix("/api/mods/").removesuffix("/full")
        if name in fail:
            return httpx.Response(404, json={"message": "Mod not found"})
        return httpx.Response(200, json=mods[name])

    return httpx.MockTransport(handler)


# ── PortalClient ─────────────────────────────────────────────────────────


class TestPortalClient:
    @pytest.mark.asyncio
    async def test_fetch_mod_list_sends_page_size_and_user_agent(self):
        seen: list[httpx.Request] = []
        transport = _portal({"a": _mod_full("a", [])}, seen=seen)
        async with PortalClient(transport=transport) as client:
            body = await client.fetch_mod_list()
        assert json.loads(body)["results"][0]["name"] == "a"
        assert seen[0].url.params["page_size"] == "max"
        assert seen[0].headers["User-Agent"] == USER_AGENT

    @pytest.mark.asyncio
    async def test_fetch_mod_full(self):
        transport = _portal({"a": _mod_full("a", ["base"])})
        async with PortalClient(transport=transport) as client:
            body = await client.fetch_mod_full("a")
        assert json.loads(body)["name"] == "a"

    @pytest.mark.asyncio
    async def test_4xx_raises_immediately(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404)

        async with PortalClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.fetch_mod_full("nope")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_retry_on_server_error(self):
        responses = [httpx.Response(502), httpx.Response(200, json={"name": "a"})]

        def handler(request):
            return responses.pop(0)

        with patch("mod_crater.catalog.portal.asyncio.sleep", new_callable=AsyncMock) as sleep:
            async with PortalClient(transport=httpx.MockTransport(handler)) as client:
                body = await client.fetch_mod_full("a")
        assert json.loads(body) == {"name": "a"}
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_retry_on_timeout(self):
        state = {"n": 0}

        def handler(request):
            state["n"] += 1
            if state["n"] == 1:
                raise httpx.ReadTimeout("timeout", request=request)
            return httpx.Response(200, json={"name": "a"})

        with patch("mod_crater.catalog.portal.asyncio.sleep", new_callable=AsyncMock):
            async with PortalClient(transport=httpx.MockTransport(handler)) as client:
                await client.fetch_mod_full("a")
        assert state["n"] == 2

    @pytest.mark.asyncio
    async def test_retry_exhausted(self):
        with patch("mod_crater.catalog.portal.asyncio.sleep", new_callable=AsyncMock) as sleep:
            transport = httpx.MockTransport(lambda r: httpx.Response(503))
            async with PortalClient(transport=transport) as client:
                with pytest.raises(PortalError) as exc_info:
                    await client.fetch_mod_list()
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert sleep.await_count == 2


# ── download_catalog ─────────────────────────────────────────────────────


class TestDownloadCatalog:
    @pytest.mark.asyncio
    async def test_writes_loadable_catalog(self, tmp_path: Path):
        mods = {"a": _mod_full("a", ["base"]), "b": _mod_full("b", "a >= 1.0")}
        async with PortalClient(transport=_portal(mods)) as client:
            summary = await download_catalog(client, tmp_path, concurrency=2)

        assert summary.listed == 2
        assert summary.downloaded == 2
        assert summary.failed == {}
        records = load_catalog(tmp_path)
        assert records["b"].dependencies[0].target_name == "a"

    @pytest.mark.asyncio
    async def test_failures_collected_not_fatal(self, tmp_path: Path):
        mods = {"a": _mod_full("a", []), "gone": _mod_full("gone", [])}
        async with PortalClient(transport=_portal(mods, fail={"gone"})) as client:
            summary = await download_catalog(client, tmp_path)

        assert summary.downloaded == 1
        assert set(summary.failed) == {"gone"}
        assert (tmp_path / "mods" / "a.json").exists()
        assert not (tmp_path / "mods" / "gone.json").exists()

    @pytest.mark.asyncio
    async def test_write_error_collected_not_fatal(self, tmp_path: Path):
        (tmp_path / "mods" / "a.json").mkdir(parents=True)
        events: list[DownloadEvent] = []
        tracker = ProgressTracker()
        tracker.callbacks.append(events.append)
        mods = {"a": _mod_full("a", []), "b": _mod_full("b", [])}
        async with PortalClient(transport=_portal(mods)) as client:
            summary = await download_catalog(
                client, tmp_path, names=["a", "b"], progress=tracker
            )

        assert set(summary.failed) == {"a"}
        assert summary.downloaded == 1
        assert (tmp_path / "mods" / "b.json").is_file()
        assert [e.name for e in events if not e.ok] == ["a"]

    @pytest.mark.asyncio
    async def test_progress_events(self, tmp_path: Path):
        events: list[DownloadEvent] = []
        tracker = ProgressTracker()
        tracker.callbacks.append(events.append)
        mods = {n: _mod_full(n, []) for n in ("a", "b", "c")}
        async with PortalClient(transport=_portal(mods, fail={"b"})) as client:
            await download_catalog(client, tmp_path, progress=tracker)

        assert sorted(e.name for e in events) == ["a", "b", "c"]
        assert sorted(e.completed for e in events) == [1, 2, 3]
        assert all(e.total == 3 for e in events)
        assert [e.name for e in events if not e.ok] == ["b"]
        assert tracker.get_summary()["completed"] == 3

    @pytest.mark.asyncio
    async def test_names_skip_mod_list(self, tmp_path: Path):
        seen: list[httpx.Request] = []
        mods = {"a": _mod_full("a", []), "b": _mod_full("b", [])}
        async with PortalClient(transport=_portal(mods, seen=seen)) as client:
            summary = await download_catalog(client, tmp_path, names=["b"])

        assert summary.listed == 1
        assert [r.url.path for r in seen] == ["/api/mods/b/full"]
        assert not (tmp_path / "mods.json").exists()
