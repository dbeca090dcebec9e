"""Async mod portal client and bulk catalog download."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import structlog

from mod_crater import __version__
from mod_crater.catalog.loader import CatalogPaths, load_mod_list
from mod_crater.exceptions import PortalError
from mod_crater.progress import ProgressTracker

log = structlog.get_logger("mod_crater.portal")

DEFAULT_PORTAL_URL = "https://mods.factorio.com"
USER_AGENT = f"mod-crater/{__version__}"

_MAX_RETRIES = 3
_RETRY_BASE_DELAY = 1.0  # seconds


class PortalClient:
    """Thin async wrapper around the mod portal REST API."""

    def __init__(
        self,
        base_url: str = DEFAULT_PORTAL_URL,
        *,
        user_agent: str = USER_AGENT,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": user_agent},
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> PortalClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch_mod_list(self) -> bytes:
        """Raw JSON of every mod with its latest release."""
        resp = await self._request_with_retry("/api/mods", {"page_size": "max"})
        return resp.content

    async def fetch_mod_full(self, name: str) -> bytes:
        """Raw JSON of one mod with all of its releases."""
        resp = await self._request_with_retry(f"/api/mods/{name}/full")
        return resp.content

    # ── internal ───────────────────────────────────────────────────────────

    async def _request_with_retry(
        self,
        url: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """GET with exponential backoff on 5xx and timeouts; 4xx raises at once."""
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES):
            try:
                resp = await self._client.get(url, params=params)
                if resp.status_code < 500:
                    resp.raise_for_status()
                    return resp

                log.warning(
                    "portal.server_error",
                    url=url,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = httpx.HTTPStatusError(
                    f"{resp.status_code}", request=resp.request, response=resp
                )
            except httpx.TimeoutException as exc:
                log.warning(
                    "portal.timeout",
                    url=url,
                    attempt=attempt + 1,
                    max_retries=_MAX_RETRIES,
                )
                last_exc = exc

            if attempt < _MAX_RETRIES - 1:
                await asyncio.sleep(_RETRY_BASE_DELAY * (2**attempt))

        raise PortalError(f"GET {url} failed after {_MAX_RETRIES} attempts") from last_exc


@dataclass
class DownloadSummary:
    """Outcome of one :func:`download_catalog` run."""

    listed: int = 0
    downloaded: int = 0
    failed: dict[str, str] = field(default_factory=dict)


async def download_catalog(
    client: PortalClient,
    data_dir: Path | str,
    *,
    names: Iterable[str] | None = None,
    concurrency: int = 64,
    progress: ProgressTracker | None = None,
) -> DownloadSummary:
    """Refresh ``mods.json`` and every ``mods/<name>.json`` under *data_dir*.

    When *names* is given only those detail files are fetched, and the mod list
    is read from disk instead of downloaded. A failing mod does not abort the
    run; it is listed in :attr:`DownloadSummary.failed`.
    """
    paths = CatalogPaths(Path(data_dir))
    paths.details_dir.mkdir(parents=True, exist_ok=True)

    if names is None:
        paths.mod_list.write_bytes(await client.fetch_mod_list())
        log.info("portal.mod_list_downloaded", path=str(paths.mod_list))
        wanted = sorted(load_mod_list(paths.mod_list))
    else:
        wanted = sorted(set(names))

    tracker = progress if progress is not None else ProgressTracker()
    tracker.start(len(wanted))
    summary = DownloadSummary(listed=len(wanted))
    semaphore = asyncio.Semaphore(max(concurrency, 1))

    async def _one(name: str) -> None:
        async with semaphore:
            try:
                content = await client.fetch_mod_full(name)
            except (PortalError, httpx.HTTPError) as exc:
                log.warning("portal.mod_failed", mod=name, error=str(exc))
                tracker.record(name, error=str(exc))
                return
        try:
            await asyncio.to_thread(paths.mod_full(name).write_bytes, content)
        except OSError as exc:
            log.warning("portal.mod_failed", mod=name, error=str(exc))
            tracker.record(name, error=str(exc))
            return
        log.debug("portal.mod_downloaded", mod=name)
        tracker.record(name)

    await asyncio.gather(*(_one(name) for name in wanted))
    tracker.finish()

    summary.failed = dict(tracker.failed)
    summary.downloaded = summary.listed - len(summary.failed)
    log.info(
        "portal.download_done",
        listed=summary.listed,
        downloaded=summary.downloaded,
        failed=len(summary.failed),
        duration=tracker.duration,
    )
    return summary
