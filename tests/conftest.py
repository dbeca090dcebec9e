"""Shared pytest fixtures for mod-crater tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mod_crater.core.logging import setup_logging


@pytest.fixture(scope="session", autouse=True)
def _configure_logging():
    setup_logging("DEBUG")


def _portal_mod_full(
    name: str,
    dependencies,
    *,
    version: str = "1.0.0",
    factorio_version: str = "1.1",
    deprecated: bool | None = None,
) -> dict:
    """A minimal /api/mods/<name>/full payload with a single release."""
    payload: dict = {
        "name": name,
        "title": name.title(),
        "owner": "someone",
        "summary": "",
        "category": "content",
        "downloads_count": 10,
        "releases": [
            {
                "version": version,
                "download_url": f"/download/{name}/abc",
                "file_name": f"{name}_{version}.zip",
                "released_at": "2024-01-01T00:00:00Z",
                "sha1": "0" * 40,
                "info_json": {
                    "factorio_version": factorio_version,
                    "dependencies": dependencies,
                },
            }
        ],
    }
    if deprecated is not None:
        payload["deprecated"] = deprecated
    return payload


def _write_catalog(data_dir: Path, mods: dict[str, dict]) -> None:
    """Lay out mods.json + mods/<name>.json the way ``update`` does."""
    (data_dir / "mods").mkdir(parents=True, exist_ok=True)
    results = []
    for name, full in mods.items():
        releases = full.get("releases", [])
        latest = None
        if releases:
            rel = releases[-1]
            latest = {
                "version": rel["version"],
                "info_json": {"factorio_version": rel["info_json"]["factorio_version"]},
            }
        results.append({"name": name, "latest_release": latest})
        (data_dir / "mods" / f"{name}.json").write_text(json.dumps(full))
    (data_dir / "mods.json").write_text(json.dumps({"results": results}))


@pytest.fixture
def mod_full_payload():
    return _portal_mod_full


@pytest.fixture
def write_catalog():
    return _write_catalog


@pytest.fixture
def catalog_dir(tmp_path: Path) -> Path:
    """A small downloaded catalog: one working, one deprecated, one broken, one typo."""
    _write_catalog(
        tmp_path,
        {
            "helper": _portal_mod_full("helper", "base >= 1.1"),
            "old-lib": _portal_mod_full("old-lib", ["base"], deprecated=True),
            "uses-old": _portal_mod_full(
                "uses-old", ["base", "old-lib >= 0.2", "? helper"], factorio_version="1.1"
            ),
            "typod": _portal_mod_full("typod", ["base", "helpr"]),
        },
    )
    return tmp_path
