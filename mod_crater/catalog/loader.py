"""Load downloaded portal files into ``ModRecord``s.

On-disk layout (as written by :func:`mod_crater.catalog.portal.download_catalog`)::

    <data_dir>/mods.json          # /api/mods?page_size=max
    <data_dir>/mods/<name>.json   # /api/mods/<name>/full
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog
from pydantic import ValidationError

from mod_crater.catalog.schemas import ModFull, ModListResponse
from mod_crater.exceptions import CatalogError
from mod_crater.models import ModRecord

log = structlog.get_logger("mod_crater.catalog")


@dataclass(frozen=True)
class CatalogPaths:
    data_dir: Path

    @property
    def mod_list(self) -> Path:
        return self.data_dir / "mods.json"

    @property
    def details_dir(self) -> Path:
        return self.data_dir / "mods"

    def mod_full(self, name: str) -> Path:
        return self.details_dir / f"{name}.json"


def _read(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise CatalogError(f"catalog file not found: {path}") from exc


def load_mod_list(path: Path) -> dict[str, str | None]:
    """Return ``name -> latest release version`` (``None`` if never released)."""
    try:
        listing = ModListResponse.model_validate_json(_read(path))
    except ValidationError as exc:
        raise CatalogError(f"invalid mod list {path}: {exc}") from exc
    return {
        m.name: m.latest_release.version if m.latest_release else None
        for m in listing.results
    }


def load_mod_full(path: Path) -> ModFull:
    try:
        return ModFull.model_validate_json(_read(path))
    except ValidationError as exc:
        raise CatalogError(f"invalid mod detail {path}: {exc}") from exc


def build_record(mod_full: ModFull, latest_version: str | None) -> ModRecord | None:
    """Pick the latest release out of *mod_full* and flatten it.

    Returns ``None`` when the mod has no release matching *latest_version*.
    """
    if (latest_version is not None) == (not mod_full.releases):
        log.warning(
            "catalog.release_mismatch",
            mod=mod_full.name,
            latest_version=latest_version,
            releases=len(mod_full.releases),
        )
    if latest_version is None:
        return None
    release = next((r for r in mod_full.releases if r.version == latest_version), None)
    if release is None:
        return None
    return ModRecord(
        name=mod_full.name,
        deprecated=mod_full.deprecated,
        platform_version=release.info_json.factorio_version,
        dependencies=tuple(release.info_json.dependencies),
        mod_version=release.version,
    )


def load_catalog(data_dir: Path | str) -> dict[str, ModRecord]:
    """Load every mod of the downloaded catalog that has a published release."""
    paths = CatalogPaths(Path(data_dir))
    versions = load_mod_list(paths.mod_list)
    log.info("catalog.listed", mods=len(versions))

    records: dict[str, ModRecord] = {}
    for name in sorted(versions):
        mod_full = load_mod_full(paths.mod_full(name))
        record = build_record(mod_full, versions[name])
        if record is not None:
            records[name] = record

    log.info("catalog.loaded", records=len(records), skipped=len(versions) - len(records))
    return records
