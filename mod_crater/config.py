"""Runtime settings read from ``MOD_CRATER_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

# Components shipped with the game itself; always treated as working.
DEFAULT_BASELINE: tuple[str, ...] = ("base", "elevated-rails", "quality", "space-age")
DEFAULT_PORTAL_URL = "https://mods.factorio.com"
DEFAULT_VERSION_THRESHOLD = "2.0"


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(key)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class CraterSettings:
    data_dir: Path = Path(".")
    out_dir: Path = Path(".")
    portal_url: str = DEFAULT_PORTAL_URL
    concurrency: int = 64
    baseline: tuple[str, ...] = field(default=DEFAULT_BASELINE)
    version_threshold: str | None = DEFAULT_VERSION_THRESHOLD  # None disables narrowing

    @classmethod
    def from_env(cls) -> CraterSettings:
        threshold = os.environ.get("MOD_CRATER_VERSION_THRESHOLD", DEFAULT_VERSION_THRESHOLD)
        return cls(
            data_dir=Path(os.environ.get("MOD_CRATER_DATA_DIR", ".")),
            out_dir=Path(os.environ.get("MOD_CRATER_OUT_DIR", ".")),
            portal_url=os.environ.get("MOD_CRATER_PORTAL_URL", DEFAULT_PORTAL_URL),
            concurrency=_env_int("MOD_CRATER_CONCURRENCY", 64),
            baseline=_env_list("MOD_CRATER_BASELINE", DEFAULT_BASELINE),
            version_threshold=threshold.strip() or None,
        )
