"""Presentational narrowing of classification results.

These filters run after :func:`mod_crater.classifier.classify` and never feed
back into it. Version thresholds compare ``platform_version`` as a plain string
by default, so ``"10.0" < "2.0"``. Pass ``key=numeric_version_key`` to compare
dotted numbers instead.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from mod_crater.models import BrokenMod, ClassificationResult, ModRecord

VersionKey = Callable[[str], Any]


def lexicographic_key(version: str) -> str:
    return version


def numeric_version_key(version: str) -> tuple[int, ...]:
    """Sort key for dotted numeric versions: ``"1.1" < "2.0" < "10.0"``.

    Components that are not plain integers count as 0.
    """
    parts: list[int] = []
    for part in version.strip().split("."):
        try:
            parts.append(int(part))
        except ValueError:
            parts.append(0)
    while len(parts) > 1 and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def broken_before(
    result: ClassificationResult,
    records: Mapping[str, ModRecord],
    threshold: str,
    *,
    key: VersionKey = lexicographic_key,
) -> list[BrokenMod]:
    """Broken mods whose release targets a platform version below *threshold*."""
    limit = key(threshold)
    narrowed: list[BrokenMod] = []
    for b in result.broken:
        record = records.get(b.name)
        if record is None:
            continue
        if key(record.platform_version) < limit:
            narrowed.append(b)
    return narrowed
