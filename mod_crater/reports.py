"""Plain-text report writers for a classification run."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TextIO

import structlog

from mod_crater.filters import VersionKey, broken_before, lexicographic_key
from mod_crater.models import BrokenMod, ClassificationResult, ModRecord, Status

log = structlog.get_logger("mod_crater.reports")


def write_dependency_dump(out: TextIO, records: Mapping[str, ModRecord]) -> None:
    """Every record with its parsed dependencies (``deps.txt``)."""
    for name in sorted(records):
        m = records[name]
        out.write(f"name: {name}\n")
        out.write(f"  deprecated: {str(m.deprecated).lower()}\n")
        out.write(f"  mod version: {m.mod_version}\n")
        out.write(f"  factorio version: {m.platform_version}\n")
        out.write("  deps:\n")
        for dep in m.dependencies:
            constraint = f": {dep.version_constraint}" if dep.version_constraint else ""
            out.write(f"    {dep.target_name}{constraint} ({dep.relation.value})\n")


def write_name_list(out: TextIO, names: Iterable[str]) -> None:
    for name in names:
        out.write(f"{name}\n")


def _platform_version(records: Mapping[str, ModRecord], name: str) -> str:
    record = records.get(name)
    return record.platform_version if record else "?"


def write_broken(
    out: TextIO, broken: Iterable[BrokenMod], records: Mapping[str, ModRecord]
) -> None:
    for b in broken:
        out.write(f"{b.name} for {_platform_version(records, b.name)}\n")


def write_broken_with_reason(
    out: TextIO, broken: Iterable[BrokenMod], records: Mapping[str, ModRecord]
) -> None:
    for b in broken:
        out.write(f"{b.name} for {_platform_version(records, b.name)} because of:\n")
        for cause in b.causes:
            out.write(f"  {cause}\n")


def write_typos(out: TextIO, result: ClassificationResult) -> None:
    for t in result.typo:
        out.write(f"{t.name} requires missing {t.offending_name}\n")


def write_residual(
    out: TextIO, result: ClassificationResult, records: Mapping[str, ModRecord]
) -> None:
    """Stuck mods, each dependency annotated with the bucket of its target."""
    for name in result.pending:
        out.write(f"{name}\n")
        record = records.get(name)
        if record is None:
            continue
        for dep in record.dependencies:
            status = result.status(dep.target_name)
            label = status.value if status is not None else "missing"
            out.write(f"- {dep.target_name} ({dep.relation.value}): {label}\n")


def write_reports(
    out_dir: Path | str,
    result: ClassificationResult,
    records: Mapping[str, ModRecord],
    *,
    threshold: str | None = None,
    key: VersionKey = lexicographic_key,
) -> list[Path]:
    """Write every report file into *out_dir*; returns the written paths.

    The broken reports list only releases below *threshold* when one is given.
    """
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    broken = (
        broken_before(result, records, threshold, key=key)
        if threshold is not None
        else list(result.broken)
    )

    written: list[Path] = []

    def _open(filename: str) -> TextIO:
        path = out / filename
        written.append(path)
        return path.open("w", encoding="utf-8")

    with _open("deps.txt") as f:
        write_dependency_dump(f, records)
    with _open("working.txt") as f:
        write_name_list(f, result.working)
    with _open("deprecated.txt") as f:
        write_name_list(f, result.deprecated)
    with _open("broken.txt") as f:
        write_broken(f, broken, records)
    with _open("broken_with_reason.txt") as f:
        write_broken_with_reason(f, broken, records)
    with _open("typo.txt") as f:
        write_typos(f, result)
    with _open("stuck.txt") as f:
        write_residual(f, result, records)

    log.info(
        "reports.written",
        out_dir=str(out),
        files=len(written),
        broken_reported=len(broken),
        broken_total=len(result.broken),
        stuck=result.counts()[Status.PENDING.value],
    )
    return written
