"""CLI entry point: mod-crater.

Subcommands:
    mod-crater update                  # Download mods.json and every mods/<name>.json
    mod-crater classify                # Classify the downloaded catalog, write reports
    mod-crater classify --json         # Print the classification as JSON
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click

from mod_crater.config import CraterSettings
from mod_crater.core.logging import setup_logging

# Exit codes
EXIT_INVALID_INPUT = 2
EXIT_STUCK = 3


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """mod-crater: find mods broken by deprecated or missing dependencies."""
    setup_logging("DEBUG" if verbose else None)
    ctx.obj = CraterSettings.from_env()


@main.command("update")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory to store mods.json and mods/")
@click.option("--concurrency", type=click.IntRange(min=1), default=None,
              help="Parallel detail downloads")
@click.pass_obj
def update(settings: CraterSettings, data_dir: Path | None, concurrency: int | None) -> None:
    """Download the mod list and every mod's full metadata."""
    import httpx

    from mod_crater.catalog.portal import PortalClient, download_catalog
    from mod_crater.exceptions import CatalogError, PortalError
    from mod_crater.progress import ProgressTracker

    data_dir = data_dir or settings.data_dir
    tracker = ProgressTracker()
    tracker.callbacks.append(
        lambda e: click.echo(
            f"[{e.completed}/{e.total}] {e.name}{'' if e.ok else ' FAILED'}", err=True
        )
    )

    async def _run():
        async with PortalClient(settings.portal_url) as client:
            return await download_catalog(
                client,
                data_dir,
                concurrency=concurrency or settings.concurrency,
                progress=tracker,
            )

    try:
        summary = asyncio.run(_run())
    except (PortalError, CatalogError, httpx.HTTPError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Listed: {summary.listed}")
    click.echo(f"Downloaded: {summary.downloaded}")
    if summary.failed:
        click.echo(f"Failed: {len(summary.failed)}")
        for name, error in sorted(summary.failed.items()):
            click.echo(f"  {name}: {error}")
        sys.exit(1)


@main.command("classify")
@click.option("--data-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory holding mods.json and mods/")
@click.option("--out-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory to write the report files into")
@click.option("--baseline", "baseline", multiple=True,
              help="Always-working mod name (repeatable; default: built-in components)")
@click.option("--threshold", default=None,
              help="Only report broken releases below this platform version ('' disables)")
@click.option("--numeric-versions", is_flag=True,
              help="Compare versions numerically instead of as strings")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_obj
def classify_cmd(
    settings: CraterSettings,
    data_dir: Path | None,
    out_dir: Path | None,
    baseline: tuple[str, ...],
    threshold: str | None,
    numeric_versions: bool,
    as_json: bool,
) -> None:
    """Classify every mod of the downloaded catalog."""
    from mod_crater.catalog.loader import load_catalog
    from mod_crater.classifier import classify
    from mod_crater.exceptions import CatalogError, InvalidInputError
    from mod_crater.filters import lexicographic_key, numeric_version_key
    from mod_crater.reports import write_reports

    if threshold is None:
        threshold = settings.version_threshold
    elif not threshold.strip():
        threshold = None

    try:
        records = load_catalog(data_dir or settings.data_dir)
        result = classify(records, baseline or settings.baseline)
    except (CatalogError, InvalidInputError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_INVALID_INPUT)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        key = numeric_version_key if numeric_versions else lexicographic_key
        written = write_reports(
            out_dir or settings.out_dir, result, records, threshold=threshold, key=key
        )
        click.echo(f"Mods: {len(records)} (passes: {result.passes})")
        for bucket, count in result.counts().items():
            click.echo(f"  {bucket}: {count}")
        click.echo(f"Reports: {', '.join(p.name for p in written)}")

    if result.stuck:
        click.echo(
            f"Warning: {len(result.pending)} mod(s) left unresolved "
            f"(dependency cycle?): {', '.join(result.pending)}",
            err=True,
        )
        sys.exit(EXIT_STUCK)


if __name__ == "__main__":
    main()
