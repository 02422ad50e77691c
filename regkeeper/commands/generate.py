"""Generate command implementation for regkeeper.

Reads the plugin catalog, resolves every entry's epoch compatibility
against GitHub and npm, and writes the registry report.

The command wires three pieces together:

1. **Catalog loader**: reads and validates the ``index.json`` object.
2. **Transports**: :class:`GitHubClient` and :class:`NpmRegistryClient`
   sharing one :class:`HTTPClient`, whose retry policy follows
   ``retry_attempts``.
3. **BatchOrchestrator**: resolves entries in paced, bounded batches.

Typical usage::

    # Build generated-registry.json from index.json
    $ GITHUB_TOKEN=... regkeeper generate

    # Custom locations, smaller batches, JSON to stdout
    $ regkeeper generate catalog.json -o out.json --batch-size 5 --format json
"""

from __future__ import annotations

import sys
import click
import asyncio
import dataclasses
from pathlib import Path
from typing import Any, Dict, List, Optional

from regkeeper.config import RegKeeperConfig, require_github_token
from regkeeper.constants import DEFAULT_CATALOG_FILE, DEFAULT_OUTPUT_FILE
from regkeeper.context import RegKeeperContext, pass_context
from regkeeper.core import (
    BatchOrchestrator,
    GitHubClient,
    NpmRegistryClient,
    load_catalog,
    write_report,
)
from regkeeper.exceptions import RegKeeperError
from regkeeper.models import RegistryReport, epoch_label
from regkeeper.utils import (
    HTTPClient,
    format_support_flag,
    get_logger,
    get_raw_console,
    print_error,
    print_issue_summary,
    print_success,
    print_table,
    print_warning,
)

logger = get_logger("commands.generate")


@click.command()
@click.argument(
    "catalog",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CATALOG_FILE,
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_OUTPUT_FILE,
    show_default=True,
    help="Where to write the registry report.",
)
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=None,
    help="Entries resolved concurrently (overrides config and BATCH_SIZE).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json", "none"], case_sensitive=False),
    default="table",
    help="Summary printed after the report is written.",
)
@pass_context
def generate(
    ctx: RegKeeperContext,
    catalog: Path,
    output: Path,
    batch_size: Optional[int],
    format: str,
) -> None:
    """Generate the compatibility registry for a plugin catalog.

    Requires ``GITHUB_TOKEN`` in the environment. Per-entry problems are
    collected as issue notes and never abort the run; the report is always
    written once the catalog could be read.

    Exits:
        0 when the report was written, 1 on configuration, catalog or
        write errors.
    """
    config = ctx.config
    if batch_size is not None:
        config = dataclasses.replace(config, batch_size=batch_size)

    try:
        token = require_github_token()
        entries = load_catalog(catalog)
        report = asyncio.run(_generate_async(config, token, entries))
        written = write_report(report, output)
    except RegKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    fmt = format.lower()
    if fmt == "table":
        _display_table(report, config.epochs)
    elif fmt == "json":
        click.echo(report.to_json())

    if fmt != "none":
        print_issue_summary(report.issues)
        print_success(f"Registry with {len(report.registry)} entries written to {written}")
        if report.issue_count:
            print_warning(
                f"{report.issue_count} issue(s) across {len(report.issues)} repositories"
            )


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _generate_async(
    config: RegKeeperConfig,
    token: str,
    catalog: Dict[str, Any],
) -> RegistryReport:
    """Resolve ``catalog`` with production transports."""
    logger.info("Generating registry for %d catalog entries", len(catalog))

    async with HTTPClient(max_retries=config.retry_attempts - 1) as http:
        orchestrator = BatchOrchestrator(
            GitHubClient(http, token=token),
            NpmRegistryClient(http),
            config,
        )
        return await orchestrator.run(catalog)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def _display_table(report: RegistryReport, epochs: List[int]) -> None:
    """Render the support matrix as a Rich table."""
    labels = [epoch_label(epoch) for epoch in epochs]
    data = [
        {
            "Package": package_id,
            "Repository": entry.tag_info.repo,
            **{
                label: format_support_flag(entry.verdict.is_supported(epoch))
                for label, epoch in zip(labels, epochs)
            },
            "Kind": "app" if entry.is_app else "plugin",
        }
        for package_id, entry in report.registry.items()
    ]

    if not data:
        get_raw_console().print("No catalog entries to display", style="dim")
        return

    column_styles: Dict[str, Dict[str, Any]] = {
        "Package": {"style": "bold cyan", "no_wrap": True},
        "Repository": {"style": "dim"},
        "Kind": {"justify": "center"},
        **{label: {"justify": "center"} for label in labels},
    }

    print_table(
        data,
        headers=["Package", "Repository", *labels, "Kind"],
        title="Epoch Compatibility",
        column_styles=column_styles,
    )
