"""
storepulse entry point.
Builds the console from settings, runs it and prints the report.
"""

import asyncio
import logging

import click

from .collaborators.catalog import EntityKind, UrlRewriteCatalog
from .collaborators.sql import SqlAlchemyConnection
from .config import get_settings
from .diagnostics.checks import Severity
from .diagnostics.probe import ProbeConfig
from .diagnostics.reporter import format_report, render_html
from .diagnostics.runner import ConsoleReport, DiagnosticsConsole
from .logging_config import setup_logging
from .sample_urls import SampleUrlPicker

logger = logging.getLogger(__name__)


async def _run_console(
    console: DiagnosticsConsole,
    include_benchmarks: bool,
    only: set[str] | None,
) -> ConsoleReport:
    try:
        return await console.run_all(include_benchmarks=include_benchmarks, only=only)
    finally:
        await console.aclose()


@click.group()
@click.pass_context
def cli(ctx):
    """storepulse: runtime health and performance diagnostics for a store host."""
    settings = get_settings()
    setup_logging(
        settings.log_level, settings.logs_dir, settings.json_logs, settings.log_levels
    )
    ctx.obj = {"settings": settings}


@cli.command()
@click.option("--html", "as_html", is_flag=True, help="Emit admin console markup instead of text.")
@click.option("--benchmarks", is_flag=True, help="Also run the synthetic load benchmarks.")
@click.option("--section", "sections", multiple=True, help="Only run the named section (repeatable).")
@click.pass_context
def run(ctx, as_html, benchmarks, sections):
    """Run the diagnostics and print the report."""
    settings = ctx.obj["settings"]
    console = DiagnosticsConsole.from_settings(settings)
    logger.info("Running diagnostics against %s", settings.magento_root)

    report = asyncio.run(_run_console(console, benchmarks, set(sections) or None))

    click.echo(render_html(report) if as_html else format_report(report))
    if report.overall == Severity.ERROR:
        ctx.exit(1)


@cli.command()
@click.pass_context
def sections(ctx):
    """List the report sections in run order."""
    # Titles only; no clients are opened
    console = DiagnosticsConsole(ProbeConfig.from_settings(ctx.obj["settings"]))
    for title in console.section_titles:
        click.echo(title)


@cli.command()
@click.option(
    "--kind",
    type=click.Choice(["product", "category", "any"]),
    default="any",
    show_default=True,
)
@click.pass_context
def url(ctx, kind):
    """Print a random storefront URL used by the HTTP probes."""
    settings = ctx.obj["settings"]
    if not settings.database_url:
        raise click.ClickException("DATABASE_URL is not configured")

    async def pick() -> str | None:
        sql = SqlAlchemyConnection(settings.database_url)
        try:
            picker = SampleUrlPicker(
                UrlRewriteCatalog(sql, settings.store_base_url),
                page_size=settings.collection_page_size,
            )
            if kind == "any":
                return await picker.pick_random_frontend_url(settings.store_id)
            return await picker.pick_random_url(EntityKind(kind), settings.store_id)
        finally:
            await sql.close()

    picked = asyncio.run(pick())
    if picked is None:
        label = "storefront" if kind == "any" else kind
        raise click.ClickException(f"No {label} URL found for store {settings.store_id}")
    click.echo(picked)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
