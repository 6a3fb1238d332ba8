"""CLI interface for bk-accounter."""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from .buildkite import BuildkiteClient
from .config import AccounterSettings, load_settings
from .errors import AccounterError, ConfigError
from .logging_utils import setup_logging, stderr_console
from .members import collect_members
from .output import OutputFormat, render_count, render_json, write_csv
from .report import DedupeKey, build_report, collapse, dedupe_flags
from .sources import JsonFileCache, MemberSource

app = typer.Typer(
    name="bk-accounter",
    help="Find duplicate accounts across Buildkite organizations",
)
console = Console()

logger = logging.getLogger(__name__)


def split_values(values: list[str] | None) -> list[str] | None:
    """Flatten repeated and comma-separated option values."""
    if not values:
        return None
    return [v.strip() for value in values for v in value.split(",") if v.strip()]


def make_client(settings: AccounterSettings) -> BuildkiteClient:
    """Build the API client from settings."""
    return BuildkiteClient(
        token=settings.token,
        endpoint=settings.graphql_endpoint,
        timeout=settings.timeout,
        debug=settings.debug,
    )


def run(settings: AccounterSettings) -> None:
    """Fetch members of every configured org and emit them in the configured format."""
    with make_client(settings) as client:
        source: MemberSource = client
        if settings.cache:
            source = JsonFileCache(client, settings.cache_dir)
        members = collect_members(source, settings.org_slugs)

    output = OutputFormat(settings.output)

    if output is OutputFormat.CSV:
        # CSV rows are the raw normalized members; filter and dedupe do not apply
        if settings.dedupe or settings.email:
            logger.warning("--dedupe and --email are ignored with --output csv")
        rows = write_csv(members, settings.csv_file)
        stderr_console.print(f"[green]Wrote {rows} rows to {settings.csv_file}[/green]")
        return

    report = build_report(members, settings.email)
    report = collapse(report, *dedupe_flags(settings.dedupe))

    if output is OutputFormat.COUNT:
        render_count(report, console)
    else:
        render_json(report, console)


@app.command()
def main(
    api_token: Annotated[
        str | None,
        typer.Option(
            "--api-token",
            help="Buildkite GraphQL API token (or set BUILDKITE_TOKEN)",
        ),
    ] = None,
    org_slugs: Annotated[
        list[str] | None,
        typer.Option(
            "--org-slug",
            "-o",
            help="Buildkite org slug(s), repeatable or comma-separated",
        ),
    ] = None,
    cache: Annotated[
        bool | None,
        typer.Option("--cache/--no-cache", help="Serve org members from a disk cache"),
    ] = None,
    cache_dir: Annotated[
        Path | None,
        typer.Option("--cache-dir", help="Cache directory (default: ./.cache)"),
    ] = None,
    dedupe: Annotated[
        list[DedupeKey] | None,
        typer.Option("--dedupe", help="Collapse duplicates by email and/or name (repeatable)"),
    ] = None,
    output: Annotated[
        OutputFormat | None,
        typer.Option("--output", help="How to output rows (default: json)"),
    ] = None,
    email: Annotated[
        str | None,
        typer.Option("--email", help="Only report on this email"),
    ] = None,
    csv_file: Annotated[
        Path | None,
        typer.Option("--csv-file", help="CSV output path (default: output.csv)"),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to YAML config file"),
    ] = None,
    debug: Annotated[
        bool | None,
        typer.Option(
            "--debug/--no-debug", help="Debug logging, request dumps and full tracebacks"
        ),
    ] = None,
) -> None:
    """Report Buildkite org members and their duplicates as JSON, CSV or a count."""
    try:
        settings = load_settings(config_path).merged(
            token=api_token,
            org_slugs=split_values(org_slugs),
            cache=cache,
            cache_dir=cache_dir,
            dedupe=[d.value for d in dedupe] if dedupe else None,
            output=output.value if output else None,
            email=email,
            csv_file=csv_file,
            debug=debug,
        )
    except ConfigError as e:
        stderr_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(2) from None

    if not settings.token:
        stderr_console.print(
            "[red]Error: API token required. Set BUILDKITE_TOKEN or use --api-token.[/red]"
        )
        raise typer.Exit(2)
    if not settings.org_slugs:
        stderr_console.print("[red]Error: at least one --org-slug is required.[/red]")
        raise typer.Exit(2)

    setup_logging(settings.debug, settings.token)

    try:
        run(settings)
    except AccounterError as e:
        stderr_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if settings.debug:
            stderr_console.print_exception()
        raise typer.Exit(1) from None
