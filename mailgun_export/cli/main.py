"""Mailgun export CLI.

Usage:
    mailgun-export export [--all | --events --stats ...] [OPTIONS]
    mailgun-export events [--type delivered] [OPTIONS]
    mailgun-export stats [--comprehensive] [OPTIONS]
    mailgun-export status
    mailgun-export test

Exit codes: 0=success, 1=error or invalid option
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Coroutine, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from .. import __version__
from ..config import get_settings
from ..config.constants import EVENT_TYPES
from ..config.settings import Settings
from ..core.errors import ConfigurationError, ExportError
from ..core.types import ExportFormat, ResourceType
from ..observability.logger import setup_logging
from ..pipeline import ALL_RESOURCES, ExportPipeline, ExportRunResult
from ..rate_limit.gate import RateGate
from ..storage.file_exporter import FileExporter

T = TypeVar("T")

app = typer.Typer(
    name="mailgun-export",
    help="Export data from the Mailgun API to JSON/CSV files",
    add_completion=False,
)

console = Console()

FormatOption = Annotated[
    ExportFormat | None,
    typer.Option("--format", "-f", help="Export format (default: EXPORT_FORMAT)"),
]
DomainOption = Annotated[str | None, typer.Option("--domain", help="Domain to export (default: MAILGUN_DOMAIN)")]
DateFromOption = Annotated[str | None, typer.Option("--date-from", help="Start date (YYYY-MM-DD)")]
DateToOption = Annotated[str | None, typer.Option("--date-to", help="End date (YYYY-MM-DD)")]
OutputOption = Annotated[Path | None, typer.Option("--output", "-o", help="Output directory")]
QuietOption = Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")]
JsonLogsOption = Annotated[bool, typer.Option("--json-logs", help="Emit JSON log lines on stderr")]


def _configure(
    quiet: bool = False,
    verbose: bool = False,
    json_logs: bool = False,
    **overrides: Any,
) -> Settings:
    """Set up logging and return settings with CLI overrides applied."""
    settings = get_settings()
    updates = {k: v for k, v in overrides.items() if v is not None}
    if updates:
        settings = settings.model_copy(update=updates)

    verbose = verbose or settings.debug
    level = logging.WARNING if quiet else (logging.DEBUG if verbose else logging.INFO)
    setup_logging(level=level, json_format=json_logs, console=None if json_logs else console)
    return settings


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def _validate_date(value: str | None, option: str) -> None:
    if value is None:
        return
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        console.print(f"[red]Invalid {option}: {value}. Use YYYY-MM-DD.[/red]")
        raise typer.Exit(code=1)


def _print_run(run: ExportRunResult) -> None:
    table = Table(title="Export Summary")
    table.add_column("Resource")
    table.add_column("Status")
    table.add_column("Records", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Files")

    for resource, result in run.results.items():
        status = "[green]success[/green]" if result.ok else "[red]failed[/red]"
        files = ", ".join(p.name for p in result.files) or "; ".join(result.errors)
        table.add_row(
            resource.value,
            status,
            str(result.record_count),
            f"{result.duration_seconds:.1f}s",
            files,
        )

    console.print(table)
    console.print(
        f"Total: {run.total_records} records, {run.total_files} files "
        f"([green]{len(run.succeeded)} successful[/green], [red]{len(run.failed)} failed[/red])"
    )
    if run.summary_path:
        console.print(f"[dim]Summary: {run.summary_path}[/dim]")


async def _run_pipeline(settings: Settings, **kwargs: Any) -> ExportRunResult:
    async with ExportPipeline(settings) as pipeline:
        return await pipeline.run(**kwargs)


@app.command()
def export(
    all_: Annotated[bool, typer.Option("--all", help="Export all data types")] = False,
    events: Annotated[bool, typer.Option("--events", help="Export email events")] = False,
    suppressions: Annotated[bool, typer.Option("--suppressions", help="Export suppression lists")] = False,
    domains: Annotated[bool, typer.Option("--domains", help="Export domain configurations")] = False,
    lists: Annotated[bool, typer.Option("--lists", help="Export mailing lists and members")] = False,
    templates: Annotated[bool, typer.Option("--templates", help="Export templates and versions")] = False,
    stats: Annotated[bool, typer.Option("--stats", help="Export statistics and analytics")] = False,
    fmt: FormatOption = None,
    domain: DomainOption = None,
    date_from: DateFromOption = None,
    date_to: DateToOption = None,
    output: OutputOption = None,
    quiet: QuietOption = False,
    verbose: VerboseOption = False,
    json_logs: JsonLogsOption = False,
) -> None:
    """Export Mailgun data. Exports everything when no resource flag is given.

    Examples:
        mailgun-export export --all --format both
        mailgun-export export --events --date-from 2024-01-01
    """
    _validate_date(date_from, "--date-from")
    _validate_date(date_to, "--date-to")
    settings = _configure(
        quiet, verbose, json_logs,
        mailgun_domain=domain, date_from=date_from, date_to=date_to, output_dir=output,
    )

    selected = {
        ResourceType.EVENTS: events,
        ResourceType.SUPPRESSIONS: suppressions,
        ResourceType.DOMAINS: domains,
        ResourceType.LISTS: lists,
        ResourceType.TEMPLATES: templates,
        ResourceType.STATS: stats,
    }
    resources = [r for r, on in selected.items() if on]
    if all_ or not resources:
        resources = ALL_RESOURCES

    if not quiet:
        console.print("[bold]Mailgun Data Export[/bold]")
        console.print(f"Resources: {', '.join(r.value for r in resources)}")

    try:
        run = _run(
            _run_pipeline(
                settings,
                resources=resources,
                fmt=fmt,
                options={ResourceType.STATS: {"comprehensive": True}},
            )
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1)

    _print_run(run)
    if not run.succeeded:
        raise typer.Exit(code=1)


@app.command("events")
def events_command(
    event_type: Annotated[str | None, typer.Option("--type", help="Event type (delivered, failed, ...)")] = None,
    fmt: FormatOption = None,
    domain: DomainOption = None,
    date_from: DateFromOption = None,
    date_to: DateToOption = None,
    output: OutputOption = None,
    quiet: QuietOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Export email events only."""
    if event_type is not None and event_type not in EVENT_TYPES:
        console.print(f"[red]Invalid event type: {event_type}. Use one of: {', '.join(EVENT_TYPES)}[/red]")
        raise typer.Exit(code=1)
    _validate_date(date_from, "--date-from")
    _validate_date(date_to, "--date-to")

    settings = _configure(
        quiet, verbose,
        mailgun_domain=domain, date_from=date_from, date_to=date_to, output_dir=output,
    )
    _export_single(
        settings,
        ResourceType.EVENTS,
        fmt,
        {"event_type": event_type},
    )


@app.command("stats")
def stats_command(
    comprehensive: Annotated[bool, typer.Option("--comprehensive", help="Include engagement, delivery and tag stats")] = False,
    fmt: FormatOption = None,
    domain: DomainOption = None,
    output: OutputOption = None,
    quiet: QuietOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Export statistics and analytics."""
    settings = _configure(quiet, verbose, mailgun_domain=domain, output_dir=output)
    _export_single(settings, ResourceType.STATS, fmt, {"comprehensive": comprehensive})


def _export_single(
    settings: Settings,
    resource: ResourceType,
    fmt: ExportFormat | None,
    options: dict[str, Any],
) -> None:
    try:
        run = _run(
            _run_pipeline(
                settings,
                resources=[resource],
                fmt=fmt,
                options={resource: options},
                write_summary=False,
            )
        )
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=1)

    result = run.results[resource]
    if not result.ok:
        console.print(f"[red]{resource.value} export failed: {'; '.join(result.errors)}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Exported {result.record_count} {resource.value} records[/green]")
    console.print(f"[dim]Files: {', '.join(str(p) for p in result.files)}[/dim]")


@app.command()
def status() -> None:
    """Show rate limit settings, configuration and existing exports."""
    settings = get_settings()
    gate = RateGate(
        requests_per_minute=settings.rate_limit,
        max_concurrency=settings.max_concurrency,
    )
    gate_status = gate.status()

    console.print("[bold]Rate Limiting[/bold]")
    console.print(f"  Requests in last minute: {gate_status['requests_in_last_minute']}")
    console.print(f"  Requests remaining: {gate_status['requests_remaining']}")
    console.print(f"  Rate limit: {gate_status['rate_limit_per_minute']}/min")
    console.print(f"  Max concurrency: {gate_status['max_concurrency']}")

    console.print("\n[bold]Configuration[/bold]")
    console.print(f"  API Key: {settings.masked_api_key()}")
    console.print(f"  Domain: {settings.mailgun_domain or 'Not set'}")
    console.print(f"  Region: {settings.mailgun_region}")
    if not settings.has_credentials:
        console.print("  [yellow]MAILGUN_API_KEY and MAILGUN_DOMAIN must both be set to export[/yellow]")
    console.print(f"  Output Dir: {settings.output_dir}")
    console.print(f"  Export Format: {settings.export_format}")

    export_stats = FileExporter(settings.output_dir).get_export_stats()
    console.print("\n[bold]Exports[/bold]")
    console.print(f"  Files: {export_stats['total_files']} ({export_stats['total_size_mb']} MB)")
    for resource, count in sorted(export_stats["by_type"].items()):
        console.print(f"  {resource}: {count}")


@app.command()
def test(
    verbose: VerboseOption = False,
) -> None:
    """Test API connection and credentials."""
    settings = _configure(verbose=verbose)
    console.print("[bold]Testing Mailgun API connection[/bold]")

    async def _test() -> dict[str, Any]:
        async with ExportPipeline(settings) as pipeline:
            return await pipeline.test_connection()

    try:
        info = _run(_test())
    except ExportError as e:
        console.print(f"[red]Connection test failed: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Connected. Found {info['domain_count']} domains.[/green]")
    for name in info["domains"]:
        console.print(f"  - {name}")
    gate_status = info["gate"]
    console.print(
        f"Rate gate: {gate_status['requests_in_last_minute']}/{gate_status['rate_limit_per_minute']} "
        "requests used in the last minute"
    )


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"mailgun-export {__version__}")


if __name__ == "__main__":
    app()
