"""Run capture command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from lteconsole.cli.common import (
    ConfigFileOption,
    LogFormatOption,
    VerboseOption,
    err_console,
    setup_logging,
)
from lteconsole.core.models.base import RoutingPolicy, SourceStatus


def run(
    ctx: typer.Context,
    sources: Annotated[
        list[str] | None,
        typer.Argument(
            help="Console captures to read: file paths, or '-' for standard input",
            show_default=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for CSV files",
        ),
    ] = None,
    route_by: Annotated[
        RoutingPolicy | None,
        typer.Option(
            "--route-by",
            help="One sink per table kind, or one per distinct column list",
        ),
    ] = None,
    per_source: Annotated[
        bool | None,
        typer.Option(
            "--per-source/--consolidate",
            help="Separate sinks per source instead of merging sources",
        ),
    ] = None,
    reset_schema: Annotated[
        bool | None,
        typer.Option(
            "--reset-schema/--retain-schema",
            help="Forget the header when a table kind recurs",
        ),
    ] = None,
    from_start: Annotated[
        bool | None,
        typer.Option(
            "--from-start/--from-end",
            help="Read files from the beginning or only new content",
        ),
    ] = None,
    follow: Annotated[
        bool | None,
        typer.Option(
            "--follow/--no-follow",
            "-f",
            help="Keep reading files as they grow",
        ),
    ] = None,
    config: ConfigFileOption = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress the run summary",
        ),
    ] = False,
    verbose: VerboseOption = 0,
    log_format: LogFormatOption = "console",
) -> None:
    """Parse eNB console output into CSV tables.

    Examples:

        lteconsole run enb.log

        enb_shell | lteconsole run - --output ./metrics

        lteconsole run /var/log/enb1.log /var/log/enb2.log --follow --from-end

        lteconsole run enb.log --route-by by_schema -vv
    """
    if not sources:
        err_console.print(ctx.get_usage(), markup=False)
        err_console.print("[red]Error:[/red] at least one source is required")
        raise typer.Exit(code=2)

    setup_logging(verbosity=verbose, log_format=log_format)

    from lteconsole.ingest.runner import RunConfig
    from lteconsole.ingest.runner import run as run_capture

    run_config = RunConfig.from_settings(
        sources,
        output_dir=output,
        table_kinds_path=config,
        routing_policy=route_by,
        per_source_sinks=per_source,
        reset_schema_on_recurrence=reset_schema,
        read_from_start=from_start,
        follow=follow,
    )

    result = run_capture(run_config)
    if not result.success:
        err_console.print(f"[red]Configuration error:[/red] {result.error}")
        raise typer.Exit(code=2)
    run_result = result.unwrap()

    if not quiet:
        # Summary goes to stderr so piping stdout stays clean
        err_console.print("\n[bold]Capture Run[/bold]")
        err_console.print("=" * 60)
        if run_result.output_dir:
            err_console.print(f"Output: {run_result.output_dir}")
        err_console.print(f"Policy: {run_config.routing_policy.value}")

        err_console.print()
        err_console.print("[bold]Sources[/bold]")
        err_console.print("-" * 60)
        for source_result in run_result.sources:
            status_icon = {
                SourceStatus.COMPLETED: "[green]✓[/green]",
                SourceStatus.STOPPED: "[yellow]○[/yellow]",
                SourceStatus.FAILED: "[red]✗[/red]",
                SourceStatus.UNAVAILABLE: "[red]✗[/red]",
            }.get(source_result.status, "?")
            err_console.print(
                f"  {status_icon} {source_result.source}: {source_result.status.value} "
                f"(rows: {source_result.rows_written}, dropped: {source_result.rows_dropped})"
            )
            if source_result.error:
                err_console.print(f"      [red]Error: {source_result.error}[/red]")

        if run_result.sinks:
            err_console.print()
            err_console.print("[bold]Sinks[/bold]")
            err_console.print("-" * 60)
            for sink in run_result.sinks:
                err_console.print(
                    f"  {sink.location}: {sink.rows_written} rows, {sink.columns} columns"
                )

        err_console.print()
        err_console.print(f"  Duration: {run_result.duration_seconds:.2f}s")

    if not run_result.success:
        if not quiet:
            err_console.print("[red]Some sources failed[/red]")
        raise typer.Exit(code=1)
