"""List registered table kinds."""

from __future__ import annotations

import typer
from rich.table import Table

from lteconsole.cli.common import ConfigFileOption, console, err_console
from lteconsole.core.exceptions import ConfigurationError


def kinds(config: ConfigFileOption = None) -> None:
    """Show the table kinds and noise patterns that will be recognized."""
    from lteconsole.parsing.registry import load_table_registry

    try:
        registry = load_table_registry(config)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=2) from e

    table = Table(title="Table kinds")
    table.add_column("Kind", style="bold")
    table.add_column("Sink")
    table.add_column("Delimiter")
    table.add_column("Description")
    for kind in registry:
        table.add_row(
            kind.name, kind.sink_name or f"{kind.name}.csv", kind.delimiter, kind.description
        )
    console.print(table)

    if registry.noise_patterns:
        console.print("\n[bold]Noise patterns[/bold]")
        for pattern in registry.noise_patterns:
            console.print(f"  {pattern}", markup=False)
