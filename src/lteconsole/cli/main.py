"""Main CLI application entry point."""

from __future__ import annotations

import typer

from lteconsole.cli.commands import kinds, run

app = typer.Typer(
    name="lteconsole",
    help="LTE console logger - turn eNB shell tables into CSV files.",
    no_args_is_help=True,
)

# Register commands
app.command()(run.run)
app.command()(kinds.kinds)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
