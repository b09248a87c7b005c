"""Shared CLI utilities and constants."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from lteconsole.core.logging import configure_logging

# Load .env file from current directory (LTECONSOLE_* settings)
load_dotenv()

# Shared console instances; diagnostics and summaries stay off stdout data
console = Console()
err_console = Console(stderr=True)

ConfigFileOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Table kinds YAML file (default: config/table_kinds.yaml)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-v=INFO, -vv=DEBUG)",
    ),
]

LogFormatOption = Annotated[
    str,
    typer.Option(
        "--log-format",
        help="Log output format (console or json)",
    ),
]


def setup_logging(verbosity: int = 0, log_format: str = "console") -> None:
    """Configure structured logging based on verbosity level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG
        log_format: "console" for terminals, "json" for log collectors
    """
    if verbosity >= 2:
        level = "DEBUG"
    elif verbosity >= 1:
        level = "INFO"
    else:
        level = "WARNING"

    configure_logging(
        log_level=level,
        log_format=log_format,
        show_timestamps=verbosity >= 1,
        color=log_format == "console",
    )
