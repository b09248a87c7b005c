"""CLI command implementations."""

from lteconsole.cli.commands import kinds, run

__all__ = [
    "kinds",
    "run",
]
