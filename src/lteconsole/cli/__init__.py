"""CLI for the LTE console logger.

Usage:
    lteconsole run enb.log
    enb_shell | lteconsole run - -o ./metrics
    lteconsole kinds

Environment:
    Loads .env file from current directory if present.
    LTECONSOLE_* variables override settings (see lteconsole.core.config).
"""

from lteconsole.cli.main import app, main

__all__ = ["app", "main"]
