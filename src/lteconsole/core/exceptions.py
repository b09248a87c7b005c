"""Exception hierarchy.

Only configuration errors are fatal. Sources and sinks raise their errors
to the component that owns them (supervisor, router), which logs and
carries on.
"""


class LteConsoleError(Exception):
    """Base class for all package errors."""


class ConfigurationError(LteConsoleError):
    """Invalid startup configuration: no sources, bad registry file, bad pattern."""


class SourceUnavailableError(LteConsoleError):
    """An input source could not be opened."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"Source {source!r} unavailable: {reason}")
        self.source = source
        self.reason = reason


class SinkError(LteConsoleError):
    """A sink could not be opened or written."""
