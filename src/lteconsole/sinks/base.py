"""Row sink interfaces.

A sink is an append-only destination for rows of one schema. Backends hand
out sinks by name; the sink router decides which name a table goes to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence


class RowSink(ABC):
    """Append-only destination for ordered rows."""

    name: str

    @property
    @abstractmethod
    def is_new(self) -> bool:
        """True if the sink held no content when it was opened."""

    @abstractmethod
    def existing_header(self) -> list[str] | None:
        """First row already present in the sink, or None if it was empty."""

    @abstractmethod
    def write_row(self, fields: Sequence[str]) -> None:
        """Append one row."""

    @abstractmethod
    def flush(self) -> None:
        """Make everything written so far durable."""

    @abstractmethod
    def close(self) -> None:
        """Release the sink. Closing twice is a no-op."""


class SinkBackend(ABC):
    """Opens sinks by name."""

    @abstractmethod
    def open(self, name: str) -> RowSink:
        """Open (or return the already open) sink called *name*.

        Raises:
            SinkError: if the sink cannot be opened
        """

    @abstractmethod
    def describe(self, name: str) -> str:
        """Human-readable location of sink *name* for logs and summaries."""
