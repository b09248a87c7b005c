"""Line source interface.

A source yields console lines without their line terminator. Live sources
also yield None as an idle heartbeat whenever no new line arrived within
their poll interval, which lets the reader flush and check for shutdown.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any


class LineSource(ABC):
    """Base class for console line sources."""

    def __init__(self, name: str):
        self.name = name

    def open(self) -> None:
        """Acquire the underlying resource.

        Raises:
            SourceUnavailableError: if the source cannot be opened
        """

    def close(self) -> None:
        """Release the underlying resource. Safe to call more than once."""

    @abstractmethod
    def read_lines(self, stop: threading.Event) -> Iterator[str | None]:
        """Yield lines (or None heartbeats) until end of stream or *stop* is set."""

    def __enter__(self) -> LineSource:
        self.open()
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
