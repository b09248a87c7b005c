"""In-memory sink backend for programmatic use and tests."""

from __future__ import annotations

import threading
from collections.abc import Sequence

from lteconsole.core.exceptions import SinkError
from lteconsole.sinks.base import RowSink, SinkBackend


class MemoryRowSink(RowSink):
    """Keeps rows in a list. Pre-existing rows model a non-empty file."""

    def __init__(self, name: str, existing: list[list[str]] | None = None):
        self.name = name
        self.rows: list[list[str]] = [list(r) for r in existing or []]
        self._is_new = not self.rows
        self.flush_count = 0
        self.close_count = 0
        self.closed = False

    @property
    def is_new(self) -> bool:
        return self._is_new

    def existing_header(self) -> list[str] | None:
        if self._is_new:
            return None
        return self.rows[0]

    def write_row(self, fields: Sequence[str]) -> None:
        if self.closed:
            raise SinkError(f"Sink {self.name} is closed")
        self.rows.append(list(fields))

    def flush(self) -> None:
        if self.closed:
            raise SinkError(f"Sink {self.name} is closed")
        self.flush_count += 1

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.close_count += 1


class MemorySinkBackend(SinkBackend):
    """Sinks live in a dict keyed by name."""

    def __init__(self, existing: dict[str, list[list[str]]] | None = None):
        self._existing = existing or {}
        self.sinks: dict[str, MemoryRowSink] = {}
        self._lock = threading.Lock()

    def describe(self, name: str) -> str:
        return f"memory://{name}"

    def open(self, name: str) -> MemoryRowSink:
        with self._lock:
            sink = self.sinks.get(name)
            if sink is None or sink.closed:
                prior = sink.rows if sink is not None else self._existing.get(name)
                sink = MemoryRowSink(name, prior)
                self.sinks[name] = sink
            return sink

    def rows(self, name: str) -> list[list[str]]:
        """All rows of sink *name*, header included."""
        sink = self.sinks.get(name)
        return list(sink.rows) if sink else []
