"""CSV file sink backend.

Files are opened in append mode so repeated runs keep extending the same
file; a header row is only written into files that were empty on open.
"""

from __future__ import annotations

import csv
import os
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from lteconsole.core.exceptions import SinkError
from lteconsole.core.logging import get_logger
from lteconsole.sinks.base import RowSink, SinkBackend

logger = get_logger(__name__)


class CsvRowSink(RowSink):
    """One CSV file opened for appending."""

    def __init__(self, path: Path, fsync: bool = True):
        self.name = path.name
        self.path = path
        self.fsync = fsync
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._is_new = not path.exists() or path.stat().st_size == 0
            self._header = None if self._is_new else self._read_header(path)
            self._file: TextIO | None = open(path, "a", newline="", encoding="utf-8")
        except OSError as e:
            raise SinkError(f"Cannot open {path}: {e}") from e
        self._writer = csv.writer(self._file)

    @staticmethod
    def _read_header(path: Path) -> list[str]:
        """First row of a non-empty file; [] when it is not readable as CSV text."""
        try:
            with open(path, newline="", encoding="utf-8") as f:
                return next(csv.reader(f), None) or []
        except (UnicodeDecodeError, csv.Error) as e:
            # Never matches a schema, so the router moves to another file
            logger.warning("sink_header_unreadable", path=str(path), error=str(e))
            return []

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def closed(self) -> bool:
        return self._file is None

    def existing_header(self) -> list[str] | None:
        return self._header

    def write_row(self, fields: Sequence[str]) -> None:
        if self._file is None:
            raise SinkError(f"Sink {self.name} is closed")
        try:
            self._writer.writerow(fields)
        except OSError as e:
            raise SinkError(f"Write to {self.path} failed: {e}") from e

    def flush(self) -> None:
        if self._file is None:
            raise SinkError(f"Sink {self.name} is closed")
        try:
            self._file.flush()
            if self.fsync:
                os.fsync(self._file.fileno())
        except OSError as e:
            raise SinkError(f"Flush of {self.path} failed: {e}") from e

    def close(self) -> None:
        if self._file is None:
            return
        f, self._file = self._file, None
        try:
            f.close()
        except OSError as e:
            raise SinkError(f"Close of {self.path} failed: {e}") from e


class CsvSinkBackend(SinkBackend):
    """Sinks are CSV files inside one output directory."""

    def __init__(self, output_dir: Path, fsync: bool = True):
        self.output_dir = Path(output_dir)
        self.fsync = fsync
        self._sinks: dict[str, CsvRowSink] = {}
        self._lock = threading.Lock()

    def path_for(self, name: str) -> Path:
        return self.output_dir / name

    def describe(self, name: str) -> str:
        return str(self.path_for(name))

    def open(self, name: str) -> CsvRowSink:
        with self._lock:
            sink = self._sinks.get(name)
            if sink is None or sink.closed:
                sink = CsvRowSink(self.path_for(name), fsync=self.fsync)
                self._sinks[name] = sink
                logger.debug("csv_sink_opened", path=str(sink.path), new=sink.is_new)
            return sink
