"""Row sink backends."""

from lteconsole.sinks.base import RowSink, SinkBackend
from lteconsole.sinks.csv_sink import CsvRowSink, CsvSinkBackend
from lteconsole.sinks.memory import MemoryRowSink, MemorySinkBackend

__all__ = [
    "CsvRowSink",
    "CsvSinkBackend",
    "MemoryRowSink",
    "MemorySinkBackend",
    "RowSink",
    "SinkBackend",
]
