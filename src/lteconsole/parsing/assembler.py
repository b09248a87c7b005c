"""Table assembler.

Per-source state machine that consumes classified console lines one at a
time and emits row batches to the sink router:

    IDLE --delimiter--> AWAITING_HEADER --header--> IN_DATA_BLOCK

A delimiter in any state flushes the rows buffered for the previous table
and starts a new one. Buffered rows are also flushed on request (idle
source, shutdown) and when the stream ends.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Protocol

from lteconsole.core.logging import get_logger
from lteconsole.core.models.base import AssemblerPhase, LineTag, Row, Schema
from lteconsole.parsing.classifier import Classification, classify
from lteconsole.parsing.registry import TableKind, TableRegistry
from lteconsole.parsing.rows import parse_header, parse_row

logger = get_logger(__name__)


class RowRouter(Protocol):
    """The part of the sink router an assembler talks to."""

    def register(self, kind: TableKind, schema: Schema, source: str | None = None) -> Any:
        """Ensure a sink for (kind, schema) exists with its header; return its handle."""

    def append_rows(self, handle: Any, rows: list[Row]) -> bool:
        """Append rows atomically; False if the write failed."""


@dataclass
class AssemblerStats:
    """Counters for one assembler."""

    lines_seen: int = 0
    noise_lines: int = 0
    tables_seen: int = 0
    rows_parsed: int = 0
    rows_dropped: int = 0
    rows_flushed: int = 0
    rows_lost: int = 0
    flushes: int = 0
    failed_flushes: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "lines_seen": self.lines_seen,
            "noise_lines": self.noise_lines,
            "tables_seen": self.tables_seen,
            "rows_parsed": self.rows_parsed,
            "rows_dropped": self.rows_dropped,
            "rows_flushed": self.rows_flushed,
            "rows_lost": self.rows_lost,
            "flushes": self.flushes,
            "failed_flushes": self.failed_flushes,
        }


class TableAssembler:
    """Turns one source's console lines into rows for the sink router.

    Not shared between sources. ``feed`` and ``flush`` hold an internal lock
    so the supervisor can flush from another thread while the owning worker
    is blocked reading.
    """

    def __init__(
        self,
        registry: TableRegistry,
        router: RowRouter,
        source: str | None = None,
        reset_schema_on_recurrence: bool = False,
    ):
        self.registry = registry
        self.router = router
        self.source = source
        self.reset_schema_on_recurrence = reset_schema_on_recurrence
        self.stats = AssemblerStats()

        self._lock = threading.Lock()
        self._phase = AssemblerPhase.IDLE
        self._kind: TableKind | None = None
        self._schema: Schema | None = None
        self._handle: Any = None
        self._buffer: list[Row] = []
        # Last (schema, handle) learned per kind, used when schemas are retained
        self._learned: dict[str, tuple[Schema, Any]] = {}

    @property
    def phase(self) -> AssemblerPhase:
        return self._phase

    @property
    def current_kind(self) -> TableKind | None:
        return self._kind

    @property
    def current_schema(self) -> Schema | None:
        return self._schema

    @property
    def buffered(self) -> int:
        """Number of rows waiting to be flushed."""
        return len(self._buffer)

    def feed(self, line: str) -> Classification:
        """Consume one console line."""
        with self._lock:
            self.stats.lines_seen += 1
            item = classify(line, self.registry, self._kind)

            if item.tag is LineTag.DELIMITER:
                assert item.kind is not None
                self._start_table(item.kind)
            elif item.tag is LineTag.HEADER:
                self._on_header(item)
            elif item.tag is LineTag.DATA:
                self._on_data(item)
            elif item.tag is LineTag.NOISE:
                self.stats.noise_lines += 1
            return item

    def flush(self, timeout: float | None = None) -> int:
        """Write buffered rows under the current table; state is kept.

        Args:
            timeout: Give up after this many seconds if another thread is
                busy feeding this assembler (None waits indefinitely)

        Returns:
            Number of rows written
        """
        if not self._lock.acquire(timeout=-1 if timeout is None else timeout):
            logger.warning("assembler_flush_timed_out", source=self.source, rows=self.buffered)
            return 0
        try:
            return self._flush()
        finally:
            self._lock.release()

    def finish(self) -> int:
        """Flush on end of stream and return to IDLE."""
        with self._lock:
            written = self._flush()
            self._phase = AssemblerPhase.IDLE
            self._kind = None
            self._schema = None
            self._handle = None
            return written

    def _start_table(self, kind: TableKind) -> None:
        self._flush()
        self.stats.tables_seen += 1
        self._kind = kind
        self._schema = None
        self._handle = None
        if not self.reset_schema_on_recurrence and kind.name in self._learned:
            self._schema, self._handle = self._learned[kind.name]
        self._phase = AssemblerPhase.AWAITING_HEADER
        logger.debug("table_started", kind=kind.name, schema_retained=self._schema is not None)

    def _on_header(self, item: Classification) -> None:
        if self._phase is AssemblerPhase.IDLE or item.kind is not self._kind:
            self.stats.noise_lines += 1
            return
        assert self._kind is not None

        schema = parse_header(item.text)
        if schema != self._schema:
            self._flush()
            self._schema = schema
            self._handle = self.router.register(self._kind, schema, self.source)
            self._learned[self._kind.name] = (schema, self._handle)
        elif self._handle is None:
            self._handle = self.router.register(self._kind, schema, self.source)
        self._phase = AssemblerPhase.IN_DATA_BLOCK

    def _on_data(self, item: Classification) -> None:
        if self._schema is None:
            self.stats.noise_lines += 1
            return

        row = parse_row(item.text, self._schema)
        if row is None:
            self.stats.rows_dropped += 1
            logger.debug("row_dropped", line=item.text, columns=len(self._schema))
            return

        self._buffer.append(row)
        self.stats.rows_parsed += 1
        self._phase = AssemblerPhase.IN_DATA_BLOCK

    def _flush(self) -> int:
        if not self._buffer:
            return 0

        rows, self._buffer = self._buffer, []
        self.stats.flushes += 1
        kind_name = self._kind.name if self._kind else None

        if self._handle is None:
            self.stats.failed_flushes += 1
            self.stats.rows_lost += len(rows)
            logger.warning("rows_dropped_no_sink", kind=kind_name, rows=len(rows))
            return 0

        if not self.router.append_rows(self._handle, rows):
            self.stats.failed_flushes += 1
            self.stats.rows_lost += len(rows)
            return 0

        self.stats.rows_flushed += len(rows)
        return len(rows)
