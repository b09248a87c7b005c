"""Sink router.

Maps (table kind, schema, source) onto sinks, opening each sink lazily the
first time a header routes to it. The key->handle map is shared by every
worker and guarded by one lock; each handle has its own lock so a batch of
rows is appended as one uninterrupted sequence.

Routing policies:
- by_kind: one sink per table kind, named after the kind. A kind that shows
  up with a different column list (e.g. after a firmware upgrade) gets a
  second sink suffixed with the schema hash.
- by_schema: one sink per distinct column list, named after the schema hash.

With per_source enabled the source name becomes part of the key and of the
sink name, otherwise sources writing the same table are consolidated.
"""

from __future__ import annotations

import hashlib
import json
import re
import threading
from dataclasses import dataclass, field
from pathlib import PurePath

from lteconsole.core.exceptions import SinkError
from lteconsole.core.logging import get_logger
from lteconsole.core.models.base import RoutingPolicy, Row, Schema
from lteconsole.parsing.registry import TableKind
from lteconsole.sinks.base import RowSink, SinkBackend

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def schema_hash(schema: Schema, length: int = 12) -> str:
    """Stable short hash of an ordered column list."""
    payload = json.dumps(list(schema), ensure_ascii=False)
    return hashlib.sha256(payload.encode()).hexdigest()[:length]


def safe_name(value: str) -> str:
    """File-name-safe version of a source identifier."""
    cleaned = _UNSAFE_CHARS.sub("_", PurePath(value).name or value).strip("_")
    return cleaned or "source"


def source_prefix(source: str) -> str:
    """Sink name prefix for a source: readable basename plus a hash of the full identifier.

    Two sources with the same basename in different directories get different
    prefixes.
    """
    digest = hashlib.sha256(source.encode()).hexdigest()[:8]
    return f"{safe_name(source)}-{digest}"


@dataclass(frozen=True)
class RouteKey:
    """Identity of a sink. Fields the policy ignores are None."""

    kind: str | None
    schema: Schema
    source: str | None = None


@dataclass
class SinkHandle:
    """A sink owned by the router."""

    key: RouteKey
    name: str
    location: str
    sink: RowSink
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    header_written: bool = False
    rows_written: int = 0
    closed: bool = False

    @property
    def is_new(self) -> bool:
        return self.sink.is_new


class SinkRouter:
    """Thread-safe (kind, schema, source) -> sink mapping."""

    def __init__(
        self,
        backend: SinkBackend,
        policy: RoutingPolicy = RoutingPolicy.BY_KIND,
        per_source: bool = False,
    ):
        self.backend = backend
        self.policy = RoutingPolicy(policy)
        self.per_source = per_source
        self._lock = threading.Lock()
        self._handles: dict[RouteKey, SinkHandle] = {}
        self._names: dict[str, RouteKey] = {}
        self._closed = False

    @property
    def handles(self) -> list[SinkHandle]:
        with self._lock:
            return list(self._handles.values())

    @property
    def closed(self) -> bool:
        return self._closed

    def route_key(self, kind: TableKind, schema: Schema, source: str | None = None) -> RouteKey:
        """Key for a table under the configured policy."""
        source_part = source if self.per_source else None
        if self.policy is RoutingPolicy.BY_SCHEMA:
            return RouteKey(kind=None, schema=tuple(schema), source=source_part)
        return RouteKey(kind=kind.name, schema=tuple(schema), source=source_part)

    def _base_name(self, key: RouteKey, preferred: str | None) -> str:
        if key.kind is None:
            name = f"schema-{schema_hash(key.schema)}.csv"
        else:
            name = preferred or f"{key.kind}.csv"
        if key.source is not None:
            name = f"{source_prefix(key.source)}_{name}"
        return name

    @staticmethod
    def _drift_name(name: str, schema: Schema) -> str:
        path = PurePath(name)
        return f"{path.stem}-{schema_hash(schema)}{path.suffix or '.csv'}"

    def _open_for(self, key: RouteKey, name: str) -> RowSink | None:
        """Open *name* for *key* unless it is taken by, or holds, another schema."""
        if name in self._names and self._names[name] != key:
            return None
        sink = self.backend.open(name)
        header = sink.existing_header()
        if header is not None and tuple(header) != key.schema:
            if name not in self._names:
                sink.close()
            return None
        return sink

    def ensure_sink(self, key: RouteKey, preferred_name: str | None = None) -> SinkHandle:
        """Return the handle for *key*, opening its sink on first use.

        Raises:
            SinkError: if the router is closed or the sink cannot be opened
        """
        with self._lock:
            handle = self._handles.get(key)
            if handle is not None:
                return handle
            if self._closed:
                raise SinkError("Sink router is closed")

            name = self._base_name(key, preferred_name)
            sink = self._open_for(key, name)
            if sink is None:
                drift = self._drift_name(name, key.schema)
                logger.warning("schema_drift", kind=key.kind, sink=name, routed_to=drift)
                name = drift
                sink = self._open_for(key, name)
                if sink is None:
                    raise SinkError(f"Sink {name} already holds a different schema")

            handle = SinkHandle(
                key=key,
                name=name,
                location=self.backend.describe(name),
                sink=sink,
            )
            self._handles[key] = handle
            self._names[name] = key
            logger.info("sink_opened", sink=handle.location, new=sink.is_new, kind=key.kind)
            return handle

    def write_header_if_new(self, handle: SinkHandle, schema: Schema) -> bool:
        """Write the schema as header row iff the sink was empty when opened.

        Returns:
            True if the header was written by this call
        """
        with handle.lock:
            if handle.header_written or handle.closed or not handle.is_new:
                return False
            try:
                handle.sink.write_row(list(schema))
                handle.sink.flush()
            except (SinkError, OSError) as e:
                logger.error("sink_header_failed", sink=handle.location, error=str(e))
                return False
            handle.header_written = True
            return True

    def append_rows(self, handle: SinkHandle, rows: list[Row]) -> bool:
        """Append *rows* as one sequence, then flush.

        Errors are logged here and reported as False; they never propagate.
        """
        if not rows:
            return True
        with handle.lock:
            if handle.closed:
                logger.warning("sink_closed", sink=handle.location, rows=len(rows))
                return False
            try:
                for row in rows:
                    handle.sink.write_row(row)
                handle.sink.flush()
            except (SinkError, OSError) as e:
                logger.error(
                    "sink_write_failed", sink=handle.location, rows=len(rows), error=str(e)
                )
                return False
            handle.rows_written += len(rows)
        logger.info("rows_written", sink=handle.location, rows=len(rows))
        return True

    def register(
        self, kind: TableKind, schema: Schema, source: str | None = None
    ) -> SinkHandle | None:
        """Ensure the sink for a newly seen header exists and carries the header.

        Returns:
            The handle, or None if the sink could not be opened
        """
        key = self.route_key(kind, schema, source)
        try:
            handle = self.ensure_sink(key, preferred_name=kind.sink_name)
        except (SinkError, OSError) as e:
            logger.error("sink_open_failed", kind=kind.name, error=str(e))
            return None
        self.write_header_if_new(handle, schema)
        return handle

    def close_all(self) -> None:
        """Close every sink. Only the first call does anything."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            handles = list(self._handles.values())

        for handle in handles:
            with handle.lock:
                if handle.closed:
                    continue
                handle.closed = True
                try:
                    handle.sink.close()
                except (SinkError, OSError) as e:
                    logger.error("sink_close_failed", sink=handle.location, error=str(e))
        logger.info("sinks_closed", count=len(handles))
