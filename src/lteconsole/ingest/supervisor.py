"""Source supervisor.

Runs one table assembler per input source, each in its own worker thread.
Workers share nothing but the sink router. Every exit path of a worker
(end of stream, read error, stop request) ends with a final flush of its
assembler, and the supervisor closes the router exactly once after all
workers have finished or the shutdown grace period has run out.

Workers are daemon threads: a worker blocked on a read that never returns
(e.g. an idle terminal on stdin) must not keep the process alive after
shutdown.
"""

from __future__ import annotations

import signal
import threading
import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from lteconsole.core.exceptions import SourceUnavailableError
from lteconsole.core.logging import get_logger, log_context
from lteconsole.core.models.base import SourceStatus
from lteconsole.parsing.assembler import TableAssembler
from lteconsole.parsing.registry import TableRegistry
from lteconsole.routing.router import SinkRouter
from lteconsole.sources.base import LineSource

logger = get_logger(__name__)

# How long a forced flush waits for a worker that is mid-line
_FORCED_FLUSH_TIMEOUT = 1.0


@dataclass
class SourceRunResult:
    """Outcome of one supervised source."""

    source: str
    status: SourceStatus
    duration_seconds: float = 0.0
    error: str | None = None
    stats: dict[str, int] = field(default_factory=dict)

    @property
    def rows_written(self) -> int:
        return self.stats.get("rows_flushed", 0)

    @property
    def rows_dropped(self) -> int:
        return self.stats.get("rows_dropped", 0)

    @property
    def ok(self) -> bool:
        return self.status in (SourceStatus.COMPLETED, SourceStatus.STOPPED)


@dataclass
class _Worker:
    source: LineSource
    assembler: TableAssembler
    thread: threading.Thread | None = None
    result: SourceRunResult | None = None
    started: float = 0.0


class SourceSupervisor:
    """Reads several sources concurrently and routes their tables to sinks."""

    def __init__(
        self,
        sources: Sequence[LineSource],
        registry: TableRegistry,
        router: SinkRouter,
        reset_schema_on_recurrence: bool = False,
        flush_on_idle: bool = True,
        shutdown_timeout: float = 5.0,
    ):
        self.registry = registry
        self.router = router
        self.flush_on_idle = flush_on_idle
        self.shutdown_timeout = shutdown_timeout

        self._stop = threading.Event()
        self._shutdown_lock = threading.Lock()
        self._shut_down = False
        self._workers = [
            _Worker(
                source=source,
                assembler=TableAssembler(
                    registry,
                    router,
                    source=source.name,
                    reset_schema_on_recurrence=reset_schema_on_recurrence,
                ),
            )
            for source in sources
        ]

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    @property
    def assemblers(self) -> list[TableAssembler]:
        return [w.assembler for w in self._workers]

    def request_stop(self, reason: str = "requested") -> None:
        """Ask every worker to finish. Safe from a signal handler."""
        if not self._stop.is_set():
            logger.warning("shutdown_requested", reason=reason)
        self._stop.set()

    def run(self, install_signal_handlers: bool = True) -> list[SourceRunResult]:
        """Run all sources to completion or until stopped.

        Args:
            install_signal_handlers: Turn SIGINT/SIGTERM into a stop request
                (only possible from the main thread)

        Returns:
            One result per source, in the order the sources were given
        """
        try:
            with self._signal_handlers(install_signal_handlers):
                self.start()
                while not self._stop.is_set() and self._any_alive():
                    self._stop.wait(0.2)
                if self._stop.is_set():
                    self._drain()
        finally:
            self.shutdown()
        return self.results()

    def start(self) -> None:
        """Start one worker thread per source."""
        for worker in self._workers:
            worker.started = time.monotonic()
            worker.thread = threading.Thread(
                target=self._run_source,
                args=(worker,),
                name=f"source-{worker.source.name}",
                daemon=True,
            )
            worker.thread.start()
        logger.info("supervisor_started", sources=len(self._workers))

    def shutdown(self) -> None:
        """Flush what is left and close all sinks. Only the first call acts."""
        with self._shutdown_lock:
            if self._shut_down:
                return
            self._shut_down = True

        for worker in self._workers:
            if worker.thread is not None and worker.thread.is_alive():
                worker.assembler.flush(timeout=_FORCED_FLUSH_TIMEOUT)
                if worker.assembler.buffered:
                    logger.warning(
                        "buffered_rows_dropped",
                        source=worker.source.name,
                        rows=worker.assembler.buffered,
                    )
        self.router.close_all()

    def results(self) -> list[SourceRunResult]:
        out = []
        for worker in self._workers:
            if worker.result is not None:
                out.append(worker.result)
            else:
                out.append(
                    SourceRunResult(
                        source=worker.source.name,
                        status=SourceStatus.STOPPED,
                        duration_seconds=time.monotonic() - worker.started,
                        error="worker did not finish before shutdown",
                        stats=worker.assembler.stats.to_dict(),
                    )
                )
        return out

    def _any_alive(self) -> bool:
        return any(w.thread is not None and w.thread.is_alive() for w in self._workers)

    def _drain(self) -> None:
        """Wait a bounded time for workers to notice the stop request."""
        deadline = time.monotonic() + self.shutdown_timeout
        for worker in self._workers:
            if worker.thread is None:
                continue
            worker.thread.join(max(0.0, deadline - time.monotonic()))
            if worker.thread.is_alive():
                logger.warning("worker_unfinished", source=worker.source.name)

    def _run_source(self, worker: _Worker) -> None:
        source = worker.source
        assembler = worker.assembler
        status = SourceStatus.COMPLETED
        error: str | None = None

        with log_context(source=source.name):
            try:
                with source:
                    logger.info("source_opened")
                    try:
                        for line in source.read_lines(self._stop):
                            if line is None:
                                if self.flush_on_idle:
                                    assembler.flush()
                                continue
                            assembler.feed(line)
                    finally:
                        assembler.finish()
                if self._stop.is_set():
                    status = SourceStatus.STOPPED
            except SourceUnavailableError as e:
                status = SourceStatus.UNAVAILABLE
                error = str(e)
                logger.error("source_unavailable", reason=e.reason)
            except OSError as e:
                status = SourceStatus.FAILED
                error = str(e)
                logger.error("source_read_failed", error=error)
            except Exception as e:
                status = SourceStatus.FAILED
                error = f"{type(e).__name__}: {e}"
                logger.exception("source_worker_crashed", error=error)

            worker.result = SourceRunResult(
                source=source.name,
                status=status,
                duration_seconds=time.monotonic() - worker.started,
                error=error,
                stats=assembler.stats.to_dict(),
            )
            logger.info("source_finished", status=status.value, **assembler.stats.to_dict())

    @contextmanager
    def _signal_handlers(self, install: bool) -> Iterator[None]:
        if not install or threading.current_thread() is not threading.main_thread():
            yield
            return

        def _handler(signum: int, frame: Any) -> None:
            self.request_stop(reason=signal.Signals(signum).name)

        previous = {sig: signal.signal(sig, _handler) for sig in (signal.SIGINT, signal.SIGTERM)}
        try:
            yield
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)
