"""Console capture runner.

Wires settings, the table kind registry, sources, sink router, and
supervisor together. Used by the CLI and importable for programmatic use.

Usage:
    from lteconsole.ingest.runner import RunConfig, run

    config = RunConfig.from_settings(["enb1.log", "-"], follow=True)
    result = run(config)
    run_result = result.unwrap()
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path

from lteconsole.core.config import Settings, get_settings
from lteconsole.core.exceptions import ConfigurationError
from lteconsole.core.logging import get_logger
from lteconsole.core.models.base import Result, RoutingPolicy, SourceStatus
from lteconsole.ingest.supervisor import SourceRunResult, SourceSupervisor
from lteconsole.parsing.registry import TableRegistry, load_table_registry
from lteconsole.routing.router import SinkRouter
from lteconsole.sinks.base import SinkBackend
from lteconsole.sinks.csv_sink import CsvSinkBackend
from lteconsole.sources.base import LineSource
from lteconsole.sources.stream import StreamLineSource
from lteconsole.sources.tail import FileTailSource

logger = get_logger(__name__)

STDIN_SOURCE = "-"


@dataclass
class RunConfig:
    """Configuration for one capture run."""

    sources: list[str]
    output_dir: Path = field(default_factory=lambda: Path("./lte_output"))
    table_kinds_path: Path | None = None
    routing_policy: RoutingPolicy = RoutingPolicy.BY_KIND
    per_source_sinks: bool = False
    reset_schema_on_recurrence: bool = False
    read_from_start: bool = True
    follow: bool = False
    poll_interval: float = 0.5
    flush_on_idle: bool = True
    shutdown_timeout: float = 5.0
    install_signal_handlers: bool = True

    @classmethod
    def from_settings(
        cls,
        sources: list[str],
        settings: Settings | None = None,
        **overrides: object,
    ) -> RunConfig:
        """Build a config from settings; keyword overrides that are None are ignored."""
        settings = settings or get_settings()
        values: dict[str, object] = {
            "output_dir": settings.output_dir,
            "table_kinds_path": settings.table_kinds_path,
            "routing_policy": settings.routing_policy,
            "per_source_sinks": settings.per_source_sinks,
            "reset_schema_on_recurrence": settings.reset_schema_on_recurrence,
            "read_from_start": settings.read_from_start,
            "follow": settings.follow,
            "poll_interval": settings.poll_interval,
            "flush_on_idle": settings.flush_on_idle,
            "shutdown_timeout": settings.shutdown_timeout,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(sources=list(sources), **values)  # type: ignore[arg-type]


@dataclass
class SinkSummary:
    """Final state of one sink."""

    name: str
    location: str
    kind: str | None
    columns: int
    rows_written: int
    header_written: bool


@dataclass
class RunResult:
    """Result of a capture run.

    Contains all information needed for CLI display:
    - Overall success/failure
    - Per-source results
    - Per-sink row counts
    """

    success: bool
    duration_seconds: float
    sources: list[SourceRunResult] = field(default_factory=list)
    sinks: list[SinkSummary] = field(default_factory=list)
    output_dir: Path | None = None
    stopped: bool = False

    @property
    def sources_failed(self) -> int:
        return sum(1 for s in self.sources if not s.ok)

    @property
    def total_rows_written(self) -> int:
        return sum(s.rows_written for s in self.sources)

    @property
    def total_rows_dropped(self) -> int:
        return sum(s.rows_dropped for s in self.sources)

    def get_failed_sources(self) -> list[SourceRunResult]:
        return [s for s in self.sources if not s.ok]


def build_sources(config: RunConfig) -> list[LineSource]:
    """Create line sources from source identifiers.

    "-" is standard input, anything else a file path.

    Raises:
        ConfigurationError: if no sources are given or stdin is given twice
    """
    if not config.sources:
        raise ConfigurationError("No sources given")
    if config.sources.count(STDIN_SOURCE) > 1:
        raise ConfigurationError("Standard input can only be read once")

    sources: list[LineSource] = []
    for ident in config.sources:
        if ident == STDIN_SOURCE:
            sources.append(StreamLineSource.stdin())
        else:
            sources.append(
                FileTailSource(
                    Path(ident),
                    from_start=config.read_from_start,
                    follow=config.follow,
                    poll_interval=config.poll_interval,
                )
            )
    return sources


def run(
    config: RunConfig,
    backend: SinkBackend | None = None,
    registry: TableRegistry | None = None,
    sources: list[LineSource] | None = None,
) -> Result[RunResult]:
    """Run a capture.

    Args:
        config: Run configuration
        backend: Sink backend (default: CSV files in config.output_dir)
        registry: Table kinds (default: loaded from config.table_kinds_path)
        sources: Ready-made line sources instead of config.sources

    Returns:
        Result.fail on configuration errors, otherwise Result.ok with the
        RunResult (which carries its own success flag)
    """
    start_time = time.time()
    try:
        line_sources = sources if sources else build_sources(config)
        registry = registry or load_table_registry(config.table_kinds_path)
    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        return Result.fail(str(e))

    if backend is None:
        backend = CsvSinkBackend(config.output_dir)
    router = SinkRouter(backend, policy=config.routing_policy, per_source=config.per_source_sinks)
    supervisor = SourceSupervisor(
        line_sources,
        registry,
        router,
        reset_schema_on_recurrence=config.reset_schema_on_recurrence,
        flush_on_idle=config.flush_on_idle,
        shutdown_timeout=config.shutdown_timeout,
    )

    logger.info(
        "run_started",
        sources=[s.name for s in line_sources],
        policy=config.routing_policy.value,
        kinds=[k.name for k in registry],
    )
    source_results = supervisor.run(install_signal_handlers=config.install_signal_handlers)

    sinks = [
        SinkSummary(
            name=h.name,
            location=h.location,
            kind=h.key.kind,
            columns=len(h.key.schema),
            rows_written=h.rows_written,
            header_written=h.header_written,
        )
        for h in router.handles
    ]
    result = RunResult(
        success=all(
            s.status not in (SourceStatus.FAILED, SourceStatus.UNAVAILABLE) for s in source_results
        ),
        duration_seconds=time.time() - start_time,
        sources=source_results,
        sinks=sinks,
        output_dir=config.output_dir if isinstance(backend, CsvSinkBackend) else None,
        stopped=supervisor.stop_requested,
    )
    logger.info(
        "run_finished",
        success=result.success,
        rows_written=result.total_rows_written,
        rows_dropped=result.total_rows_dropped,
        duration_seconds=round(result.duration_seconds, 3),
    )
    return Result.ok(result)
