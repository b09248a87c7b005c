"""Concurrent ingestion of console sources."""

from lteconsole.ingest.runner import (
    RunConfig,
    RunResult,
    SinkSummary,
    build_sources,
    run,
)
from lteconsole.ingest.supervisor import SourceRunResult, SourceSupervisor

__all__ = [
    "RunConfig",
    "RunResult",
    "SinkSummary",
    "SourceRunResult",
    "SourceSupervisor",
    "build_sources",
    "run",
]
