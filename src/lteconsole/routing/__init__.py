"""Routing of parsed tables onto sinks."""

from lteconsole.routing.router import (
    RouteKey,
    SinkHandle,
    SinkRouter,
    safe_name,
    schema_hash,
    source_prefix,
)

__all__ = [
    "RouteKey",
    "SinkHandle",
    "SinkRouter",
    "safe_name",
    "schema_hash",
    "source_prefix",
]
