"""Shared models."""

from lteconsole.core.models.base import (
    AssemblerPhase,
    LineTag,
    Result,
    RoutingPolicy,
    Row,
    Schema,
    SourceStatus,
)

__all__ = [
    "AssemblerPhase",
    "LineTag",
    "Result",
    "RoutingPolicy",
    "Row",
    "Schema",
    "SourceStatus",
]
